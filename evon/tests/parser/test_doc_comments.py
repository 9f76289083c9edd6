# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from evon.packages.build_constraints import evaluate
from evon.parser import parse_program


def test_doc_comment_attaches_to_single_declaration() -> None:
	source = """package app

// LoginHandler is called after login.
// @evon(spawn)
type LoginHandler func(uid int, addr string)

// @evon()

type Detached func()
"""
	f = parse_program(source, path="app.go")
	login, detached = list(f.type_decls())
	assert login.doc is not None
	assert login.doc.text == "// LoginHandler is called after login.\n// @evon(spawn)"
	assert login.specs[0].doc is None
	assert not login.grouped
	# A blank line separates the comment from the declaration.
	assert detached.doc is None
	assert len(f.comments) == 2


def test_grouped_declaration_docs() -> None:
	source = """package app

// @evon(lock)
type (
	// OpenHandler opens.
	OpenHandler func(path string)

	CloseHandler func(path string) // @evon(spawn)
)
"""
	f = parse_program(source, path="app.go")
	(decl,) = list(f.type_decls())
	assert decl.grouped
	assert decl.doc is not None and decl.doc.text == "// @evon(lock)"
	open_spec, close_spec = decl.specs
	assert open_spec.doc is not None and open_spec.doc.text == "// OpenHandler opens."
	assert close_spec.doc is None
	trailing = f.comments[-1]
	assert trailing.trailing and trailing.text == "// @evon(spawn)"


def test_adjacent_lines_form_one_group() -> None:
	source = """package app

/* first */
// second

// third
type X func()
"""
	f = parse_program(source, path="app.go")
	assert [g.text for g in f.comments] == ["/* first */\n// second", "// third"]
	assert next(f.type_decls()).doc is f.comments[1]


def test_go_build_line() -> None:
	source = """//go:build linux && !cgo

package app
"""
	assert parse_program(source, path="app.go").build_constraint == "linux && !cgo"


def test_plus_build_lines_are_translated() -> None:
	source = """// +build linux,amd64 darwin
// +build !purego

package app
"""
	expr = parse_program(source, path="app.go").build_constraint
	assert expr is not None
	assert evaluate(expr, frozenset({"darwin"}))
	assert evaluate(expr, frozenset({"linux", "amd64"}))
	assert not evaluate(expr, frozenset({"linux"}))
	assert not evaluate(expr, frozenset({"darwin", "purego"}))


def test_build_comment_after_package_clause_is_ignored() -> None:
	source = """package app

//go:build ignore
"""
	assert parse_program(source, path="app.go").build_constraint is None
