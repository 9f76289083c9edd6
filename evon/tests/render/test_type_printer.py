# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evon.parser import parse_program
from evon.printer import print_field, print_signature, print_type


def _type_of(text: str):
	f = parse_program(f"package app\n\ntype X {text}\n", path="app.go")
	return next(f.type_decls()).specs[0].type


@pytest.mark.parametrize(
	"text",
	[
		"int",
		"util.Options",
		"*[]map[string]int",
		"[4]byte",
		"[]*util.Options",
		"chan<- int",
		"<-chan struct{}",
		"func()",
		"func(int, string) error",
		"func(a, b int, c ...string) (n int, err error)",
		"func() (int, error)",
		"func(func(int) bool) func()",
		"interface{}",
		"interface{ Close() error }",
		"List[int, util.Options]",
	],
)
def test_type_expressions_print_as_written(text: str) -> None:
	assert print_type(_type_of(text)) == text


def test_parentheses_are_kept() -> None:
	assert print_type(_type_of("(int)")) == "(int)"


def test_signature_and_field_helpers() -> None:
	ft = _type_of("func(uid int, addr string) (ok bool)")
	assert print_signature(ft) == "(uid int, addr string) (ok bool)"
	assert [print_field(f) for f in ft.params] == ["uid int", "addr string"]

	grouped = _type_of("func(a, b int)")
	assert print_field(grouped.params[0]) == "a, b int"
