# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from evon.annotation import MISPLACED_MESSAGE
from evon.config import GeneratorConfig
from evon.core.diagnostics import DiagnosticKind
from evon.policy import DeliveryMode
from evon.printer import print_type
from evon.test_support import analyze, analyze_source, write_go_module


def _messages(diags) -> list:
	return [(d.kind, d.message) for d in diags]


def test_plain_callable_handler(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// LoginHandler is called after a successful login.
// @evon()
type LoginHandler func(uid int, addr string)
""",
	)
	assert not diags
	((decl, ev),) = result.events()
	assert decl.annotation.flags == frozenset()
	assert ev.name == "LoginHandler" and ev.is_callable
	(sig,) = ev.signatures
	assert sig.name == ""
	assert [(g.names, print_type(g.type_expr)) for g in sig.params] == [(("uid",), "int"), (("addr",), "string")]
	policy = decl.annotation.policy
	assert policy.delivery is DeliveryMode.SYNC
	assert not (policy.wait or policy.lock or policy.pause or policy.unsub or policy.catch)
	assert not result.need_sync and result.imports == [] and result.sync_alias is None


def test_queue_wait_catch_interface_handler(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// @evon(queue, wait, catch)
type StatsHandler interface {
	Hit(path string) error
	Reset()
}
""",
	)
	assert not diags
	((decl, ev),) = result.events()
	assert not ev.is_callable
	assert [s.name for s in ev.signatures] == ["Hit", "Reset"]
	policy = decl.annotation.policy
	assert policy.delivery is DeliveryMode.QUEUE and policy.wait and policy.catch
	assert result.need_sync and result.sync_alias == "sync"
	assert [r.path for r in result.imports] == ["sync"]


def test_adding_spawn_to_queue_is_rejected(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// @evon(queue, wait, catch, spawn)
type StatsHandler interface {
	Hit(path string)
}
""",
	)
	assert _messages(diags) == [(DiagnosticKind.FLAG_CONFLICT, 'Flag "spawn" cannot coexist with "queue"')]
	assert result.declarations == []


@pytest.mark.parametrize(
	"name,ok",
	[("LoginHandler", True), ("Handler", False), ("Login", False), ("loginHandler", True)],
)
def test_naming_rule(tmp_path: Path, name: str, ok: bool) -> None:
	_, diags, _ = analyze_source(tmp_path, f"package app\n\n// @evon()\ntype {name} func()\n")
	if ok:
		assert not diags
	else:
		(d,) = diags
		assert d.kind is DiagnosticKind.NAMING_VIOLATION
		assert d.message == f'Handler type "{name}" name must have suffix "Handler" (and be longer than that)'
		assert d.span.format(with_file=False) == "4:6"


def test_custom_handler_suffix(tmp_path: Path) -> None:
	config = GeneratorConfig(handler_suffix="Func", event_suffix="Signal")
	_, diags, _ = analyze_source(
		tmp_path,
		"package app\n\n// @evon()\ntype LoginFunc func()\n\n// @evon()\ntype LoginHandler func()\n",
		config=config,
	)
	assert [d.message for d in diags] == ['Handler type "LoginHandler" name must have suffix "Func" (and be longer than that)']


def test_group_annotation_and_spec_override(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// @evon(lock)
type (
	OpenHandler func(path string)

	// CloseHandler is called on close.
	// @evon(spawn)
	CloseHandler func(path string)

	// FlushHandler has a doc comment without a marker.
	FlushHandler func()

	// @evon(bogus)
	BrokenHandler func()
)
""",
	)
	assert _messages(diags) == [(DiagnosticKind.INVALID_FLAG, 'Invalid flag "bogus"')]
	group, own = result.declarations
	assert group.annotation.flags == frozenset({"lock"})
	assert [e.name for e in group.events] == ["OpenHandler", "FlushHandler"]
	assert own.annotation.flags == frozenset({"spawn"})
	assert [e.name for e in own.events] == ["CloseHandler"]


def test_misplaced_annotations(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// @evon(lock)
var counter int

// @evon()
type LoginHandler func()

// @evon()
type PayloadHandler struct{}

type TrailHandler func() // @evon()

// @evon(spawn)
func helper() {}
""",
	)
	assert [(d.kind, d.span.line) for d in diags] == [
		(DiagnosticKind.MISPLACED_ANNOTATION, 3),
		(DiagnosticKind.UNSUPPORTED_SHAPE, 9),
		(DiagnosticKind.MISPLACED_ANNOTATION, 12),
		(DiagnosticKind.MISPLACED_ANNOTATION, 14),
	]
	assert all(d.message == MISPLACED_MESSAGE for d in diags)
	assert [e.name for _, e in result.events()] == ["LoginHandler"]


def test_unresolved_and_empty_handlers(tmp_path: Path) -> None:
	result, diags, program = analyze_source(
		tmp_path,
		"""package app

// @evon()
type MissingHandler Missing

// @evon()
type EmptyHandler interface{}

// @evon()
type BadEmbedHandler interface {
	Payload
}

// @evon()
type GenericHandler[T any] func(v T)

type Payload struct{}
""",
	)
	assert _messages(diags) == [
		(DiagnosticKind.UNRESOLVED_TYPE, 'Cannot resolve type "MissingHandler" due to compilation errors'),
		(DiagnosticKind.EMPTY_INTERFACE, 'Interface type "EmptyHandler" has no usable methods'),
		(DiagnosticKind.UNRESOLVABLE_EMBEDDING, 'Interface type "BadEmbedHandler": Embedded type "Payload" is not an interface'),
		(DiagnosticKind.UNSUPPORTED_SHAPE, 'Handler type "GenericHandler" must not have type parameters'),
	]
	assert result.declarations == []
	# Loader problems stay on the program.
	assert [d.message for d in program.errors] == ["undefined: Missing"]


def test_errors_do_not_stop_sibling_declarations(tmp_path: Path) -> None:
	result, diags, _ = analyze_source(
		tmp_path,
		"""package app

// @evon(wait)
type FirstHandler func()

// @evon(spawn)
type SecondHandler func()
""",
	)
	assert [d.kind for d in diags] == [DiagnosticKind.FLAG_DEPENDENCY]
	assert [e.name for _, e in result.events()] == ["SecondHandler"]
	# Nothing is finalized when the run has errors.
	assert result.imports == []


def test_foreign_types_are_qualified_with_aliases(tmp_path: Path) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": """package app

import (
	util "example.com/app/a/util"
	util2 "example.com/app/b/util"
)

func util1() {}

// @evon(lock)
type SyncHandler func(a util.A, b util2.B, c []util.A)

// @evon()
type RelayHandler util2.Relay
""",
			"a/util/util.go": "package util\n\ntype A int\n",
			"b/util/util.go": "package util\n\ntype B int\n\ntype Relay func(b B, opts ...Option) error\n\ntype Option func(*B)\n",
		},
	)
	result, diags, _ = analyze(tmp_path)
	assert not diags
	assert [(r.path, r.alias) for r in result.imports] == [
		("sync", "sync"),
		("example.com/app/a/util", "util"),
		("example.com/app/b/util", "util2"),
	]
	sync_ev, relay_ev = [e for _, e in result.events()]
	assert [print_type(g.type_expr) for g in sync_ev.signatures[0].params] == ["util.A", "util2.B", "[]util.A"]
	relay = relay_ev.signatures[0]
	assert relay_ev.module == "example.com/app/b/util"
	assert [print_type(g.type_expr) for g in relay.params] == ["util2.B", "util2.Option"]
	assert relay.variadic
	assert [print_type(g.type_expr) for g in relay.results] == ["error"]


def test_import_aliases_avoid_generated_names(tmp_path: Path) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": """package app

import "example.com/app/events"

// @evon()
type LoginHandler func(p loginEventSub.Payload)
""",
			"events/p.go": "package loginEventSub\n\ntype Payload int\n",
		},
	)
	result, diags, _ = analyze(tmp_path)
	assert not diags
	(rec,) = result.imports
	assert rec.name == "loginEventSub"
	assert rec.alias == "loginEventSub1"


def test_embedding_from_package_with_computed_array_lengths(tmp_path: Path) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": """package app

import "example.com/app/web"

// @evon()
type ServeHandler interface {
	web.Handler
}
""",
			"web/server.go": """package web

import "unsafe"

const TimeFormat = "Mon, 02 Jan 2006 15:04:05 GMT"

type Handler interface {
	Serve(path string)
}

type conn struct {
	dateBuf [len(TimeFormat)]byte
	sizes   [unsafe.Sizeof(uintptr(0)) * 2]int
}

func (c *conn) serve() {
	var buf [len(TimeFormat)]byte
	_ = buf
}
""",
		},
	)
	result, diags, program = analyze(tmp_path)
	assert not diags, [d.format() for d in diags]
	((_, ev),) = result.events()
	assert [s.name for s in ev.signatures] == ["Serve"]
	assert program.foreign_errors == {}


def test_unresolved_type_lists_load_errors_of_imports(tmp_path: Path) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": """package app

import "example.com/app/web"

// @evon()
type ServeHandler interface {
	web.Handler
}
""",
			"web/handler.go": "package web\n\ntype Handler interface {\n\tServe(path string) #\n}\n",
		},
	)
	_, diags, program = analyze(tmp_path)
	(diag,) = diags
	assert diag.kind is DiagnosticKind.UNRESOLVED_TYPE
	assert diag.message == 'Cannot resolve type "ServeHandler" due to compilation errors'
	assert list(program.foreign_errors) == ["example.com/app/web"]
	(foreign,) = program.foreign_errors["example.com/app/web"]
	assert foreign.kind is DiagnosticKind.PARSE_ERROR
	assert diag.notes[-1].startswith("example.com/app/web: ")
	assert diag.notes[-1].endswith("handler.go:4:21: unexpected character '#'")
