# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from evon.config import GeneratorConfig
from evon.render.model import (
	build_gen_file,
	event_names,
	generated_names,
	method_name,
	prefix_ident,
)
from evon.test_support import analyze_source


def _gen(tmp_path: Path, source: str, config: GeneratorConfig | None = None):
	config = config or GeneratorConfig()
	result, diags, _ = analyze_source(tmp_path, source, config=config)
	assert not diags, [d.format() for d in diags]
	return build_gen_file(result, config)


def test_prefix_ident_follows_exportedness() -> None:
	assert prefix_ident("new", "LoginEvent") == "NewLoginEvent"
	assert prefix_ident("new", "loginEvent") == "newLoginEvent"
	assert prefix_ident("nop", "StatsHandler") == "NopStatsHandler"


def test_event_names() -> None:
	config = GeneratorConfig()
	names = event_names("LoginHandler", is_callable=True, config=config)
	assert (names.base, names.type, names.ctor, names.sub, names.nop) == (
		"Login",
		"LoginEvent",
		"NewLoginEvent",
		"loginEventSub",
		None,
	)
	names = event_names("statsHandler", is_callable=False, config=GeneratorConfig(event_suffix="Signal"))
	assert names.top_level() == ["statsSignal", "newStatsSignal", "statsSignalSub", "nopStatsHandler"]


def test_method_names() -> None:
	assert method_name("") == "Emit"
	assert method_name("Hit") == "EmitHit"
	assert method_name("reset") == "emitReset"


def test_generated_names_include_sync_aliases() -> None:
	assert generated_names([], GeneratorConfig()) == {"evonMutex", "evonWaitGroup"}


@pytest.mark.parametrize(
	"signature,params,args",
	[
		("func(uid int, addr string)", "uid int, addr string", "uid, addr"),
		("func(a, _ int, b string)", "a, _1 int, b string", "a, _1, b"),
		("func(int, string)", "_1 int, _2 string", "_1, _2"),
		("func(_1 int, _ string)", "_1 int, _2 string", "_1, _2"),
		("func(format string, args ...interface{})", "format string, args ...interface{}", "format, args..."),
		("func(...int)", "_1 ...int", "_1..."),
		("func()", "", ""),
	],
)
def test_parameter_lists(tmp_path: Path, signature: str, params: str, args: str) -> None:
	gen = _gen(tmp_path, f"package app\n\n// @evon()\ntype LoginHandler {signature}\n")
	(fn,) = gen.events[0].funcs
	assert (fn.params, fn.args) == (params, args)


def test_returns_are_blank_named(tmp_path: Path) -> None:
	gen = _gen(
		tmp_path,
		"""package app

// @evon()
type StatsHandler interface {
	Hit(path string) error
	Count() (a, b int, err error)
	Reset()
}
""",
	)
	ev = gen.events[0]
	assert [(f.name, f.method, f.returns) for f in ev.funcs] == [
		("Hit", "EmitHit", "_ error"),
		("Count", "EmitCount", "_, _ int, _ error"),
		("Reset", "EmitReset", ""),
	]
	assert not ev.is_callable and ev.names.nop == "NopStatsHandler"


def test_locals_avoid_parameter_names(tmp_path: Path) -> None:
	gen = _gen(
		tmp_path,
		"""package app

// @evon()
type ClashHandler interface {
	A(ev string, sub int)
	B(wg, wg1 bool)
}
""",
	)
	assert gen.events[0].dedups == {"ev": "ev1", "sub": "sub1", "wg": "wg2", "fn": "fn"}


def test_sync_parameter_renames_sync_types(tmp_path: Path) -> None:
	gen = _gen(tmp_path, "package app\n\n// @evon(lock)\ntype LoginHandler func(sync string)\n")
	assert gen.sync_alias == "sync"
	assert gen.rename_sync_types
	assert gen.sync_type("Mutex") == "evonMutex"

	plain = _gen(tmp_path / "plain", "package app\n\n// @evon(lock)\ntype LoginHandler func(s string)\n")
	assert not plain.rename_sync_types
	assert plain.sync_type("WaitGroup") == "sync.WaitGroup"


def test_flags_and_imports(tmp_path: Path) -> None:
	gen = _gen(tmp_path, "package app\n\n// @evon( wait ,spawn,, unsub )\ntype LoginHandler func()\n")
	ev = gen.events[0]
	assert ev.flags == ("spawn", "unsub", "wait")
	assert ev.flags_lit == "(spawn, unsub, wait)"
	assert [(i.path, i.alias) for i in gen.imports] == [("sync", None)]
	assert gen.package == "app"
