# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from evon.cli import main
from evon.render.emitter import GENERATED_HEADER
from evon.render.summary import NO_HANDLERS
from evon.test_support import write_go_module

LOGIN = """package app

// @evon(spawn, wait)
type LoginHandler func(uid int)
"""


def _run(tmp_path: Path, *extra: str) -> int:
	return main([str(tmp_path), "--goroot", str(tmp_path / "nogo"), *extra])


def test_generates_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN})
	assert _run(tmp_path) == 0
	out_path = tmp_path / "evon_gen.go"
	captured = capsys.readouterr()
	assert captured.out == f"Generated {out_path}\n"
	assert captured.err == ""
	text = out_path.read_text(encoding="utf-8")
	assert text.startswith(GENERATED_HEADER + "\n")
	assert "func (ev *LoginEvent) Emit(uid int) {\n" in text


def test_rerun_with_generated_file_present(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN})
	assert _run(tmp_path) == 0
	first = (tmp_path / "evon_gen.go").read_text(encoding="utf-8")
	capsys.readouterr()

	assert _run(tmp_path) == 0
	captured = capsys.readouterr()
	assert captured.err == ""
	assert (tmp_path / "evon_gen.go").read_text(encoding="utf-8") == first


def test_invalid_flag_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": "package app\n\n// @evon(lock, bogus)\ntype LoginHandler func()\n"})
	assert _run(tmp_path) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	(line,) = captured.err.splitlines()
	assert line.startswith("[evon] ")
	assert line.endswith('app.go:3:16: Invalid flag "bogus"')
	assert not (tmp_path / "evon_gen.go").exists()


def test_notes_are_printed_under_their_diagnostic(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": "package app\n\n// @evon() @evon(lock)\ntype LoginHandler func()\n"})
	assert _run(tmp_path) == 1
	lines = capsys.readouterr().err.splitlines()
	assert len(lines) == 2
	assert lines[0].endswith("app.go:3:4: Redundant annotation at 3:12")
	assert lines[1] == "[evon]   note: first annotation at 3:4"


def test_no_handlers_removes_stale_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN})
	assert _run(tmp_path) == 0
	assert (tmp_path / "evon_gen.go").exists()
	capsys.readouterr()

	# The stale file now refers to a handler type that is gone; its load
	# errors are not reported.
	(tmp_path / "app.go").write_text("package app\n\ntype Other int\n", encoding="utf-8")
	assert _run(tmp_path) == 0
	captured = capsys.readouterr()
	assert captured.out == NO_HANDLERS + "\n"
	assert captured.err == ""
	assert not (tmp_path / "evon_gen.go").exists()


def test_show_mode_writes_nothing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": LOGIN
			+ """
// @evon()
type StatsHandler interface {
	Hit()
}
""",
		},
	)
	assert _run(tmp_path, "--show") == 0
	lines = capsys.readouterr().out.splitlines()
	assert [line[:29] for line in lines] == [
		"F LoginHandler (spawn, wait) ",
		"I StatsHandler " + "()".ljust(13) + " ",
	]
	assert lines[0].endswith("app.go:4:6")
	assert not (tmp_path / "evon_gen.go").exists()


def test_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN})
	assert _run(tmp_path, "--json") == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 0
	assert payload["diagnostics"] == []
	assert payload["generated"] == str(tmp_path / "evon_gen.go")
	assert payload["summary"][0]["name"] == "LoginHandler"

	(tmp_path / "app.go").write_text("package app\n\n// @evon(wait)\ntype LoginHandler func()\n", encoding="utf-8")
	assert _run(tmp_path, "--json") == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["kind"] == "flag-dependency"
	assert diag["phase"] == "evon"
	assert diag["line"] == 3 and diag["column"] == 4


def test_json_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert _run(tmp_path / "missing", "--json") == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "load"
	assert diag["message"].endswith("no such directory")


def test_fatal_conditions(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert _run(tmp_path / "missing") == 1
	err = capsys.readouterr().err
	assert err.startswith("Fatal: ") and err.rstrip().endswith("no such directory")

	write_go_module(tmp_path, {"app.go": LOGIN})
	assert _run(tmp_path, "--handler-suffix", "Event") == 1
	assert capsys.readouterr().err == "Fatal: handler suffix and event suffix must differ\n"

	assert _run(tmp_path, "--out", "sub/gen.go") == 1
	assert capsys.readouterr().err.startswith("Fatal: output name ")
	assert not (tmp_path / "evon_gen.go").exists()


def test_unwritable_output_is_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN})
	(tmp_path / "evon_gen.go").mkdir()
	assert _run(tmp_path) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert captured.err.startswith("Fatal: ")
	assert (tmp_path / "evon_gen.go").is_dir()

	(tmp_path / "app.go").write_text("package app\n\ntype Other int\n", encoding="utf-8")
	assert _run(tmp_path, "--json") == 1
	payload = json.loads(capsys.readouterr().out)
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "write"
	assert (tmp_path / "evon_gen.go").is_dir()


def test_go_diagnostics_do_not_fail_the_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(tmp_path, {"app.go": LOGIN + "\ntype Other func(m Missing)\n"})
	assert _run(tmp_path) == 0
	captured = capsys.readouterr()
	(line,) = captured.err.splitlines()
	assert line.startswith("[go] ") and line.endswith("app.go:6:19: undefined: Missing")
	assert (tmp_path / "evon_gen.go").exists()


def test_options_reach_the_generator(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	write_go_module(
		tmp_path,
		{
			"app.go": "package app\n",
			"tagged.go": "//go:build integration\n\npackage app\n\n// @evon()\ntype LoginFunc func()\n",
		},
	)
	assert _run(tmp_path, "--handler-suffix", "Func", "--event-suffix", "Signal", "--out", "signals_gen.go") == 0
	assert capsys.readouterr().out == NO_HANDLERS + "\n"

	assert _run(tmp_path, "--tags", "integration", "--handler-suffix", "Func", "--event-suffix", "Signal", "--out", "signals_gen.go") == 0
	text = (tmp_path / "signals_gen.go").read_text(encoding="utf-8")
	assert "type LoginSignal struct {\n" in text
	assert "func NewLoginSignal() *LoginSignal {\n" in text
