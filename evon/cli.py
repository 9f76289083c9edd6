# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line driver: load a package, bind its handler types, generate.

    python -m evon [--show] [--json] [DIR]

Exit status is 0 when the run produced no generator diagnostics (including
the "nothing detected" case) and 1 otherwise. Diagnostics from the Go side of
the load (syntax errors, undefined names) are printed with a `[go]` prefix but
do not fail the run by themselves; handler types they affect fail through
their own `[evon]` diagnostics.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from evon.binder import HandlerBinder
from evon.config import DEFAULT_EVENT_SUFFIX, DEFAULT_HANDLER_SUFFIX, DEFAULT_OUT, GeneratorConfig
from evon.core.diagnostics import Diagnostic, DiagnosticCollector
from evon.packages import LoaderError, PackageLoader
from evon.render import build_gen_file, remove_stale, write_generated
from evon.render.summary import NO_HANDLERS, format_summary, summary_rows

GO_PREFIX = "[go] "
EVON_PREFIX = "[evon] "


def _from_output(diag: Diagnostic, out_path: Path) -> bool:
	"""True if `diag` points into the previously generated file."""
	if diag.span.file is None:
		return False
	return Path(diag.span.file).resolve() == out_path.resolve()


def build_arg_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="evon", description="Generate event dispatchers for annotated Go handler types")
	parser.add_argument("dir", type=Path, nargs="?", default=Path("."), help="Go package directory (default: .)")
	parser.add_argument(
		"--handler-suffix",
		default=DEFAULT_HANDLER_SUFFIX,
		help=f"Required suffix of handler type names (default: {DEFAULT_HANDLER_SUFFIX})",
	)
	parser.add_argument(
		"--event-suffix",
		default=DEFAULT_EVENT_SUFFIX,
		help=f"Suffix of generated event type names (default: {DEFAULT_EVENT_SUFFIX})",
	)
	parser.add_argument("--out", default=DEFAULT_OUT, help=f"Generated file name inside DIR (default: {DEFAULT_OUT})")
	parser.add_argument("--tags", default="", help="Comma-separated build tags")
	parser.add_argument("--goroot", type=Path, default=None, help="Go root for standard library lookups (default: $GOROOT)")
	parser.add_argument("--show", action="store_true", help="List detected handler types instead of generating")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Print one JSON object (exit_code/diagnostics) on stdout instead of text",
	)
	return parser


class _Report:
	"""Collects the run's output so text and JSON modes share one code path."""

	def __init__(self, *, json_mode: bool) -> None:
		self.json_mode = json_mode
		self.diagnostics: List[Diagnostic] = []
		self.payload: dict = {}

	def fatal(self, message: str, *, phase: str) -> int:
		if self.json_mode:
			self.diagnostics.append(Diagnostic(message=message, phase=phase))
			return self.finish(1)
		print(f"Fatal: {message}", file=sys.stderr)
		return 1

	def diagnostic(self, diag: Diagnostic, prefix: str) -> None:
		if self.json_mode:
			self.diagnostics.append(diag)
		else:
			print(prefix + diag.format(), file=sys.stderr)
			for note in diag.notes:
				print(f"{prefix}  note: {note}", file=sys.stderr)

	def status(self, lines: List[str], **payload) -> None:
		self.payload.update(payload)
		if not self.json_mode:
			for line in lines:
				print(line)

	def finish(self, exit_code: int) -> int:
		if self.json_mode:
			out = {"exit_code": exit_code, "diagnostics": [d.to_json() for d in self.diagnostics]}
			out.update(self.payload)
			print(json.dumps(out))
		return exit_code


def main(argv: Optional[List[str]] = None) -> int:
	args = build_arg_parser().parse_args(argv)
	report = _Report(json_mode=args.json)

	try:
		config = GeneratorConfig(
			handler_suffix=args.handler_suffix,
			event_suffix=args.event_suffix,
			out=args.out,
			tags=GeneratorConfig.parse_tags(args.tags),
			goroot=args.goroot,
			show=args.show,
			json=args.json,
		)
	except ValueError as err:
		return report.fatal(str(err), phase="config")

	directory: Path = args.dir
	out_path = directory / config.out
	try:
		program = PackageLoader(tags=config.tags, goroot=config.goroot).load(directory)
	except LoaderError as err:
		return report.fatal(str(err), phase="load")

	for diag in program.errors:
		if not _from_output(diag, out_path):
			report.diagnostic(diag, GO_PREFIX)

	diagnostics = DiagnosticCollector()
	result = HandlerBinder(program, config=config, diagnostics=diagnostics).bind_package()
	if diagnostics:
		for diag in diagnostics:
			report.diagnostic(diag, EVON_PREFIX)
		return report.finish(1)

	rows = summary_rows(result)
	summary = [r.to_json() for r in rows]
	if config.show:
		report.status(format_summary(rows), summary=summary)
		return report.finish(0)

	if not result.declarations:
		try:
			remove_stale(out_path)
		except OSError as err:
			return report.fatal(str(err), phase="write")
		report.status([NO_HANDLERS], summary=summary, generated=None)
		return report.finish(0)

	try:
		write_generated(out_path, build_gen_file(result, config))
	except OSError as err:
		return report.fatal(str(err), phase="write")
	report.status([f"Generated {out_path}"], summary=summary, generated=str(out_path))
	return report.finish(0)


__all__ = ["build_arg_parser", "main"]
