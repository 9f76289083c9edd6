# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go declaration-skeleton parser.

`parse_program` returns the syntax tree or raises `GoSyntaxError`;
`parse_file` is the loader-facing adapter that reads a file and turns syntax
errors into load-phase diagnostics instead of raising.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from evon.core.diagnostics import Diagnostic, DiagnosticKind
from evon.core.span import Span
from . import ast as go_ast
from .parser import GoSyntaxError, header_constraint, parse_program


def parse_file(path: Path, source: Optional[str] = None) -> Tuple[Optional[go_ast.File], List[Diagnostic]]:
	if source is None:
		source = path.read_text(encoding="utf-8")
	try:
		return parse_program(source, path=str(path)), []
	except GoSyntaxError as err:
		diag = Diagnostic(
			message=str(err),
			kind=DiagnosticKind.PARSE_ERROR,
			phase="load",
			span=err.loc if err.loc is not None else Span(file=str(path)),
		)
		return None, [diag]


__all__ = ["GoSyntaxError", "go_ast", "header_constraint", "parse_file", "parse_program"]
