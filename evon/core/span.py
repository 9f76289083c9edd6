# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info. Columns are 1-based, like
the Go toolchain's positions, so `file:line:col` strings line up with what
`go vet`/`gopls` print for the same source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source position (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark token/meta (or anything with line/column).

		If `loc` is already a Span, it is returned unchanged.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file or getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=None,
		)

	def shifted(self, text: str, offset: int) -> "Span":
		"""
		Return the position of `text[offset]` given that `text` starts at this span.

		Used to locate markers inside (possibly multi-line) comments.
		"""
		prefix = text[:offset]
		newlines = prefix.count("\n")
		if newlines == 0:
			column = (self.column or 1) + offset
			return Span(file=self.file, line=self.line, column=column)
		column = len(prefix) - prefix.rfind("\n")
		return Span(file=self.file, line=(self.line or 1) + newlines, column=column)

	def format(self, *, with_file: bool = True) -> str:
		"""Format as `file:line:col` (or `line:col` without the file)."""
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		if not with_file:
			return f"{l}:{c}"
		f = self.file or "<unknown>"
		return f"{f}:{l}:{c}"

	def __str__(self) -> str:
		return self.format()


__all__ = ["Span"]
