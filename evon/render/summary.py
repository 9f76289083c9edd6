# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Show mode: one row per detected handler type instead of generating code.

	F LoginHandler  (spawn, wait) app/events.go:12:6
	I StatsHandler  ()            app/events.go:20:6

`F` marks func handlers, `I` interface handlers. Names are padded by their
display width on a monospace terminal, where East Asian wide and fullwidth
characters take two cells.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import List

from evon.model import AnalysisResult

NO_HANDLERS = "(No handler types detected)"


def monospace_len(s: str) -> int:
	return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in s)


@dataclass(frozen=True)
class SummaryRow:
	kind: str
	name: str
	flags: str
	position: str

	def to_json(self) -> dict:
		return {"kind": self.kind, "name": self.name, "flags": self.flags, "position": self.position}


def summary_rows(result: AnalysisResult) -> List[SummaryRow]:
	return [
		SummaryRow(
			kind="F" if ev.is_callable else "I",
			name=ev.name,
			flags=decl.annotation.format_flags(),
			position=ev.span.format(),
		)
		for decl, ev in result.events()
	]


def format_summary(rows: List[SummaryRow]) -> List[str]:
	if not rows:
		return [NO_HANDLERS]
	name_width = max(monospace_len(r.name) for r in rows)
	flags_width = max(len(r.flags) for r in rows)
	return [
		f"{r.kind} {r.name}{' ' * (name_width - monospace_len(r.name))} {r.flags.ljust(flags_width)} {r.position}"
		for r in rows
	]


__all__ = ["NO_HANDLERS", "SummaryRow", "format_summary", "monospace_len", "summary_rows"]
