# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generator configuration.

One frozen value built from the command line (or directly by tests); invalid
combinations are rejected up front with `ValueError` so the analysis never
sees them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_HANDLER_SUFFIX = "Handler"
DEFAULT_EVENT_SUFFIX = "Event"
DEFAULT_OUT = "evon_gen.go"

_SUFFIX_RE = re.compile(r"^\w*$")


@dataclass(frozen=True)
class GeneratorConfig:
	handler_suffix: str = DEFAULT_HANDLER_SUFFIX
	event_suffix: str = DEFAULT_EVENT_SUFFIX
	out: str = DEFAULT_OUT
	tags: Tuple[str, ...] = ()
	goroot: Optional[Path] = None
	show: bool = False
	json: bool = False

	def __post_init__(self) -> None:
		for label, value in (("handler suffix", self.handler_suffix), ("event suffix", self.event_suffix)):
			if not _SUFFIX_RE.match(value):
				raise ValueError(f"{label} {value!r} is not an identifier fragment")
		if self.handler_suffix == self.event_suffix:
			# Event type names would equal the handler type names.
			raise ValueError("handler suffix and event suffix must differ")
		out = Path(self.out)
		if out.name != self.out or not self.out.endswith(".go") or self.out.endswith("_test.go"):
			raise ValueError(f"output name {self.out!r} must be a plain non-test .go file name")

	@staticmethod
	def parse_tags(text: str) -> Tuple[str, ...]:
		"""`-tags` syntax: comma-separated (spaces accepted too, as by the go tool)."""
		return tuple(t for t in re.split(r"[,\s]+", text.strip()) if t)


__all__ = ["DEFAULT_EVENT_SUFFIX", "DEFAULT_HANDLER_SUFFIX", "DEFAULT_OUT", "GeneratorConfig"]
