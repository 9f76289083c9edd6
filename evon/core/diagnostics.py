# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the loader and the analysis pass.

Every problem found by a run is recorded rather than raised, so a single
invocation reports all of them at once. The analysis pass owns exactly one
`DiagnosticCollector`; loader problems live on the `Program` and are reported
separately (they belong to the Go toolchain's view of the package, not to
evon's).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from .span import Span


class DiagnosticKind(str, Enum):
	"""Closed set of problem kinds, one per row of the error table."""

	MALFORMED_ANNOTATION = "malformed-annotation"
	INVALID_FLAG = "invalid-flag"
	FLAG_CONFLICT = "flag-conflict"
	FLAG_DEPENDENCY = "flag-dependency"
	MISPLACED_ANNOTATION = "misplaced-annotation"
	NAMING_VIOLATION = "naming-violation"
	UNRESOLVED_TYPE = "unresolved-type"
	UNSUPPORTED_SHAPE = "unsupported-shape"
	EMPTY_INTERFACE = "empty-interface"
	UNRESOLVABLE_EMBEDDING = "unresolvable-embedding"
	# Loader phase.
	PARSE_ERROR = "parse-error"
	UNDEFINED_NAME = "undefined-name"
	PACKAGE_CONFLICT = "package-conflict"
	REDECLARED_NAME = "redeclared-name"


@dataclass
class Diagnostic:
	"""Represents a single reported problem."""

	message: str
	kind: DiagnosticKind | None = None
	phase: str = "evon"
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format(self) -> str:
		"""Render as `position: message`."""
		return f"{self.span.format()}: {self.message}"

	def to_json(self) -> dict:
		return {
			"phase": self.phase,
			"kind": self.kind.value if self.kind is not None else None,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


class DiagnosticCollector:
	"""
	Accumulates diagnostics for one analysis pass.

	Order of insertion is preserved: the binder walks files and declarations in
	source order, so the report reads top to bottom.
	"""

	def __init__(self, *, phase: str = "evon") -> None:
		self._phase = phase
		self._items: list[Diagnostic] = []

	def add(
		self,
		kind: DiagnosticKind,
		span: Span,
		message: str,
		*,
		notes: Iterable[str] = (),
	) -> Diagnostic:
		diag = Diagnostic(message=message, kind=kind, phase=self._phase, span=span, notes=list(notes))
		self._items.append(diag)
		return diag

	def extend(self, diags: Iterable[Diagnostic]) -> None:
		self._items.extend(diags)

	@property
	def has_errors(self) -> bool:
		return any(d.severity == "error" for d in self._items)

	def __iter__(self) -> Iterator[Diagnostic]:
		return iter(self._items)

	def __len__(self) -> int:
		return len(self._items)

	def __bool__(self) -> bool:
		return bool(self._items)

	def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
		return [d for d in self._items if d.kind is kind]


__all__ = ["Diagnostic", "DiagnosticCollector", "DiagnosticKind"]
