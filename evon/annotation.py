# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`@evon(...)` marker scanning.

A marker lives anywhere inside a doc comment:

    // LoginHandler is called after a successful login.
    // @evon(spawn, wait)
    type LoginHandler func(uid int, addr string)

Flags are comma-separated; surrounding whitespace and empty entries are
ignored. A comment group carries at most one marker.

Scanning a file is driven by `CommentCursor`, which walks the file's comment
groups in source order. The binder advances it to each declaration's doc
comment; markers on any group skipped along the way did not attach to a type
declaration and are reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from evon.core.diagnostics import DiagnosticCollector, DiagnosticKind
from evon.core.span import Span
from evon.parser.ast import Comment, CommentGroup
from evon.policy import VALID_FLAGS, DispatchPolicy, FlagError, check_combination

MARKER_RE = re.compile(r"@evon\(\s*(.*?)\s*\)")
FLAG_SEP = ","

MISPLACED_MESSAGE = "Evon annotations apply only to func or interface type declarations"


@dataclass(frozen=True)
class Annotation:
	span: Span
	flags: FrozenSet[str] = field(default_factory=frozenset)

	def format_flags(self) -> str:
		"""Flags in sorted order, e.g. `(lock, spawn)`."""
		return "(" + ", ".join(sorted(self.flags)) + ")"

	@property
	def policy(self) -> DispatchPolicy:
		return DispatchPolicy.from_flags(self.flags)


class AnnotationError(ValueError):
	"""A marker that is present but unusable; carries the diagnostic kind and location."""

	def __init__(self, message: str, *, kind: DiagnosticKind, loc: Span, notes: Iterable[str] = ()) -> None:
		super().__init__(message)
		self.kind = kind
		self.loc = loc
		self.notes = list(notes)


def _marker_span(comment: Comment, offset: int) -> Span:
	return comment.span.shifted(comment.text, offset)


def extract_annotation(group: CommentGroup) -> Optional[Annotation]:
	"""
	Return the group's annotation, None when it has no marker.

	Raises `AnnotationError` for a second marker, an unknown flag or an invalid
	flag combination.
	"""
	found: Optional[Tuple[Comment, re.Match]] = None
	for comment in group.comments:
		matches = list(MARKER_RE.finditer(comment.text))
		if not matches:
			continue
		if found is not None:
			_redundant(found, comment, matches[0])
		found = (comment, matches[0])
		if len(matches) > 1:
			_redundant(found, comment, matches[1])
	if found is None:
		return None

	comment, match = found
	span = _marker_span(comment, match.start())
	flags = set()
	pos = match.start(1)
	for raw in match.group(1).split(FLAG_SEP):
		flag = raw.strip()
		if flag:
			if flag not in VALID_FLAGS:
				at = _marker_span(comment, pos + raw.index(flag))
				raise AnnotationError(f'Invalid flag "{flag}"', kind=DiagnosticKind.INVALID_FLAG, loc=at)
			flags.add(flag)
		pos += len(raw) + len(FLAG_SEP)

	try:
		check_combination(flags)
	except FlagError as err:
		raise AnnotationError(str(err), kind=err.kind, loc=span) from err
	return Annotation(span=span, flags=frozenset(flags))


def _redundant(first: Tuple[Comment, re.Match], comment: Comment, match: re.Match) -> None:
	first_span = _marker_span(first[0], first[1].start())
	second = _marker_span(comment, match.start())
	raise AnnotationError(
		f"Redundant annotation at {second.format(with_file=False)}",
		kind=DiagnosticKind.MALFORMED_ANNOTATION,
		loc=first_span,
		notes=[f"first annotation at {first_span.format(with_file=False)}"],
	)


class CommentCursor:
	"""
	Position in one file's ordered comment groups.

	Each group is scanned exactly once, either on the way to a declaration's
	doc comment (`advance_to`) or at the end of the file (`drain`).
	"""

	def __init__(self, groups: Sequence[CommentGroup], diagnostics: DiagnosticCollector) -> None:
		self._groups = list(groups)
		self._index = 0
		self._diagnostics = diagnostics

	def advance_to(self, target: Optional[CommentGroup]) -> Tuple[Optional[Annotation], bool]:
		"""
		Scan up to and including `target`; return its annotation and whether it was invalid.

		Markers found on the groups in between are reported as misplaced. A
		None target (declaration without doc comment) leaves the cursor in
		place.
		"""
		if target is None:
			return None, False
		while self._index < len(self._groups):
			group = self._groups[self._index]
			self._index += 1
			ann, failed = self._scan(group)
			if group is target:
				return ann, failed
			if ann is not None:
				self._diagnostics.add(DiagnosticKind.MISPLACED_ANNOTATION, ann.span, MISPLACED_MESSAGE)
		return None, False

	def drain(self) -> None:
		"""Scan the remaining groups; every marker left is misplaced."""
		while self._index < len(self._groups):
			group = self._groups[self._index]
			self._index += 1
			ann, _ = self._scan(group)
			if ann is not None:
				self._diagnostics.add(DiagnosticKind.MISPLACED_ANNOTATION, ann.span, MISPLACED_MESSAGE)

	@property
	def remaining(self) -> List[CommentGroup]:
		return self._groups[self._index :]

	def _scan(self, group: CommentGroup) -> Tuple[Optional[Annotation], bool]:
		try:
			return extract_annotation(group), False
		except AnnotationError as err:
			self._diagnostics.add(err.kind, err.loc, str(err), notes=err.notes)
			return None, True


__all__ = [
	"Annotation",
	"AnnotationError",
	"CommentCursor",
	"FLAG_SEP",
	"MARKER_RE",
	"MISPLACED_MESSAGE",
	"extract_annotation",
]
