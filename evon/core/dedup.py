# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Collision-free name allocation.

A `DedupSet` is a namespace: the first claimant of a base name keeps it, later
claimants get numbered variants (`util`, `util1`, `util2`, ...). Allocation
depends only on the order of `resolve` calls, never on hashing, so callers that
feed names in a deterministic order get a deterministic assignment.
"""

from __future__ import annotations

from typing import Iterable, Iterator


class DedupSet:
	def __init__(self, reserved: Iterable[str] = ()) -> None:
		self._taken: set[str] = set()
		self._next_suffix: dict[str, int] = {}
		for name in reserved:
			self._taken.add(name)

	def reserve(self, name: str) -> None:
		"""Mark `name` as taken without allocating it."""
		self._taken.add(name)

	def resolve(self, base: str) -> str:
		"""Return `base` if free, otherwise the first free `base<N>`; reserve the result."""
		if base not in self._taken:
			self._taken.add(base)
			return base
		n = self._next_suffix.get(base, 1)
		while f"{base}{n}" in self._taken:
			n += 1
		chosen = f"{base}{n}"
		self._next_suffix[base] = n + 1
		self._taken.add(chosen)
		return chosen

	def __contains__(self, name: object) -> bool:
		return name in self._taken

	def __iter__(self) -> Iterator[str]:
		return iter(sorted(self._taken))

	def __len__(self) -> int:
		return len(self._taken)


__all__ = ["DedupSet"]
