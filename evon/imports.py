# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Import bookkeeping for the generated file.

While signatures are extracted, every identifier that refers to another
package is recorded against that package's import path: package names used in
selectors (`util` in `util.Options`) and bare type names that are only valid
inside their own package (`Options` in a signature taken from package util).
Once all handler types are bound, `finalize` gives each package an alias that
is unique in the generated file and rewrites the recorded identifiers in place:

    util            -> util1
    Options         -> util1.Options

Aliases are allocated in (tier, path) order, so the assignment depends only on
which packages are referenced, not on the order they were encountered in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, Optional

from evon.core.dedup import DedupSet
from evon.parser.ast import Ident


class ImportTier(IntEnum):
	"""Sort order of imports; lower sorts first and wins when a path is seen in several tiers."""

	INTERNAL = 0  # required by the generated code itself (sync)
	STANDARD = 1
	THIRD_PARTY = 2


def tier_for(path: str) -> ImportTier:
	"""Standard library paths have no dot (`net/http`), third-party ones do."""
	return ImportTier.THIRD_PARTY if "." in path else ImportTier.STANDARD


@dataclass(eq=False)
class ImportRecord:
	path: str
	name: str
	tier: ImportTier
	alias: Optional[str] = None
	# Keyed by id(): each occurrence is rewritten once however often it is recorded.
	package_idents: Dict[int, Ident] = field(default_factory=dict)
	type_idents: Dict[int, Ident] = field(default_factory=dict)

	@property
	def explicit_alias(self) -> Optional[str]:
		"""The alias to spell out in the import line, None when it equals the package name."""
		if self.alias is None or self.alias == self.name:
			return None
		return self.alias


class ImportRegistry:
	"""
	Collects foreign references and assigns import aliases.

	`package_name` gives the default local name of an import path (its package
	clause).
	"""

	def __init__(self, package_name: Callable[[str], str]) -> None:
		self._package_name = package_name
		self._records: Dict[str, ImportRecord] = {}
		self._finalized: Optional[List[ImportRecord]] = None

	def _record(self, path: str, tier: ImportTier, name: Optional[str] = None) -> ImportRecord:
		rec = self._records.get(path)
		if rec is None:
			rec = ImportRecord(path=path, name=name or self._package_name(path), tier=tier)
			self._records[path] = rec
		elif tier < rec.tier:
			rec.tier = tier
		return rec

	def record_package_ident(self, path: str, ident: Ident) -> ImportRecord:
		self._check_open()
		rec = self._record(path, tier_for(path))
		rec.package_idents.setdefault(id(ident), ident)
		return rec

	def record_type_ident(self, path: str, ident: Ident) -> ImportRecord:
		self._check_open()
		rec = self._record(path, tier_for(path))
		rec.type_idents.setdefault(id(ident), ident)
		return rec

	def require(self, path: str, name: Optional[str] = None, *, tier: ImportTier = ImportTier.INTERNAL) -> ImportRecord:
		"""Make sure `path` is imported even if no signature refers to it."""
		self._check_open()
		return self._record(path, tier, name)

	def get(self, path: str) -> Optional[ImportRecord]:
		return self._records.get(path)

	def __contains__(self, path: object) -> bool:
		return path in self._records

	def __len__(self) -> int:
		return len(self._records)

	@property
	def finalized(self) -> bool:
		return self._finalized is not None

	def records(self) -> List[ImportRecord]:
		"""Records in final order (tier, then path)."""
		return sorted(self._records.values(), key=lambda r: (r.tier, r.path))

	def finalize(self, reserved: Iterable[str] = ()) -> List[ImportRecord]:
		"""
		Assign aliases and rewrite recorded identifiers.

		`reserved` are names already taken in the generated file's scope
		(package-level names of the target package, generated declarations).
		May be called only once: the rewrite is not idempotent.
		"""
		if self._finalized is not None:
			raise RuntimeError("import registry already finalized")
		names = DedupSet(reserved)
		ordered = self.records()
		for rec in ordered:
			rec.alias = names.resolve(rec.name)
			for ident in rec.type_idents.values():
				ident.name = f"{rec.alias}.{ident.name}"
			for ident in rec.package_idents.values():
				ident.name = rec.alias
		self._finalized = ordered
		return ordered

	def _check_open(self) -> None:
		if self._finalized is not None:
			raise RuntimeError("import registry already finalized")


__all__ = ["ImportRecord", "ImportRegistry", "ImportTier", "tier_for"]
