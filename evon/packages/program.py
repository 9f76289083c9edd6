# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Program graph handed from the loader to the analysis pass.

A `Program` is the main package plus a lazily filled cache of the packages it
(transitively) imports. Foreign packages are only loaded when the resolver
actually follows a reference into them, so a run over a package that imports
half of the standard library parses only what its handler types touch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from evon.core.diagnostics import Diagnostic
from evon.parser.ast import File, TypeSpec, is_exported

if TYPE_CHECKING:
	from .gomod import GoModule
	from .loader import PackageLoader

_VERSION_ELEM_RE = re.compile(r"^v\d+$")
_DOT_VERSION_RE = re.compile(r"\.v\d+$")


@dataclass(eq=False)
class Module:
	"""
	One loaded Go package.

	`path` is the import path, `name` the package clause. `types` maps every
	top-level type name (exported or not) to its spec; `values` holds the other
	package-level names (funcs, vars, consts).
	"""

	path: str
	name: str
	dir: Optional[Path] = None
	files: List[File] = field(default_factory=list)
	types: Dict[str, TypeSpec] = field(default_factory=dict)
	values: Set[str] = field(default_factory=set)
	errors: List[Diagnostic] = field(default_factory=list)
	_exported: Optional[Dict[str, TypeSpec]] = field(default=None, repr=False)

	def exported_types(self) -> Dict[str, TypeSpec]:
		"""Exported top-level type declarations, built on first use."""
		if self._exported is None:
			self._exported = {n: s for n, s in self.types.items() if is_exported(n)}
		return self._exported

	def top_level_names(self) -> Set[str]:
		return set(self.types) | self.values


def default_package_name(import_path: str) -> str:
	"""
	Guess a package name from its import path.

	Used when the package cannot be loaded: the last path element, skipping a
	trailing major-version element (`/v2`) and dropping a gopkg.in-style
	`.v3` suffix.
	"""
	elems = [e for e in import_path.split("/") if e]
	if not elems:
		return import_path
	last = elems[-1]
	if _VERSION_ELEM_RE.match(last) and len(elems) > 1:
		last = elems[-2]
	last = _DOT_VERSION_RE.sub("", last)
	return last.replace("-", "_").replace(".", "_")


class Program:
	"""The main package and the packages reachable from it."""

	def __init__(self, main: Module, *, loader: "PackageLoader", gomod: Optional["GoModule"] = None) -> None:
		self.main = main
		self.gomod = gomod
		self._loader = loader
		self._modules: Dict[str, Optional[Module]] = {main.path: main}
		self._names: Dict[str, str] = {main.path: main.name}
		# Load-phase diagnostics of imported packages, by import path.
		self.foreign_errors: Dict[str, List[Diagnostic]] = {}

	@property
	def errors(self) -> List[Diagnostic]:
		"""Load-phase diagnostics of the main package."""
		return self.main.errors

	def module(self, path: str) -> Optional[Module]:
		"""The package at `path`, loading it on first request; None if it cannot be found."""
		if path not in self._modules:
			# Placeholder first: import cycles terminate instead of recursing.
			self._modules[path] = None
			self._modules[path] = self._loader.load_import(path, self)
		return self._modules[path]

	def package_name(self, path: str) -> str:
		"""Package clause of `path` without a full load, falling back to the path-derived name."""
		if path not in self._names:
			mod = self._modules.get(path)
			if mod is not None:
				self._names[path] = mod.name
			else:
				self._names[path] = self._loader.package_name(path, self) or default_package_name(path)
		return self._names[path]

	def loaded_paths(self) -> List[str]:
		return sorted(p for p, m in self._modules.items() if m is not None)

	def foreign_error_notes(self) -> List[str]:
		"""One line per load problem in an imported package, sorted by import path."""
		return [f"{path}: {d.format()}" for path in sorted(self.foreign_errors) for d in self.foreign_errors[path]]


__all__ = ["Module", "Program", "default_package_name"]
