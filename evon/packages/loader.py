# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go package loader.

Reads a package directory the way `go list` selects files (no `_test.go`,
GOOS/GOARCH file-name suffixes, `//go:build` lines), parses the declaration
skeleton of each selected file, and binds identifiers in type declarations.
Imported packages are found in the enclosing module, its `vendor/` tree, the
module cache (via go.mod requirements) or `GOROOT/src`, and are loaded only on
demand.

Problems in the source (syntax errors, undefined names, mixed package clauses)
become load-phase diagnostics on the package. Only conditions that leave
nothing to analyse raise `LoaderError`.
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from evon.core.diagnostics import DiagnosticCollector, DiagnosticKind
from evon.core.span import Span
from evon.parser import header_constraint, parse_file
from evon.parser.ast import File, OtherDecl
from .build_constraints import ConstraintError, default_tags, evaluate, matches_file_name
from .gomod import GoModule, default_mod_cache, find_go_module
from .program import Module, Program
from .scope import ScopeBinder

_PACKAGE_CLAUSE_RE = re.compile(r"^package\s+([^\W\d]\w*)", re.MULTILINE)


class LoaderError(ValueError):
	"""
	Fatal loader failure: missing directory, or no buildable Go files.

	The CLI reports it as `Fatal: ...` and exits non-zero.
	"""

	def __init__(self, message: str, *, loc: Span | None = None) -> None:
		super().__init__(message)
		self.loc = loc


def default_goroot() -> Optional[Path]:
	env = os.environ.get("GOROOT")
	if env:
		return Path(env)
	go = shutil.which("go")
	if go is None:
		return None
	# <GOROOT>/bin/go
	return Path(go).resolve().parent.parent


class PackageLoader:
	def __init__(
		self,
		*,
		tags: Iterable[str] = (),
		goroot: Optional[Path] = None,
		mod_cache: Optional[Path] = None,
		goos: Optional[str] = None,
		goarch: Optional[str] = None,
	) -> None:
		self.tags = default_tags(tags, goos=goos, goarch=goarch)
		self.goroot = goroot if goroot is not None else default_goroot()
		self.mod_cache = mod_cache if mod_cache is not None else default_mod_cache()

	def load(self, directory: Path) -> Program:
		"""Load the package in `directory` as the main package."""
		directory = Path(directory)
		if not directory.is_dir():
			raise LoaderError(f"{directory}: no such directory")
		directory = directory.resolve()
		gomod = find_go_module(directory)
		if gomod is not None:
			import_path = gomod.import_path_for(directory)
		else:
			# Legacy local import path, as `go list` reports outside a module.
			import_path = "_" + directory.as_posix()

		diagnostics = DiagnosticCollector(phase="load")
		module = self._read_dir(directory, import_path, diagnostics)
		if module is None:
			raise LoaderError(f"no buildable Go source files in {directory}")

		program = Program(module, loader=self, gomod=gomod)
		ScopeBinder(
			module,
			package_name=program.package_name,
			load=program.module,
			diagnostics=diagnostics,
		).bind()
		module.errors.extend(diagnostics)
		return program

	def load_import(self, import_path: str, program: Program) -> Optional[Module]:
		directory = self.find_package_dir(import_path, program.gomod)
		if directory is None:
			return None
		diagnostics = DiagnosticCollector(phase="load")
		module = self._read_dir(directory, import_path, diagnostics)
		if module is not None:
			ScopeBinder(
				module,
				package_name=program.package_name,
				load=program.module,
				diagnostics=diagnostics,
			).bind()
			module.errors.extend(diagnostics)
		if diagnostics:
			program.foreign_errors[import_path] = list(diagnostics)
		return module

	def package_name(self, import_path: str, program: Program) -> Optional[str]:
		"""Read just the package clause of the first buildable file."""
		directory = self.find_package_dir(import_path, program.gomod)
		if directory is None:
			return None
		for path in self._candidate_files(directory):
			source = path.read_text(encoding="utf-8")
			try:
				if not self._buildable(source):
					continue
			except ConstraintError:
				continue
			m = _PACKAGE_CLAUSE_RE.search(source)
			if m is not None and m.group(1) != "documentation":
				return m.group(1)
		return None

	def find_package_dir(self, import_path: str, gomod: Optional[GoModule]) -> Optional[Path]:
		candidates: List[Path] = []
		if gomod is not None:
			local = gomod.dir_for(import_path)
			if local is not None:
				candidates.append(local)
			candidates.append(gomod.root / "vendor" / import_path)
		if self.goroot is not None:
			candidates.append(self.goroot / "src" / import_path)
			candidates.append(self.goroot / "src" / "vendor" / import_path)
		if gomod is not None:
			cached = gomod.cached_dir_for(import_path, self.mod_cache)
			if cached is not None:
				candidates.append(cached)
		for c in candidates:
			if c.is_dir() and any(self._candidate_files(c)):
				return c
		return None

	def _candidate_files(self, directory: Path) -> List[Path]:
		return [
			p
			for p in sorted(directory.glob("*.go"))
			if p.is_file() and not p.name.endswith("_test.go") and matches_file_name(p.name, self.tags)
		]

	def _read_dir(self, directory: Path, import_path: str, diagnostics: DiagnosticCollector) -> Optional[Module]:
		files: List[File] = []
		for path in self._candidate_files(directory):
			source = path.read_text(encoding="utf-8")
			try:
				if not self._buildable(source):
					continue
			except ConstraintError as err:
				diagnostics.add(DiagnosticKind.PARSE_ERROR, Span(file=str(path), line=1, column=1), str(err))
				continue
			parsed, errs = parse_file(path, source)
			if parsed is None:
				diagnostics.extend(errs)
				continue
			files.append(parsed)
		if not files:
			return None

		name = files[0].package
		module = Module(path=import_path, name=name, dir=directory)
		for f in files:
			if f.package != name:
				diagnostics.add(
					DiagnosticKind.PACKAGE_CONFLICT,
					f.span,
					f"found packages {name} ({Path(files[0].path).name}) and {f.package} ({Path(f.path).name}) in {directory}",
				)
				continue
			module.files.append(f)
			self._declare(module, f, diagnostics)
		return module

	def _buildable(self, source: str) -> bool:
		"""Whether the file's `//go:build` (or `+build`) header admits it; read before parsing."""
		constraint = header_constraint(source)
		return constraint is None or evaluate(constraint, self.tags)

	def _declare(self, module: Module, f: File, diagnostics: DiagnosticCollector) -> None:
		for decl in f.decls:
			if isinstance(decl, OtherDecl):
				for n in decl.names:
					if n in ("_", "init"):
						continue
					if n in module.types or n in module.values:
						diagnostics.add(DiagnosticKind.REDECLARED_NAME, decl.span, f"{n} redeclared in this block")
						continue
					module.values.add(n)
				continue
			for spec in decl.specs:
				n = spec.name.name
				if n == "_":
					continue
				if n in module.types or n in module.values:
					diagnostics.add(DiagnosticKind.REDECLARED_NAME, spec.name.span, f"{n} redeclared in this block")
					continue
				module.types[n] = spec


__all__ = ["LoaderError", "PackageLoader", "default_goroot"]
