# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need a Go package on disk.

Tests describe a module as a mapping of relative file paths to source text;
`write_go_module` lays it out under a temporary directory with a go.mod, and
`analyze` runs the loader and the binder over one of its packages.
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple

from evon.binder import HandlerBinder
from evon.config import GeneratorConfig
from evon.core.diagnostics import DiagnosticCollector
from evon.model import AnalysisResult
from evon.packages import PackageLoader, Program

DEFAULT_MODULE = "example.com/app"

# Paths that never exist, so tests do not pick up the host's Go installation.
NO_GOROOT = Path("/nonexistent/goroot")
NO_MOD_CACHE = Path("/nonexistent/modcache")


def write_go_module(root: Path, files: Mapping[str, str], *, module: Optional[str] = DEFAULT_MODULE) -> Path:
	"""
	Write `files` (relative path -> source) under `root`.

	Sources are dedented, so tests can indent them with the test body. A
	go.mod declaring `module` is added unless `module` is None or one of the
	files is go.mod itself.
	"""
	root.mkdir(parents=True, exist_ok=True)
	if module is not None and "go.mod" not in files:
		(root / "go.mod").write_text(f"module {module}\n\ngo 1.21\n", encoding="utf-8")
	for rel, text in files.items():
		path = root / rel
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
	return root


def make_loader(
	*,
	tags: Iterable[str] = (),
	goroot: Optional[Path] = None,
	mod_cache: Optional[Path] = None,
	goos: str = "linux",
	goarch: str = "amd64",
) -> PackageLoader:
	"""A loader for a fixed linux/amd64 target that only sees the given GOROOT."""
	return PackageLoader(
		tags=tags,
		goroot=goroot or NO_GOROOT,
		mod_cache=mod_cache or NO_MOD_CACHE,
		goos=goos,
		goarch=goarch,
	)


def load_program(directory: Path, **kwargs) -> Program:
	return make_loader(**kwargs).load(directory)


def analyze(
	directory: Path,
	*,
	config: Optional[GeneratorConfig] = None,
	**kwargs,
) -> Tuple[AnalysisResult, DiagnosticCollector, Program]:
	"""Load the package in `directory` and run the binder over it."""
	program = load_program(directory, **kwargs)
	diagnostics = DiagnosticCollector()
	result = HandlerBinder(program, config=config, diagnostics=diagnostics).bind_package()
	return result, diagnostics, program


def analyze_source(
	root: Path,
	source: str,
	*,
	extra: Optional[Mapping[str, str]] = None,
	config: Optional[GeneratorConfig] = None,
) -> Tuple[AnalysisResult, DiagnosticCollector, Program]:
	"""Analyze a one-file main package (`app.go`), plus `extra` files of the module."""
	files = {"app.go": source}
	files.update(extra or {})
	write_go_module(root, files)
	return analyze(root, config=config)


__all__ = [
	"DEFAULT_MODULE",
	"NO_GOROOT",
	"NO_MOD_CACHE",
	"analyze",
	"analyze_source",
	"load_program",
	"make_loader",
	"write_go_module",
]
