# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
go.mod discovery and module-cache lookup.

Two directives matter here: `module` anchors the import path of every package
directory below the module root, and `require` pins the versions used to find
third-party packages in the module cache.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

_MODULE_RE = re.compile(r'^\s*module\s+(?:"([^"]+)"|`([^`]+)`|(\S+))\s*(?://.*)?$', re.MULTILINE)
_REQUIRE_LINE_RE = re.compile(r"^\s*require\s+(\S+)\s+(\S+)", re.MULTILINE)
_REQUIRE_BLOCK_RE = re.compile(r"^\s*require\s*\((.*?)^\s*\)", re.MULTILINE | re.DOTALL)
_BLOCK_ENTRY_RE = re.compile(r"^\s*(\S+)\s+(v\S+)", re.MULTILINE)


@dataclass(frozen=True)
class GoModule:
	"""A module root: `path` is the module path, `root` the directory holding go.mod."""

	path: str
	root: Path
	requires: Dict[str, str] = field(default_factory=dict, compare=False)

	def import_path_for(self, directory: Path) -> str:
		rel = directory.resolve().relative_to(self.root)
		if rel == Path("."):
			return self.path
		return f"{self.path}/{rel.as_posix()}"

	def dir_for(self, import_path: str) -> Optional[Path]:
		"""Directory of `import_path` if it lives inside this module."""
		if import_path == self.path:
			return self.root
		if import_path.startswith(self.path + "/"):
			return self.root / import_path[len(self.path) + 1 :]
		return None

	def cached_dir_for(self, import_path: str, cache_root: Path) -> Optional[Path]:
		"""Directory of `import_path` inside the module cache, via the longest matching requirement."""
		best = None
		for mod_path in self.requires:
			if import_path == mod_path or import_path.startswith(mod_path + "/"):
				if best is None or len(mod_path) > len(best):
					best = mod_path
		if best is None:
			return None
		rest = import_path[len(best) :].lstrip("/")
		base = cache_root / f"{escape_module_path(best)}@{escape_module_path(self.requires[best])}"
		return base / rest if rest else base


def escape_module_path(path: str) -> str:
	"""Module cache case-encoding: every upper-case letter becomes `!` + lower-case."""
	return re.sub(r"[A-Z]", lambda m: "!" + m.group(0).lower(), path)


def parse_module_path(text: str) -> Optional[str]:
	m = _MODULE_RE.search(text)
	if m is None:
		return None
	return next(g for g in m.groups() if g)


def parse_requires(text: str) -> Dict[str, str]:
	out: Dict[str, str] = {}
	for block in _REQUIRE_BLOCK_RE.finditer(text):
		for entry in _BLOCK_ENTRY_RE.finditer(block.group(1)):
			out[entry.group(1)] = entry.group(2)
	for m in _REQUIRE_LINE_RE.finditer(text):
		if m.group(1) != "(":
			out[m.group(1)] = m.group(2)
	return out


def find_go_module(start: Path) -> Optional[GoModule]:
	"""Walk up from `start` to the nearest go.mod with a module directive."""
	cur = start.resolve()
	for directory in (cur, *cur.parents):
		gomod = directory / "go.mod"
		if gomod.is_file():
			text = gomod.read_text(encoding="utf-8")
			path = parse_module_path(text)
			if path is None:
				return None
			return GoModule(path=path, root=directory, requires=parse_requires(text))
	return None


def default_mod_cache() -> Path:
	env = os.environ.get("GOMODCACHE")
	if env:
		return Path(env)
	gopath = os.environ.get("GOPATH")
	if gopath:
		return Path(gopath.split(os.pathsep)[0]) / "pkg" / "mod"
	return Path.home() / "go" / "pkg" / "mod"


__all__ = [
	"GoModule",
	"default_mod_cache",
	"escape_module_path",
	"find_go_module",
	"parse_module_path",
	"parse_requires",
]
