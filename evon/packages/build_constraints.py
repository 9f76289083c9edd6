# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build constraint evaluation (`//go:build` lines and GOOS/GOARCH file suffixes).

A file takes part in the build when its constraint expression is satisfied by
the active tag set and its name does not carry a `_GOOS`, `_GOARCH` or
`_GOOS_GOARCH` suffix for some other target.
"""

from __future__ import annotations

import platform
import sys
from typing import FrozenSet, Iterable

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

_CONSTRAINT_GRAMMAR = r"""
?start: or_expr
?or_expr: and_expr ("||" and_expr)*
?and_expr: not_expr ("&&" not_expr)*
?not_expr: "!" not_expr -> negate
         | atom
?atom: TAG
     | "(" or_expr ")"

TAG: /[A-Za-z0-9_.]+/

%ignore /[ \t]+/
"""

_CONSTRAINT_PARSER = Lark(_CONSTRAINT_GRAMMAR, parser="lalr", lexer="basic", maybe_placeholders=False)

KNOWN_OS = frozenset(
	{
		"aix",
		"android",
		"darwin",
		"dragonfly",
		"freebsd",
		"hurd",
		"illumos",
		"ios",
		"js",
		"linux",
		"nacl",
		"netbsd",
		"openbsd",
		"plan9",
		"solaris",
		"wasip1",
		"windows",
		"zos",
	}
)

KNOWN_ARCH = frozenset(
	{
		"386",
		"amd64",
		"arm",
		"arm64",
		"loong64",
		"mips",
		"mips64",
		"mips64le",
		"mipsle",
		"ppc64",
		"ppc64le",
		"riscv64",
		"s390x",
		"wasm",
	}
)

_UNIX_OS = frozenset(
	{"aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios", "linux", "netbsd", "openbsd", "solaris"}
)

_MACHINE_TO_GOARCH = {
	"x86_64": "amd64",
	"amd64": "amd64",
	"i386": "386",
	"i686": "386",
	"aarch64": "arm64",
	"arm64": "arm64",
	"armv7l": "arm",
	"ppc64le": "ppc64le",
	"s390x": "s390x",
	"riscv64": "riscv64",
}


class ConstraintError(ValueError):
	"""A `//go:build` line that is not a valid boolean tag expression."""


def host_goos() -> str:
	if sys.platform.startswith("linux"):
		return "linux"
	if sys.platform == "darwin":
		return "darwin"
	if sys.platform in ("win32", "cygwin"):
		return "windows"
	for name in KNOWN_OS:
		if sys.platform.startswith(name):
			return name
	return sys.platform


def host_goarch() -> str:
	machine = platform.machine().lower()
	return _MACHINE_TO_GOARCH.get(machine, machine)


def default_tags(extra: Iterable[str] = (), *, goos: str | None = None, goarch: str | None = None) -> FrozenSet[str]:
	"""The tag set the go tool would satisfy: GOOS, GOARCH, `gc`, `unix` and user tags."""
	goos = goos or host_goos()
	goarch = goarch or host_goarch()
	tags = {goos, goarch, "gc"}
	if goos in _UNIX_OS:
		tags.add("unix")
	# Implied OS tags, as in go/build.
	if goos == "android":
		tags.add("linux")
	if goos == "illumos":
		tags.add("solaris")
	if goos == "ios":
		tags.add("darwin")
	tags.update(t for t in extra if t)
	return frozenset(tags)


def evaluate(expr: str, tags: FrozenSet[str]) -> bool:
	"""Evaluate a `//go:build` expression against a tag set."""
	try:
		tree = _CONSTRAINT_PARSER.parse(expr)
	except UnexpectedInput as e:
		raise ConstraintError(f"invalid build constraint: {expr!r}") from e
	return _eval(tree, tags)


def _eval(node: Tree | Token, tags: FrozenSet[str]) -> bool:
	if isinstance(node, Token):
		return str(node) in tags
	if node.data == "or_expr":
		return any(_eval(c, tags) for c in node.children)
	if node.data == "and_expr":
		return all(_eval(c, tags) for c in node.children)
	if node.data == "negate":
		return not _eval(node.children[0], tags)
	raise AssertionError(f"unexpected constraint node {node.data!r}")


def matches_file_name(name: str, tags: FrozenSet[str]) -> bool:
	"""
	Apply the go tool's implicit filename constraints.

	`x_linux.go`, `x_amd64.go` and `x_linux_amd64.go` build only for that
	target; a bare `linux.go` is unconstrained.
	"""
	stem = name[:-3] if name.endswith(".go") else name
	if stem.endswith("_test"):
		stem = stem[: -len("_test")]
	parts = stem.split("_")
	if len(parts) < 2:
		return True
	last = parts[-1]
	if len(parts) >= 3 and parts[-2] in KNOWN_OS and last in KNOWN_ARCH:
		return parts[-2] in tags and last in tags
	if last in KNOWN_OS or last in KNOWN_ARCH:
		return last in tags
	return True


__all__ = [
	"ConstraintError",
	"KNOWN_ARCH",
	"KNOWN_OS",
	"default_tags",
	"evaluate",
	"host_goarch",
	"host_goos",
	"matches_file_name",
]
