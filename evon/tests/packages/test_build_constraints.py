# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evon.packages.build_constraints import ConstraintError, default_tags, evaluate, matches_file_name

LINUX = default_tags(goos="linux", goarch="amd64")


def test_default_tags() -> None:
	assert LINUX == frozenset({"linux", "amd64", "gc", "unix"})
	assert "unix" not in default_tags(goos="windows", goarch="amd64")
	assert {"android", "linux"} <= default_tags(goos="android", goarch="arm64")
	assert "integration" in default_tags(["integration", ""], goos="linux", goarch="amd64")


@pytest.mark.parametrize(
	"expr,expected",
	[
		("linux", True),
		("!linux", False),
		("linux && amd64", True),
		("linux && !amd64", False),
		("windows || (unix && gc)", True),
		("!(darwin || windows)", True),
		("cgo || ignore", False),
	],
)
def test_evaluate(expr: str, expected: bool) -> None:
	assert evaluate(expr, LINUX) is expected


def test_evaluate_rejects_garbage() -> None:
	with pytest.raises(ConstraintError, match="invalid build constraint"):
		evaluate("linux &&", LINUX)


@pytest.mark.parametrize(
	"name,expected",
	[
		("events.go", True),
		("linux.go", True),
		("events_linux.go", True),
		("events_windows.go", False),
		("events_arm64.go", False),
		("events_linux_amd64.go", True),
		("events_linux_arm64.go", False),
		("events_windows_amd64.go", False),
		("stub_other.go", True),
	],
)
def test_file_name_constraints(name: str, expected: bool) -> None:
	assert matches_file_name(name, LINUX) is expected
