# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from evon.packages.gomod import (
	GoModule,
	escape_module_path,
	find_go_module,
	parse_module_path,
	parse_requires,
)
from evon.packages.program import default_package_name

GO_MOD = """module example.com/app // main module

go 1.21

require github.com/single/dep v1.2.3

require (
	github.com/BurntSushi/toml v1.3.2
	gopkg.in/yaml.v3 v3.0.1 // indirect
)
"""


def test_parse_module_and_requires() -> None:
	assert parse_module_path(GO_MOD) == "example.com/app"
	assert parse_module_path('module "quoted/path"\n') == "quoted/path"
	assert parse_module_path("go 1.21\n") is None
	assert parse_requires(GO_MOD) == {
		"github.com/single/dep": "v1.2.3",
		"github.com/BurntSushi/toml": "v1.3.2",
		"gopkg.in/yaml.v3": "v3.0.1",
	}


def test_find_go_module_walks_up(tmp_path: Path) -> None:
	(tmp_path / "go.mod").write_text(GO_MOD, encoding="utf-8")
	sub = tmp_path / "internal" / "events"
	sub.mkdir(parents=True)
	mod = find_go_module(sub)
	assert mod is not None
	assert mod.path == "example.com/app"
	assert mod.root == tmp_path.resolve()
	assert mod.import_path_for(sub) == "example.com/app/internal/events"
	assert mod.import_path_for(tmp_path) == "example.com/app"
	assert mod.dir_for("example.com/app/internal/events") == tmp_path.resolve() / "internal" / "events"
	assert mod.dir_for("example.com/application") is None


def test_module_cache_lookup() -> None:
	mod = GoModule(
		path="example.com/app",
		root=Path("/src/app"),
		requires={"github.com/BurntSushi/toml": "v1.3.2", "github.com/BurntSushi/toml/internal": "v0.1.0"},
	)
	cache = Path("/cache")
	assert mod.cached_dir_for("github.com/BurntSushi/toml", cache) == cache / "github.com/!burnt!sushi/toml@v1.3.2"
	assert (
		mod.cached_dir_for("github.com/BurntSushi/toml/internal/x", cache)
		== cache / "github.com/!burnt!sushi/toml/internal@v0.1.0" / "x"
	)
	assert mod.cached_dir_for("github.com/other/mod", cache) is None
	assert escape_module_path("A/bC") == "!a/b!c"


def test_default_package_name() -> None:
	assert default_package_name("example.com/app/util") == "util"
	assert default_package_name("github.com/go-chi/chi/v5") == "chi"
	assert default_package_name("gopkg.in/yaml.v3") == "yaml"
	assert default_package_name("example.com/go-kit") == "go_kit"
