# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go package loading.

Modules:
  - gomod: go.mod discovery and module-cache lookup
  - build_constraints: `//go:build` and file-name constraint evaluation
  - program: `Module`/`Program`, the graph handed to the analysis pass
  - scope: identifier binding inside type declarations
  - loader: `PackageLoader`, which ties the above together
"""

from __future__ import annotations

from .loader import LoaderError, PackageLoader
from .program import Module, Program, default_package_name

__all__ = [
	"LoaderError",
	"Module",
	"PackageLoader",
	"Program",
	"default_package_name",
]
