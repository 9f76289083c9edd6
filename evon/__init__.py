# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
evon: event dispatcher generator for annotated Go handler types.

Packages/modules:
  - core: spans, diagnostics, identifier deduplication
  - parser: Go declaration-skeleton parser (lark)
  - packages: package loading, build constraints, identifier binding
  - annotation, policy: `@evon(...)` markers and their flags
  - resolver, flatten: type shapes through aliases and embeddings
  - imports: import aliasing for the generated file
  - binder: the analysis pass
  - render: render model, Go emitter, output writer, show-mode summary
  - cli: command line driver (`python -m evon`)
"""

__all__ = [
	"core",
	"parser",
	"packages",
	"annotation",
	"policy",
	"resolver",
	"flatten",
	"imports",
	"binder",
	"render",
	"cli",
]
