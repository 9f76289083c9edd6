"""
evon.core: shared primitives used across the loader and the analysis pass.

Modules:
  - span: source positions
  - diagnostics: Diagnostic records and the per-run collector
  - dedup: collision-free name allocation
"""

__all__ = [
	"span",
	"diagnostics",
	"dedup",
]
