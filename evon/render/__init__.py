# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rendering of analysis results.

Modules:
  - model: render model and naming (`build_gen_file`, `prefix_ident`)
  - emitter: Go source emission (`GoEmitter`)
  - writer: output file creation and stale output removal
  - summary: show-mode rows
"""

from __future__ import annotations

from .emitter import Emitter, GoEmitter
from .model import GenFile, build_gen_file, prefix_ident
from .writer import remove_stale, render_file, write_generated

__all__ = [
	"Emitter",
	"GenFile",
	"GoEmitter",
	"build_gen_file",
	"prefix_ident",
	"remove_stale",
	"render_file",
	"write_generated",
]
