# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Output file handling.

The file is rendered completely in memory before it is opened, so a rendering
failure never leaves a truncated file behind; the handle itself is scoped to a
`with` block.
"""

from __future__ import annotations

from pathlib import Path

from .emitter import Emitter, GoEmitter
from .model import GenFile


def render_file(gen: GenFile, *, emitter: Emitter | None = None) -> str:
	return (emitter or GoEmitter()).render(gen)


def write_generated(path: Path, gen: GenFile, *, emitter: Emitter | None = None) -> str:
	"""Render `gen` and write it to `path`; returns the written text."""
	text = render_file(gen, emitter=emitter)
	with open(path, "w", encoding="utf-8", newline="\n") as fh:
		fh.write(text)
	return text


def remove_stale(path: Path) -> bool:
	"""Delete a previously generated file; True if one was there."""
	try:
		path.unlink()
	except FileNotFoundError:
		return False
	return True


__all__ = ["remove_stale", "render_file", "write_generated"]
