# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Annotation flags and the dispatch policy they select.

The flag vocabulary is fixed. Two combination rules apply: `spawn` and `queue`
are mutually exclusive delivery modes, and `wait` needs one of them (there is
nothing to wait for when handlers run inline).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional

from evon.core.diagnostics import DiagnosticKind

FLAG_CATCH = "catch"
FLAG_LOCK = "lock"
FLAG_PAUSE = "pause"
FLAG_QUEUE = "queue"
FLAG_SPAWN = "spawn"
FLAG_UNSUB = "unsub"
FLAG_WAIT = "wait"

VALID_FLAGS = frozenset({FLAG_CATCH, FLAG_LOCK, FLAG_PAUSE, FLAG_QUEUE, FLAG_SPAWN, FLAG_UNSUB, FLAG_WAIT})


class FlagError(ValueError):
	"""An invalid flag combination; `kind` says which rule was broken."""

	def __init__(self, message: str, *, kind: DiagnosticKind) -> None:
		super().__init__(message)
		self.kind = kind


def check_combination(flags: AbstractSet[str]) -> None:
	"""Raise `FlagError` when `flags` break a combination rule."""
	if FLAG_SPAWN in flags and FLAG_QUEUE in flags:
		raise FlagError(
			f'Flag "{FLAG_SPAWN}" cannot coexist with "{FLAG_QUEUE}"',
			kind=DiagnosticKind.FLAG_CONFLICT,
		)
	if FLAG_WAIT in flags and not (FLAG_SPAWN in flags or FLAG_QUEUE in flags):
		raise FlagError(
			f'Flag "{FLAG_WAIT}" can only be used together with "{FLAG_SPAWN}" or "{FLAG_QUEUE}"',
			kind=DiagnosticKind.FLAG_DEPENDENCY,
		)


def unknown_flag(flags: AbstractSet[str]) -> Optional[str]:
	for f in sorted(flags):
		if f not in VALID_FLAGS:
			return f
	return None


class DeliveryMode(Enum):
	SYNC = "sync"  # handlers run inline, in subscription order
	SPAWN = "spawn"  # one goroutine per handler call
	QUEUE = "queue"  # one queue and one draining goroutine per subscriber


@dataclass(frozen=True)
class DispatchPolicy:
	delivery: DeliveryMode = DeliveryMode.SYNC
	wait: bool = False
	lock: bool = False
	pause: bool = False
	unsub: bool = False
	catch: bool = False

	@classmethod
	def from_flags(cls, flags: AbstractSet[str]) -> "DispatchPolicy":
		bad = unknown_flag(flags)
		if bad is not None:
			raise FlagError(f'Invalid flag "{bad}"', kind=DiagnosticKind.INVALID_FLAG)
		check_combination(flags)
		if FLAG_SPAWN in flags:
			delivery = DeliveryMode.SPAWN
		elif FLAG_QUEUE in flags:
			delivery = DeliveryMode.QUEUE
		else:
			delivery = DeliveryMode.SYNC
		return cls(
			delivery=delivery,
			wait=FLAG_WAIT in flags,
			lock=FLAG_LOCK in flags,
			pause=FLAG_PAUSE in flags,
			unsub=FLAG_UNSUB in flags,
			catch=FLAG_CATCH in flags,
		)

	@property
	def needs_sync(self) -> bool:
		"""Whether the generated code uses the `sync` package."""
		return self.lock or self.wait


__all__ = [
	"DeliveryMode",
	"DispatchPolicy",
	"FLAG_CATCH",
	"FLAG_LOCK",
	"FLAG_PAUSE",
	"FLAG_QUEUE",
	"FLAG_SPAWN",
	"FLAG_UNSUB",
	"FLAG_WAIT",
	"FlagError",
	"VALID_FLAGS",
	"check_combination",
	"unknown_flag",
]
