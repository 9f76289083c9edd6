# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from evon.core.diagnostics import DiagnosticKind
from evon.policy import DeliveryMode, DispatchPolicy, FlagError, check_combination, unknown_flag


@pytest.mark.parametrize(
	"flags,delivery",
	[
		(set(), DeliveryMode.SYNC),
		({"lock"}, DeliveryMode.SYNC),
		({"spawn"}, DeliveryMode.SPAWN),
		({"queue", "wait"}, DeliveryMode.QUEUE),
	],
)
def test_delivery_mode(flags: set, delivery: DeliveryMode) -> None:
	assert DispatchPolicy.from_flags(flags).delivery is delivery


def test_queue_wait_catch_policy() -> None:
	policy = DispatchPolicy.from_flags({"queue", "wait", "catch"})
	assert policy == DispatchPolicy(delivery=DeliveryMode.QUEUE, wait=True, catch=True)
	assert policy.needs_sync


def test_needs_sync_only_for_lock_or_wait() -> None:
	assert not DispatchPolicy.from_flags({"spawn", "pause", "unsub", "catch"}).needs_sync
	assert DispatchPolicy.from_flags({"lock"}).needs_sync
	assert DispatchPolicy.from_flags({"spawn", "wait"}).needs_sync


def test_from_flags_rejects_unknown_flag() -> None:
	with pytest.raises(FlagError, match='Invalid flag "later"') as exc:
		DispatchPolicy.from_flags({"spawn", "later"})
	assert exc.value.kind is DiagnosticKind.INVALID_FLAG
	assert unknown_flag({"lock", "zzz", "aaa"}) == "aaa"


def test_from_flags_rejects_bad_combinations() -> None:
	with pytest.raises(FlagError) as exc:
		DispatchPolicy.from_flags({"queue", "wait", "catch", "spawn"})
	assert exc.value.kind is DiagnosticKind.FLAG_CONFLICT
	with pytest.raises(FlagError) as exc:
		check_combination({"wait"})
	assert exc.value.kind is DiagnosticKind.FLAG_DEPENDENCY
	assert isinstance(exc.value, ValueError)
