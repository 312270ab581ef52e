"""Tests for the periodic notification purge."""

from __future__ import annotations

from datetime import timedelta

import pytest

from fakes import FakeGateway, wait_until
from reelhub.infrastructure.notifications import NotificationPurger

pytestmark = pytest.mark.anyio


async def test_run_once_purges_deleted_and_expired_records() -> None:
    gateway = FakeGateway()
    purger = NotificationPurger(gateway, retention=timedelta(days=30))

    assert await purger.run_once() == (2, 1)
    assert gateway.purge_soft_calls == 1
    assert gateway.purge_older_calls == [timedelta(days=30)]


async def test_failed_sweep_is_logged_and_the_other_still_runs(caplog) -> None:
    gateway = FakeGateway()
    gateway.fail_purge_soft = True
    purger = NotificationPurger(gateway)

    with caplog.at_level("ERROR"):
        result = await purger.run_once()

    assert result == (0, 1)
    assert "Purge of soft-deleted notifications failed" in caplog.text
    assert len(gateway.purge_older_calls) == 1


async def test_started_purger_runs_on_its_interval() -> None:
    gateway = FakeGateway()
    purger = NotificationPurger(gateway, interval=0.02)

    purger.start()
    try:
        await wait_until(lambda: gateway.purge_soft_calls >= 2)
    finally:
        await purger.stop()

    calls = gateway.purge_soft_calls
    await purger.stop()
    assert gateway.purge_soft_calls == calls
