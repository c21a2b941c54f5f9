"""Tests for the verification poller."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from modules.auth.verification import VerificationPoller
from shared.exceptions import BackendUnavailableError


class TestVerificationPoller:
    @pytest.mark.asyncio
    async def test_stops_after_first_successful_check(self):
        check = AsyncMock(side_effect=[False, False, True])
        on_verified = AsyncMock()
        poller = VerificationPoller(check, interval=0.01, on_verified=on_verified)

        poller.start()
        assert await asyncio.wait_for(poller.wait(), timeout=1) is True

        assert poller.checks == 3
        assert check.await_count == 3
        on_verified.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_waits_one_interval_before_first_check(self):
        check = AsyncMock(return_value=True)
        poller = VerificationPoller(check, interval=0.2)

        poller.start()
        await asyncio.sleep(0.05)
        check.assert_not_awaited()
        poller.cancel()
        await poller.wait()

    @pytest.mark.asyncio
    async def test_cancel_stops_polling(self):
        check = AsyncMock(return_value=False)
        poller = VerificationPoller(check, interval=0.01)

        poller.start()
        await asyncio.sleep(0.05)
        poller.cancel()

        assert await asyncio.wait_for(poller.wait(), timeout=1) is False
        checks_at_cancel = check.await_count
        await asyncio.sleep(0.05)
        assert check.await_count == checks_at_cancel
        assert not poller.running

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        poller = VerificationPoller(AsyncMock(return_value=False), interval=0.01)
        poller.start()
        poller.cancel()
        poller.cancel()
        await poller.wait()

    @pytest.mark.asyncio
    async def test_failed_checks_keep_polling(self):
        check = AsyncMock(side_effect=[BackendUnavailableError("identity backend"), True])
        poller = VerificationPoller(check, interval=0.01)

        poller.start()
        assert await asyncio.wait_for(poller.wait(), timeout=1) is True
        assert poller.checks == 2

    @pytest.mark.asyncio
    async def test_start_twice_runs_one_loop(self):
        check = AsyncMock(return_value=True)
        poller = VerificationPoller(check, interval=0.01)

        poller.start()
        poller.start()
        await asyncio.wait_for(poller.wait(), timeout=1)

        assert check.await_count == 1

    @pytest.mark.asyncio
    async def test_wait_without_start(self):
        poller = VerificationPoller(AsyncMock(return_value=True))
        assert await poller.wait() is False

    @pytest.mark.asyncio
    async def test_unexpected_error_is_logged_and_kept(self, caplog):
        check = AsyncMock(side_effect=RuntimeError("boom"))
        poller = VerificationPoller(check, interval=0.01)

        with caplog.at_level("ERROR", logger="modules.auth.verification"):
            poller.start()
            with pytest.raises(RuntimeError):
                await asyncio.wait_for(poller.wait(), timeout=1)
            await asyncio.sleep(0)

        assert not poller.running
        assert isinstance(poller.error, RuntimeError)
        assert "Verification polling stopped" in caplog.text

    @pytest.mark.asyncio
    async def test_failing_callback_is_logged(self, caplog):
        check = AsyncMock(return_value=True)
        on_verified = AsyncMock(side_effect=ValueError("callback failed"))
        poller = VerificationPoller(check, interval=0.01, on_verified=on_verified)

        with caplog.at_level("ERROR", logger="modules.auth.verification"):
            poller.start()
            with pytest.raises(ValueError):
                await asyncio.wait_for(poller.wait(), timeout=1)
            await asyncio.sleep(0)

        assert poller.verified is True
        assert isinstance(poller.error, ValueError)
