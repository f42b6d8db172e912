"""Unit tests for backend status probes."""

import asyncio

import httpx

from promptwizard.core.status import StatusMonitor


def _transport(online_hosts: set[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host in online_hosts:
            return httpx.Response(200)
        raise httpx.ConnectError("refused", request=request)

    return httpx.MockTransport(handler)


class TestStatusMonitor:
    """Tests for StatusMonitor."""

    def test_initial_state_is_checking(self):
        monitor = StatusMonitor("http://llm.test", "http://img.test")
        snapshot = monitor.snapshot()
        assert snapshot["llmServer"] == "checking"
        assert snapshot["comfyServer"] == "checking"
        assert "timestamp" in snapshot

    def test_check_once(self):
        monitor = StatusMonitor(
            "http://llm.test", "http://img.test", transport=_transport({"llm.test"})
        )
        snapshot = asyncio.run(monitor.check_once())
        assert snapshot["llmServer"] == "online"
        assert snapshot["comfyServer"] == "offline"
        assert monitor.checked_at is not None

    def test_unset_urls_are_offline(self):
        monitor = StatusMonitor(None, None, transport=_transport(set()))
        snapshot = asyncio.run(monitor.check_once())
        assert (snapshot["llmServer"], snapshot["comfyServer"]) == ("offline", "offline")

    def test_error_status_is_offline(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        monitor = StatusMonitor("http://llm.test", None, transport=transport)
        assert asyncio.run(monitor.check_once())["llmServer"] == "offline"

    def test_context_manager_polls_and_stops(self):
        monitor = StatusMonitor(
            "http://llm.test", "http://img.test",
            interval=0.01,
            transport=_transport({"llm.test", "img.test"}),
        )

        async def scenario():
            async with monitor:
                assert monitor.running
                for _ in range(50):
                    if monitor.checked_at is not None:
                        break
                    await asyncio.sleep(0.01)
            return monitor.running

        assert asyncio.run(scenario()) is False
        assert monitor.llm_server == "online"
        assert monitor.comfy_server == "online"

    def test_polling_survives_unexpected_errors(self):
        transport = _transport({"llm.test", "img.test"})
        monitor = StatusMonitor("http://llm.test", "http://img.test", interval=0.01, transport=transport)
        real_check = monitor.check_once
        calls = []

        async def flaky_check():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("unexpected")
            return await real_check()

        monitor.check_once = flaky_check

        async def scenario():
            async with monitor:
                for _ in range(100):
                    if len(calls) >= 2 and monitor.llm_server == "online":
                        break
                    await asyncio.sleep(0.01)
            return monitor.running

        assert asyncio.run(scenario()) is False
        assert len(calls) >= 2
        assert monitor.llm_server == "online"

    def test_failed_round_reports_offline(self):
        monitor = StatusMonitor("http://llm.test", "http://img.test", interval=10)

        async def broken_check():
            raise RuntimeError("unexpected")

        monitor.check_once = broken_check

        async def scenario():
            async with monitor:
                for _ in range(50):
                    if monitor.checked_at is not None:
                        break
                    await asyncio.sleep(0.01)
                return monitor.running

        assert asyncio.run(scenario()) is True
        assert (monitor.llm_server, monitor.comfy_server) == ("offline", "offline")
