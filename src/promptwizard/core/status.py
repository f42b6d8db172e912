"""Backend reachability probes.

Each backend is reported as ``online`` or ``offline``; before the first
probe resolves it is ``checking``.  Every failure (unset URL, connection
error, timeout, non-2xx status) counts as ``offline``.

:class:`StatusMonitor` polls both backends at a fixed interval for as long as
it is entered as an async context manager::

    async with StatusMonitor(llm_url, image_url, interval=30) as monitor:
        ...
        monitor.snapshot()

Leaving the context stops the polling task.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx

from promptwizard.core.models import ServerStatus

logger = logging.getLogger(__name__)


async def probe(client: httpx.AsyncClient, url: str | None) -> ServerStatus:
    """GET *url* and report ``online`` for a 2xx answer, else ``offline``."""
    if not url:
        return "offline"
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        logger.debug(f"Probe of {url} failed: {e}")
        return "offline"
    return "online" if response.is_success else "offline"


class StatusMonitor:
    """Lifecycle-bound poller for the LLM and image backends.

    Args:
        llm_url: LLM server base URL (``None`` reports offline).
        image_url: Image backend base URL (``None`` reports offline).
        interval: Seconds between polling rounds.
        timeout: Per-probe timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Attributes:
        llm_server (ServerStatus): Latest LLM status.
        comfy_server (ServerStatus): Latest image backend status.
        checked_at (datetime | None): When the last round finished.
    """

    def __init__(
        self,
        llm_url: str | None,
        image_url: str | None,
        *,
        interval: float = 30.0,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.llm_url = llm_url
        self.image_url = image_url
        self.interval = interval
        self._timeout = timeout
        self._transport = transport
        self.llm_server: ServerStatus = "checking"
        self.comfy_server: ServerStatus = "checking"
        self.checked_at: datetime | None = None
        self._task: asyncio.Task | None = None

    async def check_once(self) -> dict:
        """Probe both backends concurrently and record the results."""
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            llm, comfy = await asyncio.gather(
                probe(client, self.llm_url),
                probe(client, self.image_url),
            )
        if (llm, comfy) != (self.llm_server, self.comfy_server):
            logger.info(f"Backend status: llm={llm} image={comfy}")
        self.llm_server, self.comfy_server = llm, comfy
        self.checked_at = datetime.now(timezone.utc)
        return self.snapshot()

    def snapshot(self) -> dict:
        timestamp = (self.checked_at or datetime.now(timezone.utc)).isoformat()
        return {
            "llmServer": self.llm_server,
            "comfyServer": self.comfy_server,
            "timestamp": timestamp,
        }

    async def _poll(self) -> None:
        while True:
            try:
                await self.check_once()
            except Exception as e:
                logger.warning(f"Status probe round failed, reporting offline: {e}")
                self.llm_server = self.comfy_server = "offline"
                self.checked_at = datetime.now(timezone.utc)
            await asyncio.sleep(self.interval)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def __aenter__(self) -> StatusMonitor:
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
