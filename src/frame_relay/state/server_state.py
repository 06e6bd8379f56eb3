"""
Server State
============

The one explicitly owned value holding everything shared between
producer sessions and request handlers.

An instance is created per application (``create_app``) and reached
through ``app.state.relay``; nothing here is a module-level global, so
tests build a fresh state per case.
"""

import asyncio
import logging
import time
from typing import Any, Optional, Set

from frame_relay.config import RelayConfig
from frame_relay.models.frame import OutputFormat
from frame_relay.state.frame_store import FrameStore
from frame_relay.state.runtime_config import RuntimeConfig
from frame_relay.state.statistics import Statistics


logger = logging.getLogger(__name__)


class ServerState:
    """
    Frame store, statistics and runtime config, plus connection bookkeeping.

    Attributes:
        store: Single-slot frame cache
        stats: Process-wide counters
        config: Mutable output configuration
        png_compression: Fixed PNG compression effort
        accepting_producers: False once shutdown has begun
    """

    def __init__(self, relay: Optional[RelayConfig] = None) -> None:
        relay = relay or RelayConfig()

        self.relay_settings = relay
        self.store = FrameStore()
        self.stats = Statistics()
        self.config = RuntimeConfig(
            output_format=OutputFormat.parse(relay.output_format),
            quality=relay.quality,
            max_payload_bytes=relay.max_payload_bytes,
        )
        self.png_compression = relay.png_compression
        self.accepting_producers = True

        self._started_at = time.monotonic()
        self._pending: Set[asyncio.Task] = set()
        self._connections: Set[Any] = set()

    @property
    def uptime_seconds(self) -> int:
        return int(time.monotonic() - self._started_at)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Empty the frame store and zero frame/byte counters."""
        self.store.clear()
        self.stats.reset_frames()
        logger.info("Frame buffer cleared")

    # -------------------------------------------------------------------------
    # In-flight transcodes
    # -------------------------------------------------------------------------

    def track_task(self, task: asyncio.Task) -> asyncio.Task:
        """Keep a reference to ``task`` until it finishes."""
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for in-flight frame tasks.

        Returns:
            True if everything finished within ``timeout``.
        """
        if not self._pending:
            return True
        done, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} frame task(s) still running after drain")
        return not pending

    # -------------------------------------------------------------------------
    # Live connections (producers and push subscribers)
    # -------------------------------------------------------------------------

    def register_connection(self, websocket: Any) -> None:
        self._connections.add(websocket)

    def unregister_connection(self, websocket: Any) -> None:
        self._connections.discard(websocket)

    async def close_connections(self, code: int = 1001) -> int:
        """Close every live socket. Returns how many were closed."""
        connections = list(self._connections)
        for websocket in connections:
            try:
                await websocket.close(code=code)
            except Exception as e:
                logger.debug(f"Close during shutdown failed: {e}")
        self._connections.clear()
        return len(connections)
