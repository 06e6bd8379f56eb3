"""
Stats Reporter
==============

Periodic statistics log line for the relay.

Emits one INFO line every ``interval`` seconds while at least one frame
has been received:

    Frames: 1200 | Clients: 1 | Data: 50.00 MB | Uptime: 60m 0s | Errors: 2

Observability ONLY: never touches the frame store or config.
"""

import asyncio
import logging
from typing import Optional

from frame_relay.state.server_state import ServerState


logger = logging.getLogger(__name__)


class StatsReporter:
    """
    Background task that logs statistics on an interval.

    Example:
        reporter = StatsReporter(state, interval=5.0)
        task = asyncio.create_task(reporter.run())

        # Later, stop gracefully
        await reporter.stop()
        await task
    """

    def __init__(self, state: ServerState, interval: float = 5.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")

        self.state = state
        self.interval = interval
        self.reports_emitted: int = 0
        self._stop_event: asyncio.Event = asyncio.Event()

    async def run(self) -> None:
        """Log until ``stop`` is called."""
        self._stop_event.clear()
        logger.info(f"StatsReporter started: interval={self.interval:.1f}s")

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            line = self.format_line()
            if line is not None:
                logger.info(line)
                self.reports_emitted += 1

        logger.info("StatsReporter stopped")

    async def stop(self) -> None:
        self._stop_event.set()

    def format_line(self) -> Optional[str]:
        """Current stats line, or None when nothing has been received."""
        snapshot = self.state.stats.snapshot()
        if snapshot.frames_received == 0:
            return None

        uptime = self.state.uptime_seconds
        return (
            f"Frames: {snapshot.frames_received} | "
            f"Clients: {snapshot.connected_clients} | "
            f"Data: {snapshot.data_mb:.2f} MB | "
            f"Uptime: {uptime // 60}m {uptime % 60}s | "
            f"Errors: {snapshot.total_errors}"
        )
