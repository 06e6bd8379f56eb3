"""
Statistics
==========

Process-wide counters for the relay.

Counters:
    - frames_received: every producer message, whatever its outcome
    - bytes_received: payload length of accepted (not oversized) messages
    - connected_clients: live producer connections (gauge)
    - subscribers: live push subscribers (gauge)
    - last_frame_status: free-text outcome of the most recent ingest
    - error counts per ErrorKind (cumulative; survive ``clear``)

Each mutation is atomic on its own; there are no multi-field transactions.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict

from frame_relay.models.errors import ErrorKind


logger = logging.getLogger(__name__)


INITIAL_STATUS = "waiting..."
CLEARED_STATUS = "buffer cleared"


@dataclass(frozen=True, slots=True)
class StatisticsSnapshot:
    """Point-in-time copy of the counters."""

    frames_received: int
    bytes_received: int
    connected_clients: int
    subscribers: int
    last_frame_status: str
    error_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_errors(self) -> int:
        return sum(self.error_counts.values())

    @property
    def connection_errors(self) -> int:
        return self.error_counts.get(ErrorKind.TRANSPORT_ERROR.value, 0)

    @property
    def data_mb(self) -> float:
        return round(self.bytes_received / 1024 / 1024, 2)


class Statistics:
    """Thread-safe counters shared by sessions and request handlers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frames_received = 0
        self._bytes_received = 0
        self._connected_clients = 0
        self._subscribers = 0
        self._last_frame_status = INITIAL_STATUS
        self._error_counts: Dict[ErrorKind, int] = {}

    @property
    def frames_received(self) -> int:
        with self._lock:
            return self._frames_received

    @property
    def bytes_received(self) -> int:
        with self._lock:
            return self._bytes_received

    @property
    def connected_clients(self) -> int:
        with self._lock:
            return self._connected_clients

    @property
    def last_frame_status(self) -> str:
        with self._lock:
            return self._last_frame_status

    def record_frame(self) -> int:
        """Count an inbound message. Returns its sequence number."""
        with self._lock:
            self._frames_received += 1
            return self._frames_received

    def add_bytes(self, count: int) -> None:
        with self._lock:
            self._bytes_received += count

    def set_status(self, status: str) -> None:
        with self._lock:
            self._last_frame_status = status

    def record_error(self, kind: ErrorKind) -> int:
        """Increment the counter for ``kind``. Returns the new count."""
        with self._lock:
            count = self._error_counts.get(kind, 0) + 1
            self._error_counts[kind] = count
            return count

    def error_count(self, kind: ErrorKind) -> int:
        with self._lock:
            return self._error_counts.get(kind, 0)

    def client_connected(self) -> int:
        with self._lock:
            self._connected_clients += 1
            return self._connected_clients

    def client_disconnected(self) -> int:
        with self._lock:
            self._connected_clients = max(0, self._connected_clients - 1)
            return self._connected_clients

    def subscriber_added(self) -> int:
        with self._lock:
            self._subscribers += 1
            return self._subscribers

    def subscriber_removed(self) -> int:
        with self._lock:
            self._subscribers = max(0, self._subscribers - 1)
            return self._subscribers

    def reset_frames(self) -> None:
        """Zero frame/byte counters. Error counters are kept."""
        with self._lock:
            self._frames_received = 0
            self._bytes_received = 0
            self._last_frame_status = CLEARED_STATUS

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            return StatisticsSnapshot(
                frames_received=self._frames_received,
                bytes_received=self._bytes_received,
                connected_clients=self._connected_clients,
                subscribers=self._subscribers,
                last_frame_status=self._last_frame_status,
                error_counts={k.value: v for k, v in self._error_counts.items()},
            )
