"""
State Module
============

Shared, concurrency-safe state for the relay:
    - FrameStore: Single-slot cache of the latest encoded frame
    - Statistics: Counters, gauges and last ingest status
    - RuntimeConfig: Output format / quality / payload ceiling
    - ServerState: Owns all of the above for one application
"""

from frame_relay.state.frame_store import FrameStore
from frame_relay.state.statistics import Statistics, StatisticsSnapshot
from frame_relay.state.runtime_config import RuntimeConfig, RuntimeConfigSnapshot
from frame_relay.state.server_state import ServerState


__all__ = [
    "FrameStore",
    "Statistics",
    "StatisticsSnapshot",
    "RuntimeConfig",
    "RuntimeConfigSnapshot",
    "ServerState",
]
