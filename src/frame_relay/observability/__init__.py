"""
Observability Module
====================

Logging-side observability for the relay.

This module provides:
    - StatsReporter: Periodic statistics log line

DESIGN RULES:
    - Reads state, never writes it
"""

from frame_relay.observability.reporter import StatsReporter


__all__ = [
    "StatsReporter",
]
