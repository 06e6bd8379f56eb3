"""
Frame Relay
===========

Relays rendered frames from a real-time renderer to video-mixing tools.

Producers push frames over a WebSocket as ``data:image/...`` strings or raw
image bytes. The relay normalizes each one, transcodes it to the configured
output format (PNG, WebP or JPEG) and keeps only the most recent frame,
which consumers pull over HTTP or receive by push.

Components:
    - ingest: Classifier, normalizer, transcoder, ingestion session
    - state: Frame store, statistics, runtime config
    - serving: Frame, stats and health rendering
    - observability: Periodic stats logging

Example:
    uvicorn frame_relay.main:app --port 8080
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
