"""
Serving Layer
=============

Read side of the relay: what HTTP handlers and push subscribers get.

Design Rules:
    - The frame endpoint never turns a frame error into an HTTP error
    - Empty store → a real 1x1 placeholder in the requested format
    - Stored frame already in the requested format → bytes verbatim
    - Otherwise transcode on demand; if that fails, fall back to the stored
      bytes labelled with their actual format, and count the failure
"""

import asyncio
import logging
from typing import Tuple

from fastapi import WebSocket

from frame_relay.ingest.transcoder import TranscodeError, placeholder_image, transcode_async
from frame_relay.models.api import CurrentFrameInfo, HealthResponse, StatsResponse
from frame_relay.models.errors import ErrorKind
from frame_relay.models.frame import OutputFormat
from frame_relay.state.server_state import ServerState


logger = logging.getLogger(__name__)


async def render_frame(state: ServerState, requested: OutputFormat) -> Tuple[bytes, OutputFormat]:
    """
    Produce the current frame for a reader.

    Args:
        state: Server state
        requested: Format asked for by the reader

    Returns:
        (image bytes, format of those bytes). The format differs from
        ``requested`` only when on-demand transcoding failed.
    """
    frame = state.store.get()

    if frame is None:
        return placeholder_image(requested), requested

    if frame.format is requested:
        return frame.data, requested

    try:
        converted = await transcode_async(
            frame.data,
            requested,
            state.config.quality,
            state.png_compression,
        )
    except TranscodeError as e:
        state.stats.record_error(ErrorKind.SERVE_TRANSCODE_FAILED)
        logger.error(
            f"On-demand {frame.format.value} → {requested.value} transcode failed, "
            f"serving stored frame: {e}"
        )
        return frame.data, frame.format

    return converted.data, requested


def build_stats(state: ServerState) -> StatsResponse:
    """Statistics snapshot plus derived fields."""
    snapshot = state.stats.snapshot()
    frame = state.store.get()

    current = None
    if frame is not None:
        current = CurrentFrameInfo(
            format=frame.format.value,
            size=frame.size,
            created_at=frame.created_at,
        )

    return StatsResponse(
        clients=snapshot.connected_clients,
        frames=snapshot.frames_received,
        bytes=snapshot.bytes_received,
        data_mb=snapshot.data_mb,
        type=snapshot.last_frame_status,
        uptime=state.uptime_seconds,
        errors=snapshot.total_errors,
        errors_by_kind=snapshot.error_counts,
        subscribers=snapshot.subscribers,
        current_frame=current,
    )


def build_health(state: ServerState) -> HealthResponse:
    """Lightweight liveness payload."""
    return HealthResponse(
        status="healthy",
        uptime=state.uptime_seconds,
        clients=state.stats.connected_clients,
        frames=state.stats.frames_received,
    )


async def push_frames(websocket: WebSocket, state: ServerState, interval: float) -> None:
    """
    Send the stored frame to a subscriber every time it changes.

    Runs until the subscriber disconnects. Only the newest frame is ever
    sent; frames replaced between two checks are skipped.
    """
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    last_version = -1

    try:
        while not disconnected.done():
            frame, version = state.store.get_versioned()
            if frame is not None and version != last_version:
                await websocket.send_bytes(frame.data)
            last_version = version

            await asyncio.wait({disconnected}, timeout=interval)
    finally:
        if disconnected.done() and not disconnected.cancelled():
            error = disconnected.exception()
            if error is not None:
                logger.debug(f"Subscriber receive loop ended with: {error}")
        disconnected.cancel()


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
