"""
Ingestion Session
=================

One session per producer connection.

Each inbound message runs Classifier → Normalizer synchronously and in
arrival order, then hands the image bytes to a background transcode task,
so a slow transcode never holds up the next message on the same socket.

Design Rules:
    - No frame error ever ends the session or reaches the producer
    - Every failure is logged, counted by ErrorKind and written to
      ``last_frame_status``
    - Oversized payloads are rejected before decoding and do not count
      toward bytes_received
    - Closing the session does not cancel in-flight transcodes; their
      result is applied whenever they finish (a late result may replace a
      newer frame, which is accepted: only the latest rendered state matters)
"""

import asyncio
import logging
from typing import Optional

from frame_relay.ingest.classifier import RawMessage, classify
from frame_relay.ingest.normalizer import (
    MalformedPayloadError,
    PayloadTooLargeError,
    UnknownFormatError,
    normalize,
)
from frame_relay.ingest.transcoder import (
    ImageDecodeFailedError,
    ImageEncodeFailedError,
    transcode_async,
)
from frame_relay.models.errors import ErrorKind
from frame_relay.models.payload import ClassifiedPayload, PayloadKind
from frame_relay.state.runtime_config import RuntimeConfigSnapshot
from frame_relay.state.server_state import ServerState


logger = logging.getLogger(__name__)


class IngestionSession:
    """
    Drives the ingest pipeline for one producer connection.

    States: connected (after ``open``) → receiving → closed.

    Example:
        session = IngestionSession(state, peer="127.0.0.1:50432")
        session.open()
        try:
            async for message in transport:
                session.handle_message(message)
        except TransportFailure as e:
            session.on_transport_error(e)
        finally:
            session.close()
    """

    def __init__(self, state: ServerState, peer: str = "unknown") -> None:
        self.state = state
        self.peer = peer
        self.messages_handled: int = 0
        self._opened = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    def open(self) -> None:
        """Register the producer as connected."""
        if self._opened:
            return
        self._opened = True
        total = self.state.stats.client_connected()
        logger.info(f"Client connected from {self.peer}. Total: {total}")

    def close(self) -> None:
        """Register the producer as gone. Safe to call more than once."""
        if not self._opened or self._closed:
            return
        self._closed = True
        total = self.state.stats.client_disconnected()
        logger.info(
            f"Client {self.peer} disconnected after {self.messages_handled} message(s). "
            f"Total: {total}"
        )

    def on_transport_error(self, error: BaseException) -> None:
        """Record a connection-level failure."""
        self.state.stats.record_error(ErrorKind.TRANSPORT_ERROR)
        logger.error(f"WebSocket error from {self.peer}: {error}")

    def handle_message(self, raw: RawMessage) -> Optional[asyncio.Task]:
        """
        Process one producer message.

        Must be called from the event loop. Returns the transcode task when
        the payload made it past classification and normalization, else None.
        """
        self.messages_handled += 1
        stats = self.state.stats
        frame_no = stats.record_frame()
        config = self.state.config.snapshot()

        payload = classify(raw)

        try:
            image_bytes = normalize(payload, config.max_payload_bytes)
        except PayloadTooLargeError as e:
            stats.record_error(ErrorKind.PAYLOAD_TOO_LARGE)
            stats.set_status("frame too large")
            logger.warning(
                f"Frame {frame_no} too large: {e.size / 1024 / 1024:.2f} MB "
                f"(limit {e.limit / 1024 / 1024:.2f} MB)"
            )
            return None
        except UnknownFormatError as e:
            stats.record_error(ErrorKind.CLASSIFICATION_AMBIGUOUS)
            stats.set_status("unknown format")
            logger.warning(f"Frame {frame_no}: unknown format ({e})")
            return None
        except MalformedPayloadError as e:
            stats.add_bytes(payload.size)
            stats.record_error(ErrorKind.DECODE_FAILED)
            stats.set_status(f"decode error: {e}")
            logger.error(f"Frame {frame_no} decode error: {e}")
            return None

        stats.add_bytes(payload.size)

        task = asyncio.create_task(
            self._transcode_and_store(frame_no, payload, image_bytes, config),
            name=f"frame-{frame_no}",
        )
        return self.state.track_task(task)

    async def _transcode_and_store(
        self,
        frame_no: int,
        payload: ClassifiedPayload,
        image_bytes: bytes,
        config: RuntimeConfigSnapshot,
    ) -> None:
        stats = self.state.stats
        source = _describe_source(payload)
        target = config.output_format

        try:
            frame = await transcode_async(
                image_bytes,
                target,
                config.quality,
                self.state.png_compression,
            )
        except ImageDecodeFailedError as e:
            stats.record_error(ErrorKind.DECODE_FAILED)
            stats.set_status(f"decode error: {e}")
            logger.error(f"Frame {frame_no} ({source}) decode error: {e}")
            return
        except ImageEncodeFailedError as e:
            stats.record_error(ErrorKind.ENCODE_FAILED)
            stats.set_status(f"encode error: {e}")
            logger.error(f"Frame {frame_no} ({source}) encode error: {e}")
            return
        except Exception as e:
            stats.record_error(ErrorKind.PROCESSING_ERROR)
            stats.set_status(f"error: {e}")
            logger.exception(f"Frame {frame_no} processing error: {e}")
            return

        self.state.store.put(frame)

        fmt = target.value.upper()
        src_kb = payload.size / 1024
        out_kb = frame.size / 1024
        stats.set_status(f"{source} → {fmt} ✓ ({src_kb:.1f} KB → {out_kb:.1f} KB)")
        logger.info(f"Frame {frame_no}: {src_kb:.1f} KB {source} → {fmt} {out_kb:.1f} KB")


def _describe_source(payload: ClassifiedPayload) -> str:
    if payload.kind is PayloadKind.DATA_URI:
        return f"data:{payload.mime_type}"
    return "raw buffer"
