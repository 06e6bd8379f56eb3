"""
Frame Normalizer
================

Turns a classified payload into encoded image-container bytes.

After this stage the bytes are still PNG/JPEG/WebP/... compressed data;
pixel decoding happens in the transcoder.

Design Rules:
    - The payload ceiling is enforced here, before any decoding
    - Raw binary payloads pass through unchanged
    - Failures raise a FrameDecodeError subclass and never touch shared state
"""

import base64
import binascii
import logging

from frame_relay.models.payload import ClassifiedPayload, PayloadKind


logger = logging.getLogger(__name__)


class FrameDecodeError(Exception):
    """Raised when a payload cannot be turned into image bytes."""
    pass


class PayloadTooLargeError(FrameDecodeError):
    """Payload exceeds the configured ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"payload of {size} bytes exceeds limit of {limit} bytes"
        )


class MalformedPayloadError(FrameDecodeError):
    """Data URI has no body separator or an invalid base64 body."""
    pass


class UnknownFormatError(FrameDecodeError):
    """Payload was classified as unrecognized."""
    pass


def normalize(payload: ClassifiedPayload, max_bytes: int) -> bytes:
    """
    Extract encoded image bytes from a classified payload.

    Args:
        payload: Output of ``classify``
        max_bytes: Largest accepted payload length (inclusive)

    Returns:
        Encoded image bytes

    Raises:
        PayloadTooLargeError: If the payload is longer than ``max_bytes``
        MalformedPayloadError: If a data URI cannot be decoded
        UnknownFormatError: If the payload is unrecognized
    """
    if payload.kind is PayloadKind.UNRECOGNIZED:
        raise UnknownFormatError(payload.reason)

    if payload.size > max_bytes:
        raise PayloadTooLargeError(payload.size, max_bytes)

    if payload.kind is PayloadKind.RAW_BINARY:
        return payload.data

    return _decode_data_uri(payload.text)


def _decode_data_uri(text: str) -> bytes:
    comma = text.find(",")
    if comma < 0:
        raise MalformedPayloadError("data URI has no ',' separator")

    # Producers may send line-wrapped or unpadded base64
    body = "".join(text[comma + 1:].split())
    body += "=" * (-len(body) % 4)

    try:
        image_bytes = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayloadError(f"invalid base64 body: {e}")

    if not image_bytes:
        raise MalformedPayloadError("data URI body is empty")

    return image_bytes
