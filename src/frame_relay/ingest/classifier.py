"""
Payload Classifier
==================

Decides what kind of payload a producer message carries.

Producers may sit on transports that deliver the same logical data-URI
string as either a text or a binary message. A binary message whose first
five bytes spell ``data:`` is therefore decoded back to text before the
image prefix check.

Design Rules:
    - Never raises; an unusable message is an UnrecognizedPayload
    - Does NOT decode base64 or image data
"""

import logging
from typing import Union

from frame_relay.models.payload import (
    ClassifiedPayload,
    DataURIPayload,
    RawBinaryPayload,
    UnrecognizedPayload,
)


logger = logging.getLogger(__name__)


DATA_URI_SIGNATURE = b"data:"
IMAGE_DATA_URI_PREFIX = "data:image"

RawMessage = Union[str, bytes, bytearray, memoryview]


def classify(raw: RawMessage) -> ClassifiedPayload:
    """
    Classify a raw producer message.

    Args:
        raw: Text or binary message exactly as received

    Returns:
        DataURIPayload for ``data:image...`` text (or bytes carrying it),
        RawBinaryPayload for any other non-empty binary message,
        UnrecognizedPayload otherwise.
    """
    if isinstance(raw, str):
        return _classify_text(raw)

    data = bytes(raw)
    if not data:
        return UnrecognizedPayload(reason="empty payload")

    if data[: len(DATA_URI_SIGNATURE)] == DATA_URI_SIGNATURE:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Binary message has data: signature but is not UTF-8")
            return UnrecognizedPayload(reason="malformed data URI", size=len(data))
        return _classify_text(text)

    return RawBinaryPayload(data=data)


def _classify_text(text: str) -> ClassifiedPayload:
    if not text:
        return UnrecognizedPayload(reason="empty payload")
    if text.startswith(IMAGE_DATA_URI_PREFIX):
        return DataURIPayload(text=text)
    return UnrecognizedPayload(reason="unknown format", size=len(text))
