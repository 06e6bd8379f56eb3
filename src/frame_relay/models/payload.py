"""
Classified Payloads
===================

Tagged variant produced by the payload classifier.

A producer message arrives as text or bytes. The classifier turns it into
exactly one of:

    - DataURIPayload: ``data:image/...`` text with an inline base64 body
    - RawBinaryPayload: opaque bytes, assumed to be an image container
    - UnrecognizedPayload: empty input, or text that is not an image data URI

Downstream stages branch on ``payload.kind`` rather than inspecting
Python types of the raw message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class PayloadKind(str, Enum):
    """Classification outcome tags."""

    DATA_URI = "data_uri"
    RAW_BINARY = "raw_binary"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True, slots=True)
class DataURIPayload:
    """Self-describing ``data:image/<type>;base64,<body>`` text."""

    kind: ClassVar[PayloadKind] = PayloadKind.DATA_URI

    text: str

    @property
    def size(self) -> int:
        return len(self.text)

    @property
    def mime_type(self) -> str:
        """MIME type declared in the URI header, e.g. ``image/png``."""
        header = self.text[len("data:"):].split(",", 1)[0]
        return header.split(";", 1)[0]

    def __repr__(self) -> str:
        return f"DataURIPayload(mime_type={self.mime_type!r}, size={self.size})"


@dataclass(frozen=True, slots=True)
class RawBinaryPayload:
    """Opaque bytes, passed through to the transcoder as-is."""

    kind: ClassVar[PayloadKind] = PayloadKind.RAW_BINARY

    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"RawBinaryPayload(size={self.size})"


@dataclass(frozen=True, slots=True)
class UnrecognizedPayload:
    """Input that carries no usable image."""

    kind: ClassVar[PayloadKind] = PayloadKind.UNRECOGNIZED

    reason: str = "unknown format"
    size: int = 0


ClassifiedPayload = Union[DataURIPayload, RawBinaryPayload, UnrecognizedPayload]
