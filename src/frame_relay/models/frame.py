"""
Frame Data Model
=================

Canonical encoded-frame representation held by the frame store.

Design Rules:
    - An EncodedFrame is immutable once constructed
    - Replacing the current frame means swapping the reference, never
      editing the buffer in place
    - Only the three output formats below are ever stored or served
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class OutputFormat(str, Enum):
    """
    Image container formats the relay can produce.

    Attributes:
        PNG: Lossless; quality is ignored
        WEBP: Lossy; quality applies
        JPEG: Lossy; quality applies, alpha is dropped
    """

    PNG = "png"
    WEBP = "webp"
    JPEG = "jpeg"

    @property
    def media_type(self) -> str:
        """HTTP content type for this format."""
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        """File extension understood by cv2.imencode."""
        return f".{self.value}"

    @property
    def is_lossy(self) -> bool:
        return self is not OutputFormat.PNG

    @classmethod
    def parse(cls, value: object) -> "OutputFormat":
        """
        Parse a user-supplied format name.

        Raises:
            ValueError: If the value is not one of png, webp, jpeg
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unsupported output format: {value!r}")
        return cls(value.lower())


@dataclass(frozen=True, slots=True)
class EncodedFrame:
    """
    A successfully transcoded frame, ready to serve.

    Attributes:
        data: Encoded image bytes
        format: Container format of ``data``
        created_at: UNIX timestamp when the frame was encoded
    """

    data: bytes
    format: OutputFormat
    created_at: float = field(default_factory=time.time)

    @property
    def size(self) -> int:
        """Size of the encoded buffer in bytes."""
        return len(self.data)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return (
            f"EncodedFrame(format={self.format.value}, "
            f"size={self.size}, "
            f"created_at={self.created_at:.3f})"
        )
