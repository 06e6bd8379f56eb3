"""
Transcoder
==========

Decodes encoded image bytes and re-encodes them into an output format.

Design Rules:
    - This is the ONLY place in the codebase that touches the image codec
    - No shared mutable state; safe to call from several threads at once
    - PNG ignores quality and uses a fixed compression effort
    - WebP and JPEG take quality directly
    - Async callers go through ``transcode_async`` so the event loop never
      runs codec work
"""

import asyncio
import logging
from functools import lru_cache

import cv2
import numpy as np

from frame_relay.models.frame import EncodedFrame, OutputFormat


logger = logging.getLogger(__name__)


DEFAULT_PNG_COMPRESSION = 6


class TranscodeError(Exception):
    """Raised when a frame cannot be transcoded."""
    pass


class ImageDecodeFailedError(TranscodeError):
    """Bytes are not a decodable image container."""
    pass


class ImageEncodeFailedError(TranscodeError):
    """The encoder rejected the decoded image."""
    pass


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode image container bytes into a pixel array.

    Channels, alpha and bit depth are kept as stored (IMREAD_UNCHANGED).

    Args:
        data: Encoded image bytes (PNG, JPEG, WebP, ...)

    Returns:
        Image as np.ndarray, (H, W) or (H, W, C)

    Raises:
        ImageDecodeFailedError: If the bytes cannot be decoded
    """
    if not data:
        raise ImageDecodeFailedError("empty image buffer")

    buf = np.frombuffer(data, np.uint8)
    try:
        image = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise ImageDecodeFailedError(f"cv2.imdecode failed: {e}")

    if image is None:
        raise ImageDecodeFailedError("cv2.imdecode returned None")
    if image.size == 0:
        raise ImageDecodeFailedError(f"decoded image is empty: {image.shape}")

    return image


def encode_image(
    image: np.ndarray,
    target_format: OutputFormat,
    quality: int,
    png_compression: int = DEFAULT_PNG_COMPRESSION,
) -> bytes:
    """
    Encode a pixel array into the target container format.

    Args:
        image: Decoded image array
        target_format: Output container
        quality: Lossy quality for webp/jpeg (ignored for png)
        png_compression: PNG compression effort 0-9

    Returns:
        Encoded bytes

    Raises:
        ImageEncodeFailedError: If the encoder fails
    """
    if target_format is OutputFormat.PNG:
        params = [cv2.IMWRITE_PNG_COMPRESSION, int(png_compression)]
    elif target_format is OutputFormat.WEBP:
        params = [cv2.IMWRITE_WEBP_QUALITY, int(quality)]
    else:
        params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]

    try:
        prepared = _prepare_for(image, target_format)
        ok, buf = cv2.imencode(target_format.extension, prepared, params)
    except cv2.error as e:
        raise ImageEncodeFailedError(
            f"{target_format.value} encoder failed for {image.dtype} {image.shape}: {e}"
        )

    if not ok:
        raise ImageEncodeFailedError(
            f"{target_format.value} encoder returned no data for {image.dtype} {image.shape}"
        )

    return buf.tobytes()


def transcode(
    data: bytes,
    target_format: OutputFormat,
    quality: int,
    png_compression: int = DEFAULT_PNG_COMPRESSION,
) -> EncodedFrame:
    """
    Decode ``data`` and re-encode it as ``target_format``.

    Raises:
        ImageDecodeFailedError: If ``data`` is not a valid image
        ImageEncodeFailedError: If encoding fails
    """
    image = decode_image(data)
    encoded = encode_image(image, target_format, quality, png_compression)
    return EncodedFrame(data=encoded, format=target_format)


async def transcode_async(
    data: bytes,
    target_format: OutputFormat,
    quality: int,
    png_compression: int = DEFAULT_PNG_COMPRESSION,
) -> EncodedFrame:
    """Run ``transcode`` in a worker thread."""
    return await asyncio.to_thread(
        transcode,
        data,
        target_format,
        quality,
        png_compression,
    )


@lru_cache(maxsize=None)
def placeholder_image(target_format: OutputFormat) -> bytes:
    """
    Minimal valid image served before the first frame arrives.

    A single black pixel in the requested format.
    """
    pixel = np.zeros((1, 1, 3), dtype=np.uint8)
    return encode_image(pixel, target_format, quality=90)


def _prepare_for(image: np.ndarray, target_format: OutputFormat) -> np.ndarray:
    """Adapt pixel layout to what the target encoder accepts."""
    if target_format.is_lossy and image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)

    # JPEG has no alpha channel
    if target_format is OutputFormat.JPEG and image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    return image
