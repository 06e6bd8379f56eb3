"""
Ingest Module
=============

Producer-side pipeline of the relay:
    - classify: Tags a raw message as data URI, raw binary or unrecognized
    - normalize: Extracts encoded image bytes, enforcing the payload ceiling
    - transcode: Decodes and re-encodes into png / webp / jpeg (OpenCV)
    - IngestionSession: Drives the pipeline for one producer connection

Example:
    from frame_relay.ingest import classify, normalize, transcode
    from frame_relay.models import OutputFormat

    payload = classify(message)
    image_bytes = normalize(payload, max_bytes=50 * 1024 * 1024)
    frame = transcode(image_bytes, OutputFormat.WEBP, quality=80)
"""

from frame_relay.ingest.classifier import classify
from frame_relay.ingest.normalizer import (
    FrameDecodeError,
    MalformedPayloadError,
    PayloadTooLargeError,
    UnknownFormatError,
    normalize,
)
from frame_relay.ingest.transcoder import (
    ImageDecodeFailedError,
    ImageEncodeFailedError,
    TranscodeError,
    decode_image,
    encode_image,
    placeholder_image,
    transcode,
    transcode_async,
)
from frame_relay.ingest.session import IngestionSession


__all__ = [
    "classify",
    "normalize",
    "FrameDecodeError",
    "PayloadTooLargeError",
    "MalformedPayloadError",
    "UnknownFormatError",
    "decode_image",
    "encode_image",
    "transcode",
    "transcode_async",
    "placeholder_image",
    "TranscodeError",
    "ImageDecodeFailedError",
    "ImageEncodeFailedError",
    "IngestionSession",
]
