"""
Transcoder Tests
================
"""

import asyncio

import cv2
import numpy as np
import pytest

from conftest import make_image, make_png
from frame_relay.ingest.transcoder import (
    ImageDecodeFailedError,
    ImageEncodeFailedError,
    decode_image,
    encode_image,
    placeholder_image,
    transcode,
    transcode_async,
)
from frame_relay.models.frame import EncodedFrame, OutputFormat


PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


def is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


class TestDecode:
    """Decoding image container bytes."""

    def test_decode_png(self, red_png):
        image = decode_image(red_png)
        assert image.shape == (10, 10, 3)
        assert tuple(image[0, 0]) == (0, 0, 255)

    def test_decode_garbage_fails(self):
        with pytest.raises(ImageDecodeFailedError):
            decode_image(b"definitely not an image")

    def test_decode_empty_fails(self):
        with pytest.raises(ImageDecodeFailedError):
            decode_image(b"")

    def test_alpha_channel_is_kept(self):
        rgba = np.zeros((4, 6, 4), dtype=np.uint8)
        rgba[:, :, 3] = 128
        ok, buf = cv2.imencode(".png", rgba)
        assert ok
        assert decode_image(buf.tobytes()).shape == (4, 6, 4)


class TestEncode:
    """Encoding into each output format."""

    @pytest.mark.parametrize(
        "fmt,check",
        [
            (OutputFormat.PNG, lambda d: d.startswith(PNG_MAGIC)),
            (OutputFormat.WEBP, is_webp),
            (OutputFormat.JPEG, lambda d: d.startswith(JPEG_MAGIC)),
        ],
    )
    def test_container_signature(self, fmt, check):
        assert check(encode_image(make_image(), fmt, quality=80))

    def test_png_round_trip_is_pixel_exact(self):
        rng = np.random.default_rng(7)
        image = rng.integers(0, 256, size=(17, 23, 3), dtype=np.uint8)
        decoded = decode_image(encode_image(image, OutputFormat.PNG, quality=10))
        assert np.array_equal(decoded, image)

    @pytest.mark.parametrize("fmt", [OutputFormat.WEBP, OutputFormat.JPEG])
    def test_lossy_round_trip_keeps_dimensions(self, fmt):
        rng = np.random.default_rng(11)
        image = rng.integers(0, 256, size=(31, 47, 3), dtype=np.uint8)
        decoded = decode_image(encode_image(image, fmt, quality=50))
        assert decoded.shape[:2] == (31, 47)

    def test_png_ignores_quality(self):
        image = make_image(32, 32)
        assert encode_image(image, OutputFormat.PNG, quality=10) == encode_image(
            image, OutputFormat.PNG, quality=100
        )

    def test_jpeg_quality_changes_output_size(self):
        rng = np.random.default_rng(3)
        image = rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
        low = encode_image(image, OutputFormat.JPEG, quality=10)
        high = encode_image(image, OutputFormat.JPEG, quality=100)
        assert len(low) < len(high)

    def test_jpeg_drops_alpha(self):
        rgba = np.full((8, 8, 4), 200, dtype=np.uint8)
        decoded = decode_image(encode_image(rgba, OutputFormat.JPEG, quality=90))
        assert decoded.shape == (8, 8, 3)

    def test_sixteen_bit_image_encodes_to_lossy(self):
        deep = np.full((8, 8, 3), 40000, dtype=np.uint16)
        decoded = decode_image(encode_image(deep, OutputFormat.WEBP, quality=90))
        assert decoded.dtype == np.uint8
        assert decoded.shape[:2] == (8, 8)

    def test_unsupported_layout_fails_to_encode(self):
        weird = np.zeros((4, 4, 7), dtype=np.uint8)
        with pytest.raises(ImageEncodeFailedError):
            encode_image(weird, OutputFormat.JPEG, quality=90)


class TestTranscode:
    """Decode-then-encode in one call."""

    def test_returns_encoded_frame_in_target_format(self, red_png):
        frame = transcode(red_png, OutputFormat.WEBP, quality=80)
        assert isinstance(frame, EncodedFrame)
        assert frame.format is OutputFormat.WEBP
        assert frame.size == len(frame.data)
        assert decode_image(frame.data).shape[:2] == (10, 10)

    def test_invalid_input_raises_decode_failed(self):
        with pytest.raises(ImageDecodeFailedError):
            transcode(b"\x00" * 64, OutputFormat.PNG, quality=90)

    def test_async_variant_matches(self, red_png):
        frame = asyncio.run(transcode_async(red_png, OutputFormat.PNG, quality=90))
        assert frame.data == transcode(red_png, OutputFormat.PNG, quality=90).data

    def test_concurrent_transcodes(self):
        inputs = [make_png(5 + i, 7 + i) for i in range(8)]

        async def run_all():
            return await asyncio.gather(
                *(transcode_async(data, OutputFormat.JPEG, quality=70) for data in inputs)
            )

        frames = asyncio.run(run_all())
        shapes = [decode_image(f.data).shape[:2] for f in frames]
        assert shapes == [(7 + i, 5 + i) for i in range(8)]


class TestPlaceholder:
    """The empty-store placeholder is a real image."""

    @pytest.mark.parametrize("fmt", list(OutputFormat))
    def test_placeholder_decodes_as_one_pixel(self, fmt):
        image = decode_image(placeholder_image(fmt))
        assert image.shape[:2] == (1, 1)

    def test_placeholder_png_signature(self):
        assert placeholder_image(OutputFormat.PNG).startswith(PNG_MAGIC)
