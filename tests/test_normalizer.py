"""
Frame Normalizer Tests
======================
"""

import base64

import pytest

from frame_relay.ingest.classifier import classify
from frame_relay.ingest.normalizer import (
    FrameDecodeError,
    MalformedPayloadError,
    PayloadTooLargeError,
    UnknownFormatError,
    normalize,
)
from frame_relay.models.payload import DataURIPayload, RawBinaryPayload, UnrecognizedPayload


class TestNormalize:
    """Extraction of image bytes from classified payloads."""

    def test_data_uri_is_base64_decoded(self, red_png, red_data_uri):
        assert normalize(classify(red_data_uri), max_bytes=10_000) == red_png

    def test_line_wrapped_base64_is_accepted(self, red_png):
        wrapped = base64.encodebytes(red_png).decode("ascii")
        assert "\n" in wrapped
        payload = classify("data:image/png;base64," + wrapped)
        assert normalize(payload, max_bytes=10_000) == red_png

    def test_unpadded_base64_is_accepted(self):
        assert normalize(DataURIPayload(text="data:image/png;base64,YWI"), max_bytes=10_000) == b"ab"

    def test_unpadded_image_body_is_accepted(self, red_png):
        body = base64.b64encode(red_png).decode("ascii").rstrip("=")
        payload = classify("data:image/png;base64," + body)
        assert normalize(payload, max_bytes=10_000) == red_png

    def test_raw_binary_passes_through_unchanged(self):
        data = b"\x89PNG\r\n\x1a\n...anything"
        assert normalize(classify(data), max_bytes=10_000) == data

    def test_unrecognized_raises_unknown_format(self):
        with pytest.raises(UnknownFormatError):
            normalize(UnrecognizedPayload(), max_bytes=10_000)

    def test_missing_comma_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            normalize(DataURIPayload(text="data:image/png;base64"), max_bytes=10_000)

    def test_invalid_base64_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            normalize(DataURIPayload(text="data:image/png;base64,@@@not-base64@@@"), max_bytes=10_000)

    def test_empty_body_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            normalize(DataURIPayload(text="data:image/png;base64,"), max_bytes=10_000)

    def test_errors_share_a_base_class(self):
        for error in (PayloadTooLargeError(2, 1), MalformedPayloadError("x"), UnknownFormatError("x")):
            assert isinstance(error, FrameDecodeError)


class TestPayloadCeiling:
    """The ceiling is inclusive and applies to both payload kinds."""

    def test_data_uri_exactly_at_limit_is_accepted(self, red_png, red_data_uri):
        assert normalize(classify(red_data_uri), max_bytes=len(red_data_uri)) == red_png

    def test_data_uri_one_over_limit_is_rejected(self, red_data_uri):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            normalize(classify(red_data_uri), max_bytes=len(red_data_uri) - 1)
        assert exc_info.value.size == len(red_data_uri)
        assert exc_info.value.limit == len(red_data_uri) - 1

    def test_raw_binary_over_limit_is_rejected(self):
        with pytest.raises(PayloadTooLargeError):
            normalize(RawBinaryPayload(data=b"x" * 11), max_bytes=10)

    def test_raw_binary_at_limit_is_accepted(self):
        assert normalize(RawBinaryPayload(data=b"x" * 10), max_bytes=10) == b"x" * 10
