"""
Data Models
===========

Models for the frame relay.

Models:
    Frames:
        - OutputFormat: png / webp / jpeg
        - EncodedFrame: Immutable encoded frame held by the store

    Payloads:
        - PayloadKind: Classification tag
        - DataURIPayload, RawBinaryPayload, UnrecognizedPayload
        - ClassifiedPayload: Union of the three

    Errors:
        - ErrorKind: Error taxonomy used by statistics

    HTTP:
        - ConfigSnapshot, ConfigResponse
        - StatsResponse, CurrentFrameInfo, HealthResponse
"""

from frame_relay.models.frame import EncodedFrame, OutputFormat
from frame_relay.models.payload import (
    ClassifiedPayload,
    DataURIPayload,
    PayloadKind,
    RawBinaryPayload,
    UnrecognizedPayload,
)
from frame_relay.models.errors import ErrorKind
from frame_relay.models.api import (
    ConfigResponse,
    ConfigSnapshot,
    CurrentFrameInfo,
    HealthResponse,
    StatsResponse,
)

__all__ = [
    # Frames
    "OutputFormat",
    "EncodedFrame",
    # Payloads
    "PayloadKind",
    "DataURIPayload",
    "RawBinaryPayload",
    "UnrecognizedPayload",
    "ClassifiedPayload",
    # Errors
    "ErrorKind",
    # HTTP
    "ConfigSnapshot",
    "ConfigResponse",
    "CurrentFrameInfo",
    "StatsResponse",
    "HealthResponse",
]
