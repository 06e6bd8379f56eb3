"""
Error Kinds
===========

Fixed set of machine-readable error kinds for the relay.

Every swallowed error in the ingestion and serving paths is recorded
under exactly one of these kinds, so nothing fails silently: the
per-kind counters are exposed by ``GET /stats``.

Rules:
    - None of these terminate the process
    - Only TRANSPORT_ERROR ends a producer session
    - CONFIG_VALIDATION_REJECTED is never returned to the caller
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Error taxonomy.

    Attributes:
        CLASSIFICATION_AMBIGUOUS: Message was not a recognizable image payload
        PAYLOAD_TOO_LARGE: Message exceeded the payload ceiling
        DECODE_FAILED: Data URI malformed, or bytes not a valid image
        ENCODE_FAILED: Encoder rejected the decoded image
        TRANSPORT_ERROR: Producer connection failed
        CONFIG_VALIDATION_REJECTED: A config field was ignored
        PROCESSING_ERROR: Unexpected exception while processing a frame
        SERVE_TRANSCODE_FAILED: On-demand transcode for a reader failed
    """

    CLASSIFICATION_AMBIGUOUS = "classification_ambiguous"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    DECODE_FAILED = "decode_failed"
    ENCODE_FAILED = "encode_failed"
    TRANSPORT_ERROR = "transport_error"
    CONFIG_VALIDATION_REJECTED = "config_validation_rejected"
    PROCESSING_ERROR = "processing_error"
    SERVE_TRANSCODE_FAILED = "serve_transcode_failed"
