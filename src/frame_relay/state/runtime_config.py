"""
Runtime Configuration
=====================

Mutable output configuration read by every ingest and serve.

Seeded from ``settings.relay`` at startup; afterwards only changed by
``POST /config``. Updates follow a permissive-merge policy: each field is
validated on its own, invalid fields are ignored, valid fields still apply.
Last writer wins.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Mapping

from frame_relay.models.frame import OutputFormat


logger = logging.getLogger(__name__)


MIN_QUALITY = 10
MAX_QUALITY = 100


@dataclass(frozen=True, slots=True)
class RuntimeConfigSnapshot:
    """Consistent copy of the runtime configuration."""

    output_format: OutputFormat
    quality: int
    max_payload_bytes: int

    def to_dict(self) -> dict:
        """Wire form, as echoed by the config endpoints."""
        return {
            "outputFormat": self.output_format.value,
            "quality": self.quality,
            "maxPayloadBytes": self.max_payload_bytes,
        }


class RuntimeConfig:
    """
    Thread-safe output configuration.

    Attributes:
        output_format: Format frames are transcoded into on ingest
        quality: Lossy quality for webp/jpeg, in [10, 100]
        max_payload_bytes: Ingest payload ceiling
    """

    def __init__(
        self,
        output_format: OutputFormat = OutputFormat.PNG,
        quality: int = 90,
        max_payload_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        self._lock = threading.Lock()
        self._output_format = OutputFormat.parse(output_format)
        self._quality = quality
        self._max_payload_bytes = max_payload_bytes

    @property
    def output_format(self) -> OutputFormat:
        with self._lock:
            return self._output_format

    @property
    def quality(self) -> int:
        with self._lock:
            return self._quality

    @property
    def max_payload_bytes(self) -> int:
        with self._lock:
            return self._max_payload_bytes

    def snapshot(self) -> RuntimeConfigSnapshot:
        with self._lock:
            return RuntimeConfigSnapshot(
                output_format=self._output_format,
                quality=self._quality,
                max_payload_bytes=self._max_payload_bytes,
            )

    def merge(self, update: Mapping[str, Any]) -> List[str]:
        """
        Apply the valid fields of ``update``.

        Recognized keys are ``outputFormat``, ``quality`` and
        ``maxPayloadBytes``. Missing or null keys are left alone; unknown
        keys are ignored.

        Returns:
            Names of recognized fields that were rejected.
        """
        rejected: List[str] = []

        value = update.get("outputFormat")
        if value is not None:
            try:
                fmt = OutputFormat.parse(value)
            except ValueError:
                rejected.append("outputFormat")
            else:
                with self._lock:
                    self._output_format = fmt
                logger.info(f"Output format set to {fmt.value}")

        value = update.get("quality")
        if value is not None:
            quality = _as_int(value)
            if quality is None or not MIN_QUALITY <= quality <= MAX_QUALITY:
                rejected.append("quality")
            else:
                with self._lock:
                    self._quality = quality
                logger.info(f"Quality set to {quality}")

        value = update.get("maxPayloadBytes")
        if value is not None:
            limit = _as_int(value)
            if limit is None or limit < 1:
                rejected.append("maxPayloadBytes")
            else:
                with self._lock:
                    self._max_payload_bytes = limit
                logger.info(f"Max payload set to {limit} bytes")

        if rejected:
            logger.warning(f"Ignored invalid config fields: {', '.join(rejected)}")

        return rejected


def _as_int(value: Any):
    """Integral number as int, else None. Booleans are not numbers here."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None
