"""
Frame Store
===========

Single-slot holder for the most recent successfully transcoded frame.

Design Rules:
    - Holds at most one EncodedFrame; the previous one is dropped, never queued
    - put/clear swap the reference under a lock, so readers see either no
      frame or a complete frame
    - The lock is never held across codec work
    - A version counter lets push subscribers detect a new frame cheaply
"""

import logging
import threading
from typing import Optional, Tuple

from frame_relay.models.frame import EncodedFrame


logger = logging.getLogger(__name__)


class FrameStore:
    """
    Concurrency-safe single-slot frame cache.

    Example:
        store = FrameStore()
        store.put(frame)
        current = store.get()
        store.clear()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Optional[EncodedFrame] = None
        self._version: int = 0

    @property
    def version(self) -> int:
        """Incremented on every put and clear."""
        with self._lock:
            return self._version

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return self._frame is None

    def put(self, frame: EncodedFrame) -> int:
        """
        Replace the held frame.

        Returns:
            The store version after the swap.
        """
        with self._lock:
            self._frame = frame
            self._version += 1
            return self._version

    def get(self) -> Optional[EncodedFrame]:
        """Return the held frame, or None before the first frame / after clear."""
        with self._lock:
            return self._frame

    def get_versioned(self) -> Tuple[Optional[EncodedFrame], int]:
        """Return the held frame together with the store version."""
        with self._lock:
            return self._frame, self._version

    def clear(self) -> None:
        """Empty the slot."""
        with self._lock:
            self._frame = None
            self._version += 1
