"""
Test Configuration
==================

Pytest fixtures and helpers for the frame relay tests.
"""

import base64
import time

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from frame_relay.config import ObservabilityConfig, RelayConfig, Settings
from frame_relay.main import create_app
from frame_relay.state import ServerState


def make_image(width: int = 10, height: int = 10, bgr=(0, 0, 255)) -> np.ndarray:
    """Solid-colour BGR image (default: red)."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = bgr
    return image


def make_png(width: int = 10, height: int = 10, bgr=(0, 0, 255)) -> bytes:
    ok, buf = cv2.imencode(".png", make_image(width, height, bgr))
    assert ok
    return buf.tobytes()


def to_data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02):
    """Poll ``predicate`` until it returns a truthy value or time runs out."""
    deadline = time.monotonic() + timeout
    while True:
        result = predicate()
        if result or time.monotonic() >= deadline:
            return result
        time.sleep(interval)


@pytest.fixture
def red_png() -> bytes:
    """10x10 red PNG."""
    return make_png()


@pytest.fixture
def red_data_uri(red_png) -> str:
    """10x10 red PNG wrapped in a data URI."""
    return to_data_uri(red_png)


@pytest.fixture
def relay_settings() -> Settings:
    """Default settings with a long stats interval so the reporter stays quiet."""
    return Settings(
        relay=RelayConfig(frame_push_interval_seconds=0.05),
        observability=ObservabilityConfig(stats_interval_seconds=60.0),
    )


@pytest.fixture
def server_state() -> ServerState:
    """Fresh server state with default relay settings."""
    return ServerState(RelayConfig())


@pytest.fixture
def app(relay_settings):
    return create_app(relay_settings)


@pytest.fixture
def client(app):
    """Test client with the app lifespan running."""
    with TestClient(app) as c:
        yield c
