"""
Configuration Tests
===================

YAML loading and environment overrides.
"""

import pytest
from pydantic import ValidationError

from frame_relay.config import Settings, load_config


ENV_VARS = [
    "PORT",
    "FRAME_RELAY_PORT",
    "FRAME_RELAY_HOST",
    "FRAME_RELAY_OUTPUT_FORMAT",
    "FRAME_RELAY_QUALITY",
    "FRAME_RELAY_MAX_PAYLOAD_BYTES",
    "FRAME_RELAY_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 9000\n"
        "relay:\n"
        "  output_format: webp\n"
        "  quality: 75\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  format: text\n"
    )
    return path


class TestDefaults:

    def test_defaults(self):
        settings = Settings()
        assert settings.server.port == 8080
        assert settings.relay.output_format == "png"
        assert settings.relay.quality == 90
        assert settings.relay.max_payload_bytes == 50 * 1024 * 1024
        assert settings.relay.png_compression == 6
        assert settings.observability.stats_interval_seconds == 5.0

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "nope.yaml"))
        assert settings.server.port == 8080


class TestYamlLoading:

    def test_values_from_file(self, config_file):
        settings = load_config(str(config_file))
        assert settings.server.port == 9000
        assert settings.relay.output_format == "webp"
        assert settings.relay.quality == 75
        assert settings.logging.level == "DEBUG"

    def test_invalid_quality_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("relay:\n  quality: 5\n")
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestEnvOverrides:

    def test_env_beats_file(self, config_file, monkeypatch):
        monkeypatch.setenv("FRAME_RELAY_OUTPUT_FORMAT", "JPEG")
        monkeypatch.setenv("FRAME_RELAY_QUALITY", "60")
        monkeypatch.setenv("FRAME_RELAY_LOG_LEVEL", "WARNING")

        settings = load_config(str(config_file))
        assert settings.relay.output_format == "jpeg"
        assert settings.relay.quality == 60
        assert settings.logging.level == "WARNING"

    def test_port_wins_over_frame_relay_port(self, config_file, monkeypatch):
        monkeypatch.setenv("PORT", "7000")
        monkeypatch.setenv("FRAME_RELAY_PORT", "7001")
        assert load_config(str(config_file)).server.port == 7000

    def test_frame_relay_port(self, config_file, monkeypatch):
        monkeypatch.setenv("FRAME_RELAY_PORT", "7001")
        assert load_config(str(config_file)).server.port == 7001

    def test_max_payload_and_host(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FRAME_RELAY_MAX_PAYLOAD_BYTES", "1024")
        monkeypatch.setenv("FRAME_RELAY_HOST", "127.0.0.1")
        settings = load_config(str(tmp_path / "missing.yaml"))
        assert settings.relay.max_payload_bytes == 1024
        assert settings.server.host == "127.0.0.1"
