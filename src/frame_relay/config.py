"""
Frame Relay Configuration
=========================

This module handles configuration loading for the frame relay.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    PORT                           -> server.port
    FRAME_RELAY_PORT               -> server.port (when PORT is unset)
    FRAME_RELAY_HOST               -> server.host
    FRAME_RELAY_OUTPUT_FORMAT      -> relay.output_format
    FRAME_RELAY_QUALITY            -> relay.quality
    FRAME_RELAY_MAX_PAYLOAD_BYTES  -> relay.max_payload_bytes
    FRAME_RELAY_LOG_LEVEL          -> logging.level

The relay section only seeds the runtime configuration at startup. After
that, output format, quality and payload ceiling are changed through
``POST /config`` (see ``frame_relay.state.runtime_config``).

Example:
    from frame_relay.config import settings

    print(settings.server.port)
    print(settings.relay.output_format)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification."""

    name: str = Field(default="frame-relay", description="Service name")
    version: str = Field(default="0.1.0", description="Service version")


class ServerConfig(BaseModel):
    """HTTP/WebSocket listener configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class RelayConfig(BaseModel):
    """Defaults for the ingestion and transcoding pipeline."""

    output_format: Literal["png", "webp", "jpeg"] = Field(
        default="png",
        description="Format frames are transcoded into on ingest",
    )
    quality: int = Field(
        default=90,
        ge=10,
        le=100,
        description="Lossy quality for webp/jpeg",
    )
    max_payload_bytes: int = Field(
        default=50 * 1024 * 1024,
        ge=1,
        description="Largest accepted producer payload",
    )
    png_compression: int = Field(
        default=6,
        ge=0,
        le=9,
        description="Fixed PNG compression effort",
    )
    frame_push_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        description="How often push subscribers are checked for a new frame",
    )
    shutdown_drain_seconds: float = Field(
        default=2.0,
        ge=0,
        description="How long shutdown waits for in-flight transcodes",
    )


class ObservabilityConfig(BaseModel):
    """Periodic statistics logging."""

    stats_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Interval between stats log lines",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the frame relay.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server settings (PORT wins, as on most PaaS runtimes)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("FRAME_RELAY_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    if env_host := os.environ.get("FRAME_RELAY_HOST"):
        config_data.setdefault("server", {})["host"] = env_host

    # Relay defaults
    if env_format := os.environ.get("FRAME_RELAY_OUTPUT_FORMAT"):
        config_data.setdefault("relay", {})["output_format"] = env_format.lower()
    if env_quality := os.environ.get("FRAME_RELAY_QUALITY"):
        config_data.setdefault("relay", {})["quality"] = int(env_quality)
    if env_max := os.environ.get("FRAME_RELAY_MAX_PAYLOAD_BYTES"):
        config_data.setdefault("relay", {})["max_payload_bytes"] = int(env_max)

    # Logging settings
    if env_log := os.environ.get("FRAME_RELAY_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
