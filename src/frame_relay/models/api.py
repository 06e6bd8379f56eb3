"""
HTTP Payload Models
===================

Pydantic models for the JSON bodies returned by the serving layer.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), matching what dashboard clients read.

Stats Contract:
    {
        "clients": 1,
        "frames": 1200,
        "bytes": 52428800,
        "dataMB": 50.0,
        "type": "data:image/* → WEBP ✓ (412.3 KB → 38.1 KB)",
        "uptime": 3600,
        "errors": 2,
        "errorsByKind": {"decode_failed": 2},
        "subscribers": 0,
        "currentFrame": {"format": "webp", "size": 39014, "createdAt": 1770500938.284}
    }
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigSnapshot(BaseModel):
    """Effective runtime configuration."""

    model_config = ConfigDict(populate_by_name=True)

    output_format: str = Field(..., alias="outputFormat")
    quality: int = Field(..., ge=10, le=100)
    max_payload_bytes: int = Field(..., ge=1, alias="maxPayloadBytes")


class ConfigResponse(BaseModel):
    """Response to ``POST /config``; echoes the effective config."""

    success: bool = True
    config: ConfigSnapshot


class CurrentFrameInfo(BaseModel):
    """Metadata about the frame currently held by the store."""

    model_config = ConfigDict(populate_by_name=True)

    format: str
    size: int = Field(..., ge=0)
    created_at: float = Field(..., alias="createdAt")


class StatsResponse(BaseModel):
    """Snapshot of process-wide statistics plus derived fields."""

    model_config = ConfigDict(populate_by_name=True)

    clients: int = Field(..., ge=0, description="Connected producers")
    frames: int = Field(..., ge=0, description="Frames received since last clear")
    bytes: int = Field(..., ge=0, description="Payload bytes accepted since last clear")
    data_mb: float = Field(..., ge=0, alias="dataMB")
    type: str = Field(..., description="Outcome of the most recent ingest")
    uptime: int = Field(..., ge=0, description="Seconds since process start")
    errors: int = Field(..., ge=0)
    errors_by_kind: Dict[str, int] = Field(default_factory=dict, alias="errorsByKind")
    subscribers: int = Field(default=0, ge=0, description="Connected push subscribers")
    current_frame: Optional[CurrentFrameInfo] = Field(default=None, alias="currentFrame")


class HealthResponse(BaseModel):
    """Liveness payload."""

    status: str = "healthy"
    uptime: int = Field(..., ge=0)
    clients: int = Field(..., ge=0)
    frames: int = Field(..., ge=0)
