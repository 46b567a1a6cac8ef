"""Configuration models describing imgstream settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ImgStreamBaseModel(BaseModel):
    """Shared configuration for imgstream Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class DetectionSettings(ImgStreamBaseModel):
    """Settings for archive type detection.

    Attributes:
        sniff_bytes: Number of header bytes read when sniffing magic numbers.
        fallback_mime_type: MIME type reported when nothing matches.
    """

    sniff_bytes: int = Field(default=262, gt=0)
    fallback_mime_type: str = "application/octet-stream"


class LoggingSettings(ImgStreamBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level for the ``imgstream`` logger.
    """

    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "WARNING"


class CLIOptions(ImgStreamBaseModel):
    """CLI presentation defaults.

    Attributes:
        json_default: Whether commands emit JSON unless told otherwise.
    """

    json_default: bool = False


class ImgStreamConfig(ImgStreamBaseModel):
    """Top-level configuration for imgstream."""

    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ImgStreamBaseModel",
    "DetectionSettings",
    "LoggingSettings",
    "CLIOptions",
    "ImgStreamConfig",
]
