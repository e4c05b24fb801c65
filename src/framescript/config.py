"""
framescript Configuration
=========================

This module handles configuration loading for framescript.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FRAMESCRIPT_MAX_DURATION    -> sampling.max_duration_seconds
    FRAMESCRIPT_SAMPLE_WIDTH    -> sampling.target_width
    FRAMESCRIPT_SAMPLE_QUALITY  -> sampling.jpeg_quality
    FRAMESCRIPT_MAX_COLORS      -> palette.max_colors
    FRAMESCRIPT_CANVAS_WIDTH    -> composite.canvas_width
    FRAMESCRIPT_MAX_SESSIONS    -> sessions.max_sessions
    FRAMESCRIPT_PORT            -> server.port
    FRAMESCRIPT_LOG_LEVEL       -> logging.level
    PORT                        -> server.port (Cloud Run)

Example:
    from framescript.config import settings

    print(settings.sampling.max_duration_seconds)
    print(settings.composite.canvas_width)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="framescript", description="Service name")
    version: str = Field(default="v0.1.0", description="API version")


class SamplingConfig(BaseModel):
    """Frame sampling configuration."""

    max_duration_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Hard ceiling on video duration",
    )
    target_width: int = Field(
        default=256,
        ge=16,
        description="Width of sampled frames in pixels",
    )
    jpeg_quality: int = Field(
        default=40,
        ge=1,
        le=100,
        description="JPEG quality of sampled frames",
    )
    dense_max_duration: float = Field(
        default=30.0,
        gt=0,
        description="Clips up to this duration use dense_interval",
    )
    dense_interval: float = Field(default=0.1, gt=0, description="Dense tier interval (s)")
    medium_max_duration: float = Field(
        default=60.0,
        gt=0,
        description="Clips up to this duration use medium_interval",
    )
    medium_interval: float = Field(default=0.2, gt=0, description="Medium tier interval (s)")
    sparse_interval: float = Field(default=0.4, gt=0, description="Interval beyond the medium tier (s)")

    @model_validator(mode="after")
    def _check_tiers(self) -> "SamplingConfig":
        if self.medium_max_duration < self.dense_max_duration:
            raise ValueError("medium_max_duration must be >= dense_max_duration")
        return self


class PaletteConfig(BaseModel):
    """Color summarizer configuration."""

    max_colors: int = Field(default=7, ge=1, description="Colours returned by default")
    max_sampled_frames: int = Field(default=10, ge=1, description="Frames analysed at most")
    raster_size: int = Field(default=50, ge=1, description="Side of the analysis raster")
    quantization_step: int = Field(default=32, ge=1, le=128, description="Channel quantization step")
    min_distance: float = Field(default=60.0, ge=0, description="Minimum RGB distance between colours")
    max_workers: int = Field(default=4, ge=1, description="Threads for per-frame work")


class CompositeConfig(BaseModel):
    """Tile compositor configuration."""

    canvas_width: float = Field(default=3000.0, gt=0, description="Composite width in pixels")
    gap: float = Field(default=10.0, ge=0, description="Spacing between cells")
    default_columns: int = Field(default=4, ge=1, le=16, description="Default grid columns")
    background_color: str = Field(default="#111827", description="Canvas background")
    label_font_scale: float = Field(default=0.45, gt=0, description="OpenCV font scale of labels")
    label_opacity: float = Field(default=1.0, gt=0, le=1.0, description="Label box opacity")
    jpeg_quality: int = Field(default=90, ge=1, le=100, description="Export JPEG quality")
    max_workers: int = Field(default=4, ge=1, description="Threads for frame loads")


class CaptureConfig(BaseModel):
    """High-resolution single-frame capture configuration."""

    jpeg_quality: int = Field(default=95, ge=1, le=100, description="Capture JPEG quality")
    shot_offset_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Offset after a shot's start time when capturing its frame",
    )
    poster_jpeg_quality: int = Field(default=90, ge=1, le=100, description="9:16 crop JPEG quality")


class PayloadConfig(BaseModel):
    """Analysis payload configuration."""

    max_frames: int = Field(default=300, ge=1, description="Frames per analysis request")


class SessionConfig(BaseModel):
    """Analysis session store configuration."""

    max_sessions: int = Field(
        default=8,
        ge=1,
        description="Sessions kept in memory; the oldest is discarded beyond this",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for framescript.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    palette: PaletteConfig = Field(default_factory=PaletteConfig)
    composite: CompositeConfig = Field(default_factory=CompositeConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    payload: PayloadConfig = Field(default_factory=PayloadConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
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
        config_path = os.environ.get("FRAMESCRIPT_CONFIG")

    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
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

    # Sampling settings
    if env_max := os.environ.get("FRAMESCRIPT_MAX_DURATION"):
        config_data.setdefault("sampling", {})["max_duration_seconds"] = float(env_max)
    if env_width := os.environ.get("FRAMESCRIPT_SAMPLE_WIDTH"):
        config_data.setdefault("sampling", {})["target_width"] = int(env_width)
    if env_quality := os.environ.get("FRAMESCRIPT_SAMPLE_QUALITY"):
        config_data.setdefault("sampling", {})["jpeg_quality"] = int(env_quality)

    # Palette settings
    if env_colors := os.environ.get("FRAMESCRIPT_MAX_COLORS"):
        config_data.setdefault("palette", {})["max_colors"] = int(env_colors)

    # Composite settings
    if env_canvas := os.environ.get("FRAMESCRIPT_CANVAS_WIDTH"):
        config_data.setdefault("composite", {})["canvas_width"] = float(env_canvas)

    # Session settings
    if env_sessions := os.environ.get("FRAMESCRIPT_MAX_SESSIONS"):
        config_data.setdefault("sessions", {})["max_sessions"] = int(env_sessions)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("FRAMESCRIPT_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("FRAMESCRIPT_LOG_LEVEL"):
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
