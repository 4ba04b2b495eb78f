"""Configuration loader with Pydantic validation for the docscan engine.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values. Every tunable of the
detection, rectification, editing, tracking and extraction stages lives
here; the center-weighting constants in particular are empirical and are
meant to be tuned, not relied upon.
"""

import logging
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class EdgeMapConfig(BaseModel):
    """Edge map builder parameters for one detection path.

    Attributes:
        target_max_dimension: Longer side of the working copy in pixels
        blur_kernel_size: Gaussian kernel size (odd)
        canny_low: Lower hysteresis threshold for Canny
        canny_high: Upper hysteresis threshold for Canny
    """

    target_max_dimension: int = Field(default=1000, gt=0)
    blur_kernel_size: int = Field(default=5, ge=1)
    canny_low: float = Field(default=40.0, ge=0.0)
    canny_high: float = Field(default=120.0, gt=0.0)

    @field_validator("blur_kernel_size")
    @classmethod
    def _odd_kernel(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"blur_kernel_size must be odd, got {v}")
        return v

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "EdgeMapConfig":
        if self.canny_low >= self.canny_high:
            raise ValueError(
                f"canny_low ({self.canny_low}) must be less than canny_high ({self.canny_high})"
            )
        return self


def _live_edge_defaults() -> EdgeMapConfig:
    return EdgeMapConfig(target_max_dimension=320, canny_low=75.0, canny_high=200.0)


class EdgeMapSection(BaseModel):
    """Still-image and live-preview edge map settings."""

    still: EdgeMapConfig = Field(default_factory=EdgeMapConfig)
    live: EdgeMapConfig = Field(default_factory=_live_edge_defaults)


class ContourConfig(BaseModel):
    """Contour extraction parameters.

    Attributes:
        approx_tolerance: Polygon approximation epsilon as a fraction of
            the contour perimeter. Looser values tolerate rounded corners.
    """

    approx_tolerance: float = Field(default=0.03, gt=0.0, le=0.2)


class ScoringConfig(BaseModel):
    """Quadrilateral scorer parameters.

    Attributes:
        min_area_fraction: Minimum candidate area as a fraction of the frame
        centrality_bonus_radius: Normalized center distance below which the
            bonus applies
        centrality_penalty_radius: Normalized center distance above which
            the penalty applies
        centrality_bonus: Score multiplier for central candidates
        centrality_penalty: Score multiplier for off-center candidates
    """

    min_area_fraction: float = Field(default=0.04, ge=0.0, lt=1.0)
    centrality_bonus_radius: float = Field(default=0.2, ge=0.0, le=1.0)
    centrality_penalty_radius: float = Field(default=0.4, ge=0.0, le=1.0)
    centrality_bonus: float = Field(default=3.0, gt=0.0)
    centrality_penalty: float = Field(default=0.1, gt=0.0)

    @model_validator(mode="after")
    def _ordered_radii(self) -> "ScoringConfig":
        if self.centrality_bonus_radius > self.centrality_penalty_radius:
            raise ValueError(
                "centrality_bonus_radius must not exceed centrality_penalty_radius"
            )
        return self


class AspectSnapBand(BaseModel):
    """One row of the aspect-ratio snap table.

    Attributes:
        min_ratio: Inclusive lower bound of width/height
        max_ratio: Inclusive upper bound of width/height
        target_ratio: Canonical width/height the band snaps to
        adjust: Which dimension is recomputed from the other
    """

    min_ratio: float = Field(..., gt=0.0)
    max_ratio: float = Field(..., gt=0.0)
    target_ratio: float = Field(..., gt=0.0)
    adjust: Literal["height", "width"] = "height"

    @model_validator(mode="after")
    def _ordered_bounds(self) -> "AspectSnapBand":
        if self.min_ratio >= self.max_ratio:
            raise ValueError(
                f"min_ratio ({self.min_ratio}) must be less than max_ratio ({self.max_ratio})"
            )
        return self


def _default_bands() -> List[AspectSnapBand]:
    return [
        # Portrait ID / passport
        AspectSnapBand(min_ratio=0.60, max_ratio=0.82, target_ratio=0.704, adjust="height"),
        # Landscape ID card
        AspectSnapBand(min_ratio=1.25, max_ratio=1.65, target_ratio=1.42, adjust="width"),
        # Square
        AspectSnapBand(min_ratio=0.85, max_ratio=1.15, target_ratio=1.0, adjust="height"),
    ]


class RectificationConfig(BaseModel):
    """Perspective rectifier parameters.

    Attributes:
        interpolation: Resampling method for the warp
        border_value: Constant fill for pixels mapping outside the source
        min_quad_area_px: Polygon area (px^2) below which the quad is degenerate
        aspect_snap_bands: Ordered snap table, first match wins
    """

    interpolation: Literal["linear", "cubic", "nearest", "area", "lanczos"] = "linear"
    border_value: int = Field(default=0, ge=0, le=255)
    min_quad_area_px: float = Field(default=1.0, ge=0.0)
    aspect_snap_bands: List[AspectSnapBand] = Field(default_factory=_default_bands)


class EditorConfig(BaseModel):
    """Interactive corner editor parameters.

    Attributes:
        default_inset_pct: Inset of the fallback quad (10 -> 10%-90% box)
        peek_window_fraction: Peek window side as a fraction of the shorter
            image side
        peek_zoom: Magnification applied when rendering a peek
    """

    default_inset_pct: float = Field(default=10.0, ge=0.0, lt=50.0)
    peek_window_fraction: float = Field(default=0.15, gt=0.0, le=1.0)
    peek_zoom: float = Field(default=2.5, gt=0.0)


class TrackingConfig(BaseModel):
    """Live tracking loop parameters."""

    interval_ms: int = Field(default=100, gt=0)


class ExtractionConfig(BaseModel):
    """Field-extraction collaborator parameters.

    Attributes:
        model: Vision-language model name
        api_base: REST API base URL
        api_key_env: Environment variable holding the API key
        timeout_s: Request timeout in seconds (single attempt, no retry)
        jpeg_quality: JPEG quality of the uploaded payload
    """

    model: str = "gemini-2.5-flash"
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    api_key_env: str = "GEMINI_API_KEY"
    timeout_s: float = Field(default=30.0, gt=0.0)
    jpeg_quality: int = Field(default=90, ge=1, le=100)


class ScanConfig(BaseModel):
    """Root configuration container."""

    edge_map: EdgeMapSection = Field(default_factory=EdgeMapSection)
    contours: ContourConfig = Field(default_factory=ContourConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    rectification: RectificationConfig = Field(default_factory=RectificationConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)


def load_config(config_path: Path) -> ScanConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ScanConfig object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/docscan/config.yaml"))
        >>> print(config.scoring.min_area_fraction)
        0.04
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading docscan config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    config = ScanConfig(**config_dict)
    logger.info(f"Loaded docscan configuration from {config_path}")
    return config


def get_default_config() -> ScanConfig:
    """Get default configuration from bundled config.yaml file.

    Returns:
        ScanConfig loaded from src/docscan/config.yaml, or the model
        defaults if the bundled file is missing.
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.warning(
        f"Bundled config not found at {DEFAULT_CONFIG_PATH}, using built-in defaults"
    )
    return ScanConfig()
