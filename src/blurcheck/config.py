"""Configuration model for blurcheck.

Provides ``BlurCheckConfig`` with every tunable threshold and policy
constant, with sensible defaults.  Supports loading overrides from YAML or
JSON files via the ``from_file()`` classmethod.

The config is frozen: one instance describes one analysis run.  Derive a
variant with ``config.model_copy(update={...})``.
"""

from __future__ import annotations

import json
import pathlib

from pydantic import BaseModel, ConfigDict, Field, model_validator

from blurcheck.models import BlurMethod


class BlurCheckConfig(BaseModel):
    """All tunable parameters with sensible defaults.

    Override individual values via constructor kwargs or load a complete
    config from a file with ``BlurCheckConfig.from_file(path)``.
    """

    model_config = ConfigDict(frozen=True)

    # --- Method selection ---
    method: BlurMethod = BlurMethod.EDGE
    edge_width_threshold: float = Field(default=0.5, gt=0.0)
    variance_threshold: float = Field(default=100.0, gt=0.0)

    # --- Edge-width scan ---
    edge_start_value: int = Field(default=0, ge=0, le=255)
    edge_close_min_value: int = Field(default=20, ge=0, le=255)
    low_edge_count_divisor: float = Field(default=10000.0, gt=0.0)

    # --- Multi-scale page analysis ---
    page_scales: list[float] = [1.0, 1.5, 2.0]
    page_edge_threshold_cap: float = Field(default=0.25, gt=0.0)

    # --- Text sharpness ---
    text_render_scale: float = Field(default=3.0, gt=0.0)
    text_window_size: int = Field(default=5, ge=2)
    text_variance_threshold: float = 100.0
    text_sharpness_threshold: float = 0.8
    header_sharpness_threshold: float = 0.5

    # --- Page content classification ---
    low_text_chars: int = 200
    header_max_text_chars: int = 500

    # --- Document policy ---
    min_text_chars_for_text_based: int = 10

    # --- Capability loading ---
    capability_poll_interval_seconds: float = Field(default=0.1, gt=0.0)
    capability_load_timeout_seconds: float = Field(default=15.0, gt=0.0)

    # --- Logging ---
    debug: bool = False

    @model_validator(mode="after")
    def _validate_scales(self) -> BlurCheckConfig:
        if not self.page_scales:
            raise ValueError("page_scales must contain at least one scale")
        if any(scale <= 0 for scale in self.page_scales):
            raise ValueError("page_scales must all be positive")
        return self

    @classmethod
    def from_file(cls, path: str) -> BlurCheckConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            import yaml  # type: ignore[import-untyped]

            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        return cls(**data)
