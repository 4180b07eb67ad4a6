"""Configuration models for the snapshot engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, PositiveInt, field_validator


class ViewportConfig(BaseModel):
    width: PositiveInt
    height: PositiveInt


def _default_viewports() -> dict[str, ViewportConfig]:
    return {
        "large": ViewportConfig(width=1024, height=768),
        "medium": ViewportConfig(width=640, height=888),
        "small": ViewportConfig(width=320, height=444),
    }


class ExampleConfig(BaseModel):
    """Per-example options passed as the third argument of ``define``."""

    viewports: Optional[list[str]] = None
    # Fail the render when an image or other asset request fails
    strict_assets: bool = False

    @field_validator("viewports")
    @classmethod
    def reject_empty(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is not None and not v:
            raise ValueError("viewports must name at least one viewport")
        return v


class SnapshotConfig(BaseModel):
    # Viewports, in order; the first one is the default for examples
    viewports: dict[str, ViewportConfig] = Field(default_factory=_default_viewports)

    # Example sources and assets
    source_files: list[str] = Field(default_factory=list)
    public_directories: list[str] = Field(default_factory=list)
    stylesheets: list[str] = Field(default_factory=list)

    # Output
    snapshots_folder: str = "./snapshots"

    # Rendering
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    base_url: str = "http://localhost:4567"
    render_timeout_seconds: float = Field(default=30.0, gt=0)
    max_parallel_renders: PositiveInt = 3

    # Diffing
    pixel_tolerance: int = Field(default=0, ge=0, le=255)

    @field_validator("viewports")
    @classmethod
    def require_viewport(cls, v: dict[str, ViewportConfig]) -> dict[str, ViewportConfig]:
        if not v:
            raise ValueError("At least one viewport must be configured")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def load(cls, path: str | Path) -> "SnapshotConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
