"""Per-unit run results and the summary report."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from PIL import Image
from pydantic import BaseModel, Field

from snapshotter.errors import RenderFailure


class Classification(str, Enum):
    NEW = "new"
    DIFF = "diff"
    OKAY = "okay"


@dataclass
class RenderResult:
    """Outcome of rendering one (example, viewport) pair: an image or a failure."""

    image: Optional[Image.Image] = None
    failure: Optional[RenderFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.image is not None


@dataclass
class UnitResult:
    """Tagged result of one unit of work: classified or failed."""

    description: str
    viewport: str
    classification: Optional[Classification] = None
    failure: Optional[RenderFailure] = None

    @property
    def failed(self) -> bool:
        return self.failure is not None


class ClassificationEntry(BaseModel):
    description: str
    viewport: str


class SummaryReport(BaseModel):
    new_examples: list[ClassificationEntry] = Field(default_factory=list)
    diff_examples: list[ClassificationEntry] = Field(default_factory=list)
    okay_examples: list[ClassificationEntry] = Field(default_factory=list)
