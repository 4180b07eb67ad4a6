"""Example and viewport data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class CompletionStrategy(str, Enum):
    """How a render function signals that its renderable value is ready."""

    RETURN = "return"
    CALLBACK = "callback"
    AWAITABLE = "awaitable"


@dataclass(frozen=True)
class Viewport:
    name: str
    width: int
    height: int


@dataclass(frozen=True)
class Example:
    description: str
    render_fn: Callable[..., Any]
    viewports: tuple[Viewport, ...]
    strategy: CompletionStrategy
    focused: bool = False
    strict_assets: bool = False

    @property
    def viewport_names(self) -> list[str]:
        return [v.name for v in self.viewports]
