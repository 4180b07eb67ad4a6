"""Render driver interface — turns an example into a pixel buffer."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from PIL import Image

from snapshotter.errors import RenderFailure
from snapshotter.models.example import Example, Viewport
from snapshotter.models.result import RenderResult

from .completion import run_render_fn

logger = logging.getLogger(__name__)

DEFAULT_RENDER_TIMEOUT = 30.0


class RenderDriver(ABC):
    """Base class for render drivers.

    :meth:`render` runs the example's render function through its completion
    strategy, validates the produced value and hands it to :meth:`capture`.
    Every error, including a timeout, comes back as a failed ``RenderResult``.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_RENDER_TIMEOUT):
        self.timeout_seconds = timeout_seconds

    async def render(self, example: Example, viewport: Viewport) -> RenderResult:
        logger.debug("Rendering '%s' @%s (%dx%d)",
                     example.description, viewport.name, viewport.width, viewport.height)
        try:
            image = await asyncio.wait_for(
                self._render(example, viewport), timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return RenderResult(failure=RenderFailure(
                example.description,
                f"timed out after {self.timeout_seconds:g}s @{viewport.name}",
            ))
        except RenderFailure as e:
            return RenderResult(failure=e)
        except Exception as e:
            return RenderResult(failure=RenderFailure(example.description, e))
        return RenderResult(image=image)

    async def _render(self, example: Example, viewport: Viewport) -> Image.Image:
        value = await run_render_fn(example.render_fn, example.strategy, example.description)
        if not self.is_renderable(value):
            raise RenderFailure(
                example.description,
                f"render function produced {type(value).__name__}, not a renderable value",
            )
        image = await self.capture(example, viewport, value)
        return image.convert("RGBA") if image.mode != "RGBA" else image

    def is_renderable(self, value: Any) -> bool:
        """Whether ``value`` can be captured by this driver."""
        return isinstance(value, (str, Image.Image))

    @abstractmethod
    async def capture(self, example: Example, viewport: Viewport, value: Any) -> Image.Image:
        """Turn a renderable value into an image at the given viewport."""
