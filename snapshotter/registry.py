"""Example registry — accumulates example definitions for one run."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from snapshotter.driver.completion import detect_strategy
from snapshotter.errors import DuplicateDescriptionError
from snapshotter.models.config import ExampleConfig
from snapshotter.models.example import Example
from snapshotter.viewports import ViewportCatalog

logger = logging.getLogger(__name__)


class ExampleRegistry:
    """Collects examples in registration order.

    Example source files see an instance of this class as ``snapshot`` and
    call :meth:`define` or :meth:`fdefine` on it.
    """

    def __init__(self, catalog: ViewportCatalog):
        self.catalog = catalog
        self._examples: dict[str, Example] = {}

    def define(
        self,
        description: str,
        render_fn: Callable[..., Any],
        config: Mapping[str, Any] | ExampleConfig | None = None,
    ) -> Example:
        """Register an example."""
        return self._register(description, render_fn, config, focused=False)

    def fdefine(
        self,
        description: str,
        render_fn: Callable[..., Any],
        config: Mapping[str, Any] | ExampleConfig | None = None,
    ) -> Example:
        """Register a focused example. Once any example is focused, only focused ones run."""
        return self._register(description, render_fn, config, focused=True)

    def _register(
        self,
        description: str,
        render_fn: Callable[..., Any],
        config: Mapping[str, Any] | ExampleConfig | None,
        focused: bool,
    ) -> Example:
        if description in self._examples:
            raise DuplicateDescriptionError(description)

        if config is None:
            example_config = ExampleConfig()
        elif isinstance(config, ExampleConfig):
            example_config = config
        else:
            example_config = ExampleConfig(**config)

        example = Example(
            description=description,
            render_fn=render_fn,
            viewports=self.catalog.resolve_all(example_config.viewports),
            strategy=detect_strategy(render_fn),
            focused=focused,
            strict_assets=example_config.strict_assets,
        )
        self._examples[description] = example
        logger.debug("Defined %s'%s' at %s (%s)",
                     "focused " if focused else "", description,
                     ", ".join(example.viewport_names), example.strategy.value)
        return example

    @property
    def examples(self) -> list[Example]:
        return list(self._examples.values())

    @property
    def has_focused(self) -> bool:
        return any(e.focused for e in self._examples.values())

    def selected(self) -> list[Example]:
        """Examples to render this run, in registration order."""
        if self.has_focused:
            return [e for e in self._examples.values() if e.focused]
        return self.examples

    def __len__(self) -> int:
        return len(self._examples)
