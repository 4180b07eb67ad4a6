"""Viewport catalog — resolves viewport names to pixel dimensions."""

from __future__ import annotations

from snapshotter.errors import UnknownViewportError
from snapshotter.models.config import SnapshotConfig, ViewportConfig
from snapshotter.models.example import Viewport


class ViewportCatalog:
    """Named viewports in configuration order."""

    def __init__(self, viewports: dict[str, ViewportConfig]):
        if not viewports:
            raise ValueError("A viewport catalog needs at least one viewport")
        self._viewports = {
            name: Viewport(name=name, width=vp.width, height=vp.height)
            for name, vp in viewports.items()
        }

    @classmethod
    def from_config(cls, config: SnapshotConfig) -> "ViewportCatalog":
        return cls(config.viewports)

    @property
    def names(self) -> list[str]:
        return list(self._viewports)

    @property
    def default_names(self) -> list[str]:
        """Viewports used by examples that do not list their own."""
        return self.names[:1]

    def resolve(self, name: str) -> Viewport:
        try:
            return self._viewports[name]
        except KeyError:
            raise UnknownViewportError(name, self.names) from None

    def resolve_all(self, names: list[str] | None) -> tuple[Viewport, ...]:
        """Resolve names in order, dropping repeats. ``None`` means the defaults."""
        if names is None:
            names = self.default_names
        seen: dict[str, Viewport] = {}
        for name in names:
            if name not in seen:
                seen[name] = self.resolve(name)
        return tuple(seen.values())
