"""Public asset routing — serves configured directories to the render page."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from playwright.async_api import Route

logger = logging.getLogger(__name__)

ROOT_ELEMENT_ID = "__snapshot_root"
STYLESHEET_PREFIX = "/__stylesheets__/"

_RENDER_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>html, body {{ margin: 0; padding: 0; background: #fff; }}</style>
{links}
</head>
<body><div id="{root_id}"></div></body>
</html>
"""


class PublicAssetResolver:
    """Maps request paths to files inside the public directories.

    A file ``public/picture.gif`` is served as ``/picture.gif``. Directories
    are searched in configuration order; the first match wins.
    """

    def __init__(self, directories: list[Path], stylesheets: list[Path] | None = None):
        self.directories = [Path(d).resolve() for d in directories]
        self.stylesheets = [Path(s).resolve() for s in stylesheets or []]
        for directory in self.directories:
            if not directory.is_dir():
                logger.warning("Public directory does not exist: %s", directory)
        for stylesheet in self.stylesheets:
            if not stylesheet.is_file():
                logger.warning("Stylesheet does not exist: %s", stylesheet)

    def resolve(self, url_path: str) -> Path | None:
        """Return the file for ``url_path``, or None when nothing maps to it."""
        relative = unquote(url_path).lstrip("/")
        if not relative:
            return None
        if relative.startswith(STYLESHEET_PREFIX.strip("/") + "/"):
            return self._stylesheet(relative.rsplit("/", 1)[-1])
        for directory in self.directories:
            candidate = (directory / relative).resolve()
            if not candidate.is_relative_to(directory):
                continue
            if candidate.is_file():
                return candidate
        return None

    def _stylesheet(self, index: str) -> Path | None:
        if not index.isdigit() or int(index) >= len(self.stylesheets):
            return None
        stylesheet = self.stylesheets[int(index)]
        return stylesheet if stylesheet.is_file() else None

    def render_page(self) -> str:
        """HTML shell every example is mounted into."""
        links = "\n".join(
            f'<link rel="stylesheet" href="{STYLESHEET_PREFIX}{i}" '
            f'data-source="{html.escape(s.name)}">'
            for i, s in enumerate(self.stylesheets)
        )
        return _RENDER_PAGE.format(links=links, root_id=ROOT_ELEMENT_ID)

    async def handle_route(self, route: Route) -> None:
        """Playwright route handler for every request under the base URL."""
        path = urlparse(route.request.url).path
        if path in ("", "/"):
            await route.fulfill(status=200, content_type="text/html", body=self.render_page())
            return

        file_path = self.resolve(path)
        if file_path is None:
            logger.debug("No public file for %s", path)
            await route.fulfill(status=404, content_type="text/plain", body=f"Not found: {path}")
            return

        if path.startswith(STYLESHEET_PREFIX):
            await route.fulfill(status=200, content_type="text/css", body=file_path.read_text())
        else:
            await route.fulfill(status=200, path=str(file_path))
