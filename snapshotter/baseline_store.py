"""Baseline store — on-disk snapshot layout and baseline promotion."""

from __future__ import annotations

import base64
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from snapshotter.diff import BACKGROUND_COLOR, DiffOutcome
from snapshotter.models.result import Classification

logger = logging.getLogger(__name__)

CURRENT = "current.png"
PREVIOUS = "previous.png"
DIFF = "diff.png"
SUMMARY = "result_summary.json"

# Encoded descriptions are split into path segments no longer than this
SEGMENT_LENGTH = 128


def encode_description(description: str) -> list[str]:
    """Filesystem-safe, collision-free path segments for a description.

    Base32 uses only upper-case letters, digits and ``=``. The segments never
    contain ``/`` or ``@``, cannot clash on case-insensitive filesystems, and
    joining them gives the encoding back.
    """
    encoded = base64.b32encode(description.encode("utf-8")).decode("ascii")
    if not encoded:
        encoded = "="
    return [encoded[i:i + SEGMENT_LENGTH] for i in range(0, len(encoded), SEGMENT_LENGTH)]


def decode_description(segments: list[str]) -> str:
    encoded = "".join(segments)
    if encoded == "=":
        return ""
    return base64.b32decode(encoded.encode("ascii")).decode("utf-8")


@dataclass(frozen=True)
class SnapshotKey:
    description: str
    viewport: str

    def relative_dir(self) -> Path:
        return Path(*encode_description(self.description), f"@{self.viewport}")


class BaselineStore:
    """Manages ``<root>/<description>/@<viewport>/{current,previous,diff}.png``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @property
    def summary_path(self) -> Path:
        return self.root / SUMMARY

    def directory(self, key: SnapshotKey) -> Path:
        return self.root / key.relative_dir()

    def path_to(self, key: SnapshotKey, file_name: str) -> Path:
        return self.directory(key) / file_name

    def key_for(self, directory: Path) -> SnapshotKey:
        """Inverse of :meth:`directory`, for a viewport folder under the root."""
        parts = Path(directory).relative_to(self.root).parts
        if len(parts) < 2 or not parts[-1].startswith("@"):
            raise ValueError(f"Not a snapshot folder: {directory}")
        return SnapshotKey(decode_description(list(parts[:-1])), parts[-1][1:])

    def read_baseline(self, key: SnapshotKey) -> Image.Image | None:
        path = self.path_to(key, CURRENT)
        if not path.exists():
            return None
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA")

    def commit(self, key: SnapshotKey, new_image: Image.Image, outcome: DiffOutcome | None) -> Classification:
        """Persist a successful render and return its classification.

        ``outcome`` is the comparison against the existing baseline and must
        be None exactly when there is no baseline yet.
        """
        directory = self.directory(key)
        current = directory / CURRENT
        had_baseline = current.exists()

        if had_baseline and outcome is None:
            raise ValueError(f"Baseline exists for {key} but no diff outcome was given")
        if not had_baseline and outcome is not None:
            raise ValueError(f"No baseline exists for {key} to compare against")

        directory.mkdir(parents=True, exist_ok=True)

        if outcome is None or outcome.equal:
            self._discard(directory / PREVIOUS, directory / DIFF)
            self._write_image(new_image, current)
            classification = Classification.NEW if outcome is None else Classification.OKAY
        else:
            self._copy_atomic(current, directory / PREVIOUS)
            if outcome.diff_image is not None:
                self._write_image(outcome.diff_image, directory / DIFF)
            self._write_image(new_image, current)
            classification = Classification.DIFF

        logger.debug("Committed %s @%s as %s", key.description, key.viewport, classification.value)
        return classification

    def clean(self) -> bool:
        """Remove the whole snapshot folder. Returns whether anything was removed."""
        if not self.root.exists():
            return False
        shutil.rmtree(self.root)
        logger.info("Removed %s", self.root)
        return True

    @staticmethod
    def _discard(*paths: Path) -> None:
        for path in paths:
            if path.exists():
                path.unlink()

    @staticmethod
    def _write_image(image: Image.Image, dest: Path) -> None:
        # PNG has no zero-area images
        if image.width == 0 or image.height == 0:
            image = Image.new("RGBA", (max(1, image.width), max(1, image.height)), BACKGROUND_COLOR)
        elif image.mode != "RGBA":
            image = image.convert("RGBA")
        fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=".tmp-", suffix=".png")
        try:
            with os.fdopen(fd, "wb") as f:
                image.save(f, format="PNG")
            os.replace(tmp, dest)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    @staticmethod
    def _copy_atomic(source: Path, dest: Path) -> None:
        fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=".tmp-", suffix=".png")
        os.close(fd)
        try:
            shutil.copy2(source, tmp)
            os.replace(tmp, dest)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
