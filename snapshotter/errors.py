"""Error types raised by the snapshot engine."""

from __future__ import annotations


class SnapshotterError(Exception):
    """Base class for snapshot engine errors."""


class DuplicateDescriptionError(SnapshotterError):
    """An example description was registered twice in one run."""

    def __init__(self, description: str):
        self.description = description
        super().__init__(
            f'Error while defining "{description}": '
            "an example with this description is already defined"
        )


class UnknownViewportError(SnapshotterError):
    """An example asked for a viewport the catalog does not know."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        super().__init__(
            f"Unknown viewport '{name}' (configured: {', '.join(known)})"
        )


class RenderFailure(SnapshotterError):
    """Rendering one (example, viewport) pair failed."""

    def __init__(self, description: str, cause: BaseException | str):
        self.description = description
        self.cause = cause
        super().__init__(f'Error while rendering "{description}": {cause}')
