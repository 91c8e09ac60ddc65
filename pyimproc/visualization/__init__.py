"""Display helpers."""

from .viewer import (
    MATPLOTLIB_AVAILABLE,
    MatplotlibViewer,
    SnapshotViewer,
    Viewer,
    display_buffer,
    display_image,
)

__all__ = [
    "MATPLOTLIB_AVAILABLE",
    "MatplotlibViewer",
    "SnapshotViewer",
    "Viewer",
    "display_buffer",
    "display_image",
]
