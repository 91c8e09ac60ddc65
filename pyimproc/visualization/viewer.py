"""Turning images into 8-bit display buffers and showing them.

The core builds a flat ``bytes`` buffer (one byte per channel per pixel,
row-major, first row = ``min_y``) and hands it to a :class:`Viewer`. Rows
are drawn bottom-up, so ``y`` grows upwards on screen like in a plot.
``origin_mark`` is the storage index ``(ix, iy)`` of the logical origin,
which lies outside the image when the domain does not contain ``(0, 0)``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pyimproc.image import ComplexImage, GenericImage, IntImage, RgbImage
from pyimproc.utils.optional_deps import install_hint, require

try:
    import matplotlib.pyplot as plt
    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False
    plt = None

logger = logging.getLogger(__name__)

OriginMark = Tuple[int, int]


class Viewer(Protocol):
    def show(self, buffer: bytes, width: int, height: int, origin_mark: OriginMark, title: str) -> None:
        ...


# ----------------------------------------------------------------------
# display buffers


def int_display_array(image: IntImage) -> NDArray:
    """Grey values clamped to ``[0, 255]``, stretched when the range is ``[0, maxRange]``."""

    pixels = image.pixels
    low, high = int(pixels.min()), int(pixels.max())
    if low < 0 or high > 255:
        logger.warning("display: grey values are clamped in the image viewer to [0,255].")
    values = np.clip(pixels, 0, 255)
    if image.min_range == 0 and image.max_range > 0:
        scale = 255.0 / image.max_range
        values = np.minimum(np.trunc(values * scale + 0.5), 255)
    return values.astype(np.uint8)


def complex_display_array(image: ComplexImage) -> NDArray:
    """Real parts scaled by ``255 / max``; values falling outside ``[0, 255]`` show as 255."""

    real = image.pixels.real
    _, peak = image.min_max()
    if peak == 0:
        return np.zeros(real.shape, dtype=np.uint8)
    grey = np.trunc(real * (255.0 / peak) + 0.5)
    grey = np.where((grey < 0) | (grey > 255), 255, grey)
    return grey.astype(np.uint8)


def rgb_display_array(image: RgbImage) -> NDArray:
    pixels = image.pixels
    low, high = int(pixels.min()), int(pixels.max())
    if low < 0 or high > 255:
        logger.warning("display: rgb values are clamped in the image viewer to [0,255].")
    return np.clip(pixels, 0, 255).astype(np.uint8)


def display_array(image: GenericImage) -> NDArray:
    if isinstance(image, RgbImage):
        return rgb_display_array(image)
    if isinstance(image, ComplexImage):
        return complex_display_array(image)
    if isinstance(image, IntImage):
        return int_display_array(image)
    raise TypeError(f"Cannot display {type(image).__name__}")


def display_buffer(image: GenericImage) -> bytes:
    """Flat byte buffer of :func:`display_array` (RGB channels interleaved)."""

    return np.ascontiguousarray(display_array(image)).tobytes()


def origin_mark(image: GenericImage) -> OriginMark:
    domain = image.domain
    return (-domain.min_x, -domain.min_y)


def buffer_to_array(buffer: bytes, width: int, height: int) -> NDArray:
    """Reshape a display buffer to ``(height, width)`` or ``(height, width, 3)``."""

    flat = np.frombuffer(buffer, dtype=np.uint8)
    channels = flat.size // (width * height)
    if channels not in (1, 3) or flat.size != width * height * channels:
        raise ValueError(f"buffer of {flat.size} bytes does not match a {width}x{height} grey or rgb image")
    if channels == 1:
        return flat.reshape(height, width)
    return flat.reshape(height, width, 3)


# ----------------------------------------------------------------------
# viewers


class MatplotlibViewer:
    """Interactive window; the origin pixel is outlined in red."""

    def __init__(self, *, block: bool = True, mark_origin: bool = True) -> None:
        self.block = block
        self.mark_origin = mark_origin

    def show(self, buffer: bytes, width: int, height: int, origin_mark: OriginMark, title: str) -> None:
        if not MATPLOTLIB_AVAILABLE:
            logger.error("Matplotlib is not available. Cannot display images (%s).", install_hint("matplotlib"))
            return

        array = buffer_to_array(buffer, width, height)
        fig, ax = plt.subplots()
        cmap = "gray" if array.ndim == 2 else None
        ax.imshow(array, cmap=cmap, vmin=0, vmax=255, origin="lower", interpolation="nearest")
        ox, oy = origin_mark
        if self.mark_origin and 0 <= ox < width and 0 <= oy < height:
            ax.add_patch(plt.Rectangle((ox - 0.5, oy - 0.5), 1, 1, fill=False, edgecolor="red", linewidth=1.5))
        ax.set_title(title)
        ax.axis("off")
        plt.show(block=self.block)


class SnapshotViewer:
    """Headless viewer writing each shown image to a PNG file via Pillow.

    Files are named ``<prefix><n>.png`` in ``output_dir``; the last written
    path is kept in :attr:`last_path`.
    """

    def __init__(self, output_dir: Union[str, Path], *, prefix: str = "view", mark_origin: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.mark_origin = mark_origin
        self.count = 0
        self.last_path: Optional[Path] = None

    def show(self, buffer: bytes, width: int, height: int, origin_mark: OriginMark, title: str) -> None:
        Image = require("PIL.Image", purpose="PNG snapshots of displayed images")

        array = buffer_to_array(buffer, width, height)
        ox, oy = origin_mark
        if self.mark_origin and 0 <= ox < width and 0 <= oy < height:
            if array.ndim == 2:
                array = np.stack([array] * 3, axis=-1)
            array = array.copy()
            array[oy, ox] = (255, 0, 0)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.count += 1
        path = self.output_dir / f"{self.prefix}{self.count}.png"
        # rows are stored bottom-up on screen, PNG rows go top-down
        Image.fromarray(np.ascontiguousarray(array[::-1])).save(path)
        self.last_path = path
        logger.info("%s written to %s", title or "image", path)


def display_image(image: GenericImage, title: str = "", viewer: Optional[Viewer] = None) -> None:
    """Build the display buffer for ``image`` and pass it to ``viewer``."""

    if viewer is None:
        viewer = MatplotlibViewer()
    viewer.show(display_buffer(image), image.width, image.height, origin_mark(image), title)


__all__ = [
    "MATPLOTLIB_AVAILABLE",
    "MatplotlibViewer",
    "SnapshotViewer",
    "Viewer",
    "buffer_to_array",
    "display_array",
    "display_buffer",
    "display_image",
    "origin_mark",
]
