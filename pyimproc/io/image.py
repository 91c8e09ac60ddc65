"""Format-agnostic image loading and saving.

Netpbm files go through :mod:`pyimproc.io.netpbm`; every other extension
(png, jpg, tif, bmp, ...) is handled by OpenCV.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Union

import numpy as np

from pyimproc.image import IntImage, RgbImage
from pyimproc.io import netpbm
from pyimproc.utils.optional_deps import require

logger = logging.getLogger(__name__)

ImageKind = Literal["int", "rgb"]
NETPBM_EXTENSIONS = frozenset({"pbm", "pgm", "ppm"})


def _cv2():
    return require("cv2", purpose="reading/writing non-netpbm image formats")


def read_array(path: str | Path, *, color: Literal["rgb", "gray"] = "gray") -> np.ndarray:
    """Read a raster via OpenCV as ``(H,W)`` grey or ``(H,W,3)`` RGB, keeping bit depth."""

    cv2 = _cv2()
    path_str = str(path)
    flags = cv2.IMREAD_ANYDEPTH | (cv2.IMREAD_GRAYSCALE if color == "gray" else cv2.IMREAD_COLOR)
    img = cv2.imread(path_str, flags)
    if img is None:
        raise FileNotFoundError(f"Unable to read image: {path_str}")

    if color == "rgb":
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    if color == "gray":
        return img
    raise ValueError(f"Unknown color mode: {color!r}. Choose from: rgb, gray.")


def _max_range_for(array: np.ndarray) -> int:
    if array.dtype == np.uint8:
        return 255
    if array.dtype == np.uint16:
        return 65535
    return int(array.max())


def load_image(path: str | Path, kind: ImageKind = "int") -> Union[IntImage, RgbImage]:
    """Load ``path`` as an :class:`IntImage` (``kind="int"``) or :class:`RgbImage`.

    Images read through OpenCV get dynamic range ``[0, 255]`` (8 bit) or
    ``[0, 65535]`` (16 bit).
    """

    ext = Path(path).suffix.lower().lstrip(".")
    if kind not in ("int", "rgb"):
        raise ValueError(f"Unknown image kind: {kind!r}. Choose from: int, rgb.")

    if ext in NETPBM_EXTENSIONS:
        if kind == "rgb":
            return netpbm.load_rgb_image(path)
        return netpbm.load_int_image(path)

    array = read_array(path, color="rgb" if kind == "rgb" else "gray")
    cls = RgbImage if kind == "rgb" else IntImage
    logger.debug("loaded %s via OpenCV: shape=%s dtype=%s", path, array.shape, array.dtype)
    return cls.from_array(array.astype(np.int64), min_range=0, max_range=_max_range_for(array))


def save_image(image: Union[IntImage, RgbImage], path: str | Path) -> None:
    """Save ``image`` with the writer implied by the extension of ``path``.

    For OpenCV formats, values are clipped to ``[0, 255]`` (or ``[0, 65535]``
    when the image holds larger values) with a warning.
    """

    ext = Path(path).suffix.lower().lstrip(".")
    if ext in NETPBM_EXTENSIONS:
        if isinstance(image, RgbImage):
            netpbm.save_rgb_image(image, path)
        else:
            netpbm.save_int_image(image, path)
        return

    pixels = image.pixels
    low, high = int(pixels.min()), int(pixels.max())
    top, dtype = (255, np.uint8) if high <= 255 else (65535, np.uint16)
    if low < 0 or high > top:
        logger.warning(
            "save_image: range of image %s is [%d,%d]. Saved image values are clamped to [0,%d].",
            path, low, high, top,
        )
    array = np.clip(pixels, 0, top).astype(dtype)

    cv2 = _cv2()
    if isinstance(image, RgbImage):
        array = cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
    if not cv2.imwrite(str(path), array):
        raise ValueError(f"OpenCV could not write image to {path!s}")


__all__ = ["NETPBM_EXTENSIONS", "load_image", "read_array", "save_image"]
