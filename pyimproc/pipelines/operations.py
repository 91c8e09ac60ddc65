"""Built-in pipeline operations.

Every operation takes an image plus keyword parameters and returns a new
image; inputs are left untouched.
"""

from __future__ import annotations

import numpy as np

from pyimproc.distance import distance_transform
from pyimproc.image import GenericImage, IntImage
from pyimproc.morphology import dilate_rect, erode_rect
from pyimproc.ops import apply_lut
from pyimproc.pipelines.registry import register_operation
from pyimproc.spectral import fft2d, fft2d_shift, spectrum_magnitude


@register_operation("threshold", metadata={"description": "0 below level, 255 from level on"})
def threshold(image: IntImage, level: int = 128) -> IntImage:
    level = int(level)
    result = IntImage(image.domain, 0, 255)
    result.write_array(np.where(image.pixels < level, 0, 255), source="threshold")
    return result


@register_operation("distance_transform", metadata={"description": "distance of foreground pixels to background"})
def distance(image: IntImage, metric: str = "euclid", foreground: int = 1) -> IntImage:
    return distance_transform(image, metric, foreground)


@register_operation("dilate", metadata={"description": "grey-value dilation with a rectangle"})
def dilate(image: IntImage, width: int = 3, height: int = 3) -> IntImage:
    return dilate_rect(image, width, height)


@register_operation("erode", metadata={"description": "grey-value erosion with a rectangle"})
def erode(image: IntImage, width: int = 3, height: int = 3) -> IntImage:
    return erode_rect(image, width, height)


@register_operation("invert", metadata={"description": "v -> max_range - v through a lookup table"})
def invert(image: IntImage) -> IntImage:
    table = np.arange(image.max_range, -1, -1, dtype=np.int64)
    return apply_lut(image, table)


@register_operation("spectrum", metadata={"description": "centred FFT magnitude scaled to [0, 255]"})
def spectrum(image: IntImage, log_scale: bool = True) -> IntImage:
    with fft2d(image) as transformed:
        fft2d_shift(transformed)
        return spectrum_magnitude(transformed, log_scale=bool(log_scale))


@register_operation("translate", kinds=("int", "rgb"), metadata={"description": "shift the domain by (dx, dy)"})
def translate(image: GenericImage, dx: int = 0, dy: int = 0) -> GenericImage:
    result = image.copy()
    result.translate(int(dx), int(dy))
    return result


@register_operation("flip_horizontal", kinds=("int", "rgb"), metadata={"description": "mirror left-right"})
def flip_horizontal(image: GenericImage) -> GenericImage:
    result = image.copy()
    result.flip_horizontal()
    return result


@register_operation("flip_vertical", kinds=("int", "rgb"), metadata={"description": "mirror top-bottom"})
def flip_vertical(image: GenericImage) -> GenericImage:
    result = image.copy()
    result.flip_vertical()
    return result


@register_operation("pad", kinds=("int", "rgb"), metadata={"description": "grow the domain with a constant border"})
def pad(image: GenericImage, top: int = 1, right: int = 1, bottom: int = 1, left: int = 1, value=0) -> GenericImage:
    if image.kind == "rgb" and not isinstance(value, (list, tuple)):
        value = (value, value, value)
    return image.pad(int(top), int(right), int(bottom), int(left), value)


@register_operation("dynamic_range", kinds=("int", "rgb"), metadata={"description": "declare a new dynamic range"})
def dynamic_range(image: GenericImage, min_range: int = 0, max_range: int = 255) -> GenericImage:
    result = image.copy()
    result.set_dynamic_range(min_range, max_range)
    return result
