"""Coordinate-addressable images.

Each image owns a dense numpy buffer of shape ``(height, width)`` (plus a
trailing channel axis for RGB) and exactly one :class:`ImageDomain`. Integer,
real and RGB images also carry a declared dynamic range ``[min_range,
max_range]`` that acts as a soft clamp on writes: an underflow is stored as
``min_range``, an overflow as ``max_range - 1``, and a warning is logged.

Two addressing modes are offered everywhere:

- domain-relative: ``get_pixel(x, y)`` with the true (possibly negative)
  coordinates;
- index-relative: ``get_pixel_index(ix, iy)`` with 0-based storage offsets.

Both are bounds-checked. The ``*_unchecked`` variants skip the bounds check
and the range clamp; out-of-range coordinates give undefined results there.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, ClassVar, Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyimproc.domain import ImageDomain
from pyimproc.errors import ReleasedImageError, UnsupportedOperationError

logger = logging.getLogger(__name__)

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
DBL_MAX = sys.float_info.max


class GenericImage:
    """Base class for all image variants.

    Subclasses pick the storage dtype, the channel count and the default
    dynamic range; everything else (allocation, addressing, clamping,
    geometric helpers) is shared.
    """

    dtype: ClassVar[Any] = np.int64
    channels: ClassVar[Optional[int]] = None
    default_range: ClassVar[Tuple[Any, Any]] = (INT_MIN, INT_MAX)
    kind: ClassVar[str] = "generic"

    def __init__(self, domain: ImageDomain, min_range=None, max_range=None) -> None:
        if not isinstance(domain, ImageDomain):
            raise TypeError(f"domain must be an ImageDomain, got {type(domain).__name__}")
        self._domain = domain
        default_min, default_max = self.default_range
        self.min_range = default_min if min_range is None else self._coerce_scalar(min_range)
        self.max_range = default_max if max_range is None else self._coerce_scalar(max_range)
        shape = domain.shape if self.channels is None else domain.shape + (self.channels,)
        self._pixels: Optional[NDArray] = np.zeros(shape, dtype=self.dtype)

    # ------------------------------------------------------------------
    # allocation
    @classmethod
    def allocate(cls, width: int, height: int, min_range=None, max_range=None):
        """Allocate a zero-filled image over ``[0..width) x [0..height)``."""

        return cls(ImageDomain.from_size(width, height), min_range, max_range)

    @classmethod
    def allocate_grid(cls, min_x: int, max_x: int, min_y: int, max_y: int, min_range=None, max_range=None):
        """Allocate a zero-filled image over explicit inclusive bounds."""

        return cls(ImageDomain(min_x, max_x, min_y, max_y), min_range, max_range)

    @classmethod
    def from_array(cls, array: ArrayLike, *, min_x: int = 0, min_y: int = 0, min_range=None, max_range=None):
        """Build an image from a ``(height, width[, channels])`` array.

        Values are written through the range clamp of the new image.
        """

        arr = np.asarray(array)
        expected_ndim = 2 if cls.channels is None else 3
        if arr.ndim != expected_ndim or (cls.channels is not None and arr.shape[2] != cls.channels):
            raise ValueError(f"{cls.__name__}.from_array expects an array of ndim {expected_ndim}, got shape {arr.shape}")
        height, width = int(arr.shape[0]), int(arr.shape[1])
        image = cls(ImageDomain(min_x, min_x + width - 1, min_y, min_y + height - 1), min_range, max_range)
        image.write_array(arr, source=f"{cls.__name__}.from_array")
        return image

    def allocate_from(self):
        """New zero-filled image with this image's domain and dynamic range."""

        self._require_storage()
        return type(self)(self._domain, self.min_range, self.max_range)

    def copy(self):
        """Deep copy: domain, dynamic range and pixels."""

        duplicate = self.allocate_from()
        duplicate._pixels[...] = self._pixels
        return duplicate

    def release(self) -> None:
        """Drop the pixel storage. Must be called at most once."""

        if self._pixels is None:
            raise ReleasedImageError(f"{type(self).__name__} has already been released")
        self._pixels = None

    @property
    def released(self) -> bool:
        return self._pixels is None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._pixels is not None:
            self.release()

    # ------------------------------------------------------------------
    # properties
    @property
    def domain(self) -> ImageDomain:
        return self._domain

    @property
    def width(self) -> int:
        return self._domain.width

    @property
    def height(self) -> int:
        return self._domain.height

    @property
    def pixels(self) -> NDArray:
        """Live storage array, indexed ``[iy, ix]``."""

        return self._require_storage()

    @property
    def dynamic_range(self) -> tuple:
        return (self.min_range, self.max_range)

    def set_dynamic_range(self, min_range, max_range) -> None:
        self.min_range = self._coerce_scalar(min_range)
        self.max_range = self._coerce_scalar(max_range)

    def to_array(self) -> NDArray:
        return self._require_storage().copy()

    def __repr__(self) -> str:
        d = self._domain
        state = " released" if self.released else ""
        return (
            f"{type(self).__name__}(domain=[{d.min_x}..{d.max_x}]x[{d.min_y}..{d.max_y}], "
            f"range=[{self.min_range},{self.max_range}]{state})"
        )

    # ------------------------------------------------------------------
    # value handling (overridden per variant)
    def _coerce_scalar(self, value):
        return int(value)

    def _coerce(self, value):
        return self._coerce_scalar(value)

    def _export(self, stored):
        return int(stored)

    def _clamp_scalar(self, value, source: str):
        if self.min_range is None:
            return value
        if value < self.min_range:
            logger.warning(
                "%s: value %s is outside dynamic range [%s,%s]: clamped to %s",
                source, value, self.min_range, self.max_range, self.min_range,
            )
            return self.min_range
        if value > self.max_range:
            clamped = self.max_range - 1
            logger.warning(
                "%s: value %s is outside dynamic range [%s,%s]: clamped to %s",
                source, value, self.min_range, self.max_range, clamped,
            )
            return clamped
        return value

    def _clamp(self, value, source: str):
        return self._clamp_scalar(value, source)

    def _require_storage(self) -> NDArray:
        if self._pixels is None:
            raise ReleasedImageError(f"{type(self).__name__} storage has been released")
        return self._pixels

    # ------------------------------------------------------------------
    # pixel access
    def get_pixel(self, x: int, y: int):
        pixels = self._require_storage()
        self._domain.check(x, y)
        return self._export(pixels[y - self._domain.min_y, x - self._domain.min_x])

    def get_pixel_index(self, ix: int, iy: int):
        pixels = self._require_storage()
        self._domain.check_index(ix, iy)
        return self._export(pixels[iy, ix])

    def set_pixel(self, x: int, y: int, value) -> None:
        pixels = self._require_storage()
        value = self._clamp(self._coerce(value), "set_pixel")
        self._domain.check(x, y)
        pixels[y - self._domain.min_y, x - self._domain.min_x] = value

    def set_pixel_index(self, ix: int, iy: int, value) -> None:
        pixels = self._require_storage()
        value = self._clamp(self._coerce(value), "set_pixel_index")
        self._domain.check_index(ix, iy)
        pixels[iy, ix] = value

    def get_pixel_unchecked(self, x: int, y: int):
        return self._export(self._pixels[y - self._domain.min_y, x - self._domain.min_x])

    def get_pixel_index_unchecked(self, ix: int, iy: int):
        return self._export(self._pixels[iy, ix])

    def set_pixel_unchecked(self, x: int, y: int, value) -> None:
        self._pixels[y - self._domain.min_y, x - self._domain.min_x] = value

    def set_pixel_index_unchecked(self, ix: int, iy: int, value) -> None:
        self._pixels[iy, ix] = value

    def set_all_pixels(self, value) -> None:
        """Fill the whole image; the value is clamped once, not per pixel."""

        pixels = self._require_storage()
        pixels[...] = self._clamp(self._coerce(value), "set_all_pixels")

    def write_array(self, values: ArrayLike, *, source: str = "write_array") -> None:
        """Bulk write of a full storage-shaped array through the range clamp.

        Out-of-range values are clamped like single-pixel writes; a single
        aggregated warning is logged.
        """

        pixels = self._require_storage()
        arr = np.asarray(values)
        if arr.shape != pixels.shape:
            raise ValueError(f"{source}: expected array of shape {pixels.shape}, got {arr.shape}")
        if self.min_range is not None:
            low = arr < self.min_range
            high = arr > self.max_range
            n_low = int(np.count_nonzero(low))
            n_high = int(np.count_nonzero(high))
            if n_low or n_high:
                logger.warning(
                    "%s: %d value(s) outside dynamic range [%s,%s] clamped (%d below, %d above)",
                    source, n_low + n_high, self.min_range, self.max_range, n_low, n_high,
                )
                arr = np.where(low, self.min_range, np.where(high, self.max_range - 1, arr))
        pixels[...] = arr.astype(self.dtype)

    def min_max(self):
        """Smallest and largest stored value over all pixels (and channels)."""

        pixels = self._require_storage()
        return self._export(pixels.min()), self._export(pixels.max())

    # ------------------------------------------------------------------
    # geometry
    def translate(self, dx: int, dy: int) -> None:
        """Shift the domain by ``(dx, dy)``; pixel storage is untouched."""

        self._domain = self._domain.translated(dx, dy)

    def flip_horizontal(self) -> None:
        """Mirror pixels left-right in place and the domain around x=0."""

        pixels = self._require_storage()
        pixels[...] = pixels[:, ::-1].copy()
        self._domain = self._domain.flipped_horizontal()

    def flip_vertical(self) -> None:
        """Mirror pixels top-bottom in place and the domain around y=0."""

        pixels = self._require_storage()
        pixels[...] = pixels[::-1].copy()
        self._domain = self._domain.flipped_vertical()

    def pad(self, top: int, right: int, bottom: int, left: int, pad_value):
        """New image over a larger domain; the border holds ``pad_value``."""

        pixels = self._require_storage()
        padded = type(self)(self._domain.padded(top, right, bottom, left), self.min_range, self.max_range)
        padded.set_all_pixels(pad_value)
        iy0 = self._domain.min_y - padded.domain.min_y
        ix0 = self._domain.min_x - padded.domain.min_x
        padded._pixels[iy0:iy0 + self.height, ix0:ix0 + self.width] = pixels
        return padded

    def same_domain(self, other: "GenericImage") -> bool:
        return self._domain == other.domain


class IntImage(GenericImage):
    """Grey-value image of integers."""

    dtype = np.int64
    default_range = (INT_MIN, INT_MAX)
    kind = "int"


class DoubleImage(GenericImage):
    """Real-valued image."""

    dtype = np.float64
    default_range = (-DBL_MAX, DBL_MAX)
    kind = "double"

    def _coerce_scalar(self, value):
        return float(value)

    def _export(self, stored):
        return float(stored)


class RgbImage(GenericImage):
    """Image of ``(r, g, b)`` integer triples sharing one dynamic range."""

    dtype = np.int64
    channels = 3
    default_range = (INT_MIN, INT_MAX)
    kind = "rgb"

    def _coerce(self, value):
        r, g, b = value
        return (int(r), int(g), int(b))

    def _clamp(self, value, source: str):
        return tuple(self._clamp_scalar(channel, source) for channel in value)

    def _export(self, stored):
        if np.ndim(stored) == 0:
            return int(stored)
        return tuple(int(channel) for channel in stored)

    def channel(self, index: int) -> NDArray:
        """Copy of a single channel (0=red, 1=green, 2=blue)."""

        return self._require_storage()[..., index].copy()


class ComplexImage(GenericImage):
    """Complex-valued image (spectra). Has no dynamic range."""

    dtype = np.complex128
    default_range = (None, None)
    kind = "complex"

    def _coerce_scalar(self, value):
        return complex(value)

    def _export(self, stored):
        return complex(stored)

    def set_dynamic_range(self, min_range, max_range) -> None:
        raise UnsupportedOperationError("ComplexImage has no dynamic range")

    def min_max(self):
        """Smallest and largest real part."""

        real = self._require_storage().real
        return float(real.min()), float(real.max())


# ----------------------------------------------------------------------
# conversions


def _int_range(value) -> int:
    if value is None:
        return value
    return int(max(INT_MIN, min(INT_MAX, value)))


def int_to_double_image(image: IntImage) -> DoubleImage:
    result = DoubleImage(image.domain, image.min_range, image.max_range)
    result.write_array(image.pixels.astype(np.float64), source="int_to_double_image")
    return result


def double_to_int_image(image: DoubleImage) -> IntImage:
    """Round to integers with ``+0.5`` followed by truncation toward zero."""

    result = IntImage(image.domain, _int_range(image.min_range), _int_range(image.max_range))
    result.write_array(np.trunc(image.pixels + 0.5), source="double_to_int_image")
    return result


def complex_real_to_int_image(image: ComplexImage) -> IntImage:
    """Integer image of the rounded real parts, ranged to fit them."""

    low, high = image.min_max()
    result = IntImage(image.domain, int(low), int(high + 0.5))
    result.write_array(np.trunc(image.pixels.real + 0.5), source="complex_real_to_int_image")
    return result


__all__ = [
    "DBL_MAX",
    "INT_MAX",
    "INT_MIN",
    "ComplexImage",
    "DoubleImage",
    "GenericImage",
    "IntImage",
    "RgbImage",
    "complex_real_to_int_image",
    "double_to_int_image",
    "int_to_double_image",
]
