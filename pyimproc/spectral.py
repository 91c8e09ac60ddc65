"""Radix-2 Cooley-Tukey FFT in one and two dimensions.

All transforms require power-of-two lengths. The 1D kernel works in place on
a Python list and uses a caller supplied workspace of at least the same
length; at each recursion level the input and the workspace swap roles, so
no further memory is allocated.
"""

from __future__ import annotations

import cmath
import logging
import math
from typing import List, MutableSequence, Optional, Union

import numpy as np

from pyimproc.errors import UnsupportedOperationError
from pyimproc.image import INT_MAX, INT_MIN, ComplexImage, DoubleImage, IntImage

logger = logging.getLogger(__name__)

ComplexBuffer = MutableSequence[complex]


def is_power_of_two(n: int) -> bool:
    n = int(n)
    return n >= 1 and (n & (n - 1)) == 0


def _require_power_of_two(width: int, height: int, caller: str) -> None:
    if not (is_power_of_two(width) and is_power_of_two(height)):
        raise UnsupportedOperationError(
            f"{caller}: image width and height need to be powers of two. (width={width}, height={height})"
        )


def _cooley_tukey(
    length: int,
    a: ComplexBuffer,
    a_offset: int,
    omega: complex,
    wsp: ComplexBuffer,
    wsp_offset: int,
) -> None:
    if length < 2:
        return
    half = length // 2
    even, odd = wsp_offset, wsp_offset + half
    for i in range(half):
        wsp[even + i] = a[a_offset + 2 * i]
        wsp[odd + i] = a[a_offset + 2 * i + 1]

    # one level down the halves live in wsp and a[] serves as workspace
    omega_sq = omega * omega
    _cooley_tukey(half, wsp, even, omega_sq, a, a_offset)
    _cooley_tukey(half, wsp, odd, omega_sq, a, a_offset)

    x = 1 + 0j
    for i in range(half):
        h = x * wsp[odd + i]
        e = wsp[even + i]
        a[a_offset + i] = e + h
        a[a_offset + i + half] = e - h
        x *= omega


def _workspace(length: int, workspace: Optional[ComplexBuffer]) -> ComplexBuffer:
    if workspace is None:
        return [0j] * length
    if len(workspace) < length:
        raise ValueError(f"workspace of size {len(workspace)} is too small for length {length}")
    return workspace


def fft1d(values: ComplexBuffer, workspace: Optional[ComplexBuffer] = None) -> ComplexBuffer:
    """Forward transform of ``values`` in place (root of unity ``exp(-2*pi*i/n)``)."""

    length = len(values)
    if not is_power_of_two(length):
        raise UnsupportedOperationError(f"fft1d: length {length} is not a power of two")
    omega = cmath.exp(-2.0j * math.pi / length)
    _cooley_tukey(length, values, 0, omega, _workspace(length, workspace), 0)
    return values


def ifft1d(values: ComplexBuffer, workspace: Optional[ComplexBuffer] = None) -> ComplexBuffer:
    """Inverse transform of ``values`` in place, including the ``1/n`` scaling."""

    length = len(values)
    if not is_power_of_two(length):
        raise UnsupportedOperationError(f"ifft1d: length {length} is not a power of two")
    omega = cmath.exp(2.0j * math.pi / length)
    _cooley_tukey(length, values, 0, omega, _workspace(length, workspace), 0)
    for i in range(length):
        values[i] /= length
    return values


def fft2d(image: Union[IntImage, DoubleImage]) -> ComplexImage:
    """Spectrum of an integer or real image: columns first, then rows."""

    if not isinstance(image, (IntImage, DoubleImage)):
        raise UnsupportedOperationError(f"fft2d expects an IntImage or DoubleImage, got {type(image).__name__}")
    width, height = image.width, image.height
    _require_power_of_two(width, height, "fft2d")
    logger.debug("fft2d on %dx%d image", width, height)

    source = image.pixels
    spectrum = ComplexImage(image.domain)
    out = spectrum.pixels
    wsp: List[complex] = [0j] * max(width, height)

    for x in range(width):
        column = [complex(v) for v in source[:, x].tolist()]
        out[:, x] = fft1d(column, wsp)
    for y in range(height):
        out[y, :] = fft1d(out[y, :].tolist(), wsp)
    return spectrum


def _inverse_rows_then_columns(image: ComplexImage) -> np.ndarray:
    width, height = image.width, image.height
    wsp: List[complex] = [0j] * max(width, height)
    with image.copy() as intermediate:
        buf = intermediate.pixels
        for y in range(height):
            buf[y, :] = ifft1d(buf[y, :].tolist(), wsp)
        for x in range(width):
            buf[:, x] = ifft1d(buf[:, x].tolist(), wsp)
        return buf.real.copy()


def ifft2d(image: ComplexImage) -> IntImage:
    """Inverse transform; the real part is rounded to the nearest integer.

    Rounding is ``floor(re + 0.5)`` rather than truncation, so an integer
    image survives ``ifft2d(fft2d(image))`` unchanged despite float error.
    """

    if not isinstance(image, ComplexImage):
        raise UnsupportedOperationError(f"ifft2d expects a ComplexImage, got {type(image).__name__}")
    _require_power_of_two(image.width, image.height, "ifft2d")

    real = _inverse_rows_then_columns(image)
    result = IntImage(image.domain, INT_MIN, INT_MAX)
    result.write_array(np.floor(real + 0.5), source="ifft2d")
    return result


def ifft2d_double(image: ComplexImage) -> DoubleImage:
    """Inverse transform keeping the real part as floating point."""

    if not isinstance(image, ComplexImage):
        raise UnsupportedOperationError(f"ifft2d_double expects a ComplexImage, got {type(image).__name__}")
    _require_power_of_two(image.width, image.height, "ifft2d_double")

    result = DoubleImage(image.domain)
    result.write_array(_inverse_rows_then_columns(image), source="ifft2d_double")
    return result


def fft2d_shift(image: ComplexImage) -> None:
    """Swap quadrants in place so the zero frequency ends up in the centre."""

    pixels = image.pixels
    h2, w2 = image.height // 2, image.width // 2
    top_left = pixels[:h2, :w2].copy()
    pixels[:h2, :w2] = pixels[h2:2 * h2, w2:2 * w2]
    pixels[h2:2 * h2, w2:2 * w2] = top_left
    top_right = pixels[:h2, w2:2 * w2].copy()
    pixels[:h2, w2:2 * w2] = pixels[h2:2 * h2, :w2]
    pixels[h2:2 * h2, :w2] = top_right


def ifft2d_shift(image: ComplexImage) -> None:
    """Undo :func:`fft2d_shift` (the swap is its own inverse)."""

    fft2d_shift(image)


def spectrum_magnitude(spectrum: ComplexImage, *, log_scale: bool = True) -> IntImage:
    """Magnitude of a spectrum scaled to ``[0, 255]`` for display or saving.

    With ``log_scale`` the magnitudes go through ``log1p`` first, which is the
    usual way to make anything besides the DC term visible.
    """

    magnitude = np.abs(spectrum.pixels)
    if log_scale:
        magnitude = np.log1p(magnitude)
    peak = float(magnitude.max())
    scaled = magnitude * (255.0 / peak) if peak > 0 else np.zeros_like(magnitude)
    result = IntImage(spectrum.domain, 0, 255)
    result.write_array(np.floor(scaled + 0.5), source="spectrum_magnitude")
    return result


__all__ = [
    "fft1d",
    "fft2d",
    "fft2d_shift",
    "ifft1d",
    "ifft2d",
    "ifft2d_double",
    "ifft2d_shift",
    "is_power_of_two",
    "spectrum_magnitude",
]
