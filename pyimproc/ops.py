"""Pixelwise image algebra and lookup tables."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike

from pyimproc.errors import DomainError, UnsupportedOperationError
from pyimproc.image import ComplexImage, GenericImage, IntImage, RgbImage


class BinaryOp(Enum):
    """Binary operators understood by :func:`combine`."""
    MAX = "max"
    MIN = "min"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"


_UFUNCS = {
    BinaryOp.MAX: np.maximum,
    BinaryOp.MIN: np.minimum,
    BinaryOp.ADD: np.add,
    BinaryOp.SUBTRACT: np.subtract,
    BinaryOp.MULTIPLY: np.multiply,
}

OpLike = Union[str, BinaryOp, Callable]


def _resolve_op(op: OpLike, image: GenericImage):
    if callable(op) and not isinstance(op, BinaryOp):
        name = getattr(op, "__name__", "callable")
        return np.frompyfunc(op, 2, 1), name

    if isinstance(op, str):
        try:
            op = BinaryOp(op.lower())
        except ValueError as exc:
            choices = ", ".join(o.value for o in BinaryOp)
            raise UnsupportedOperationError(f"Unknown binary operation {op!r}. Choose from: {choices}.") from exc

    if not isinstance(op, BinaryOp):
        raise UnsupportedOperationError(f"Unsupported binary operation: {op!r}")

    if isinstance(image, ComplexImage) and op in (BinaryOp.MAX, BinaryOp.MIN):
        raise UnsupportedOperationError(f"{op.value} is not defined for complex images")

    return _UFUNCS[op], op.value


def combine(image_a: GenericImage, image_b: GenericImage, op: OpLike) -> GenericImage:
    """Apply ``op`` to every pair of matching pixels of two images.

    Both images must be of the same variant and have identical domains. The
    result takes the domain and dynamic range of ``image_a``; RGB images are
    combined channel by channel.
    """

    if type(image_a) is not type(image_b):
        raise UnsupportedOperationError(
            f"Cannot combine {type(image_a).__name__} with {type(image_b).__name__}"
        )
    image_a.domain.require_same(image_b.domain)
    func, name = _resolve_op(op, image_a)

    values = func(image_a.pixels, image_b.pixels)
    result = image_a.allocate_from()
    result.write_array(values, source=f"combine[{name}]")
    return result


def max_images(image_a: GenericImage, image_b: GenericImage) -> GenericImage:
    return combine(image_a, image_b, BinaryOp.MAX)


def min_images(image_a: GenericImage, image_b: GenericImage) -> GenericImage:
    return combine(image_a, image_b, BinaryOp.MIN)


def add_images(image_a: GenericImage, image_b: GenericImage) -> GenericImage:
    return combine(image_a, image_b, BinaryOp.ADD)


def subtract_images(image_a: GenericImage, image_b: GenericImage) -> GenericImage:
    return combine(image_a, image_b, BinaryOp.SUBTRACT)


def multiply_images(image_a: GenericImage, image_b: GenericImage) -> GenericImage:
    return combine(image_a, image_b, BinaryOp.MULTIPLY)


def multiply_complex(image_a: ComplexImage, image_b: ComplexImage) -> ComplexImage:
    """Pixelwise product of two spectra (e.g. for frequency-domain filtering)."""

    return combine(image_a, image_b, BinaryOp.MULTIPLY)


def _check_lut_range(image: GenericImage, size: int, caller: str) -> None:
    if image.min_range < 0:
        raise UnsupportedOperationError(f"{caller}: LUTs can only be applied to image with positive dynamic range.")
    if image.max_range > size:
        raise UnsupportedOperationError(
            f"{caller}: LUT must be the same size as the dynamic range of the image "
            f"(max_range={image.max_range}, LUT size={size})."
        )


def _check_lut_index(values: np.ndarray, size: int, caller: str) -> None:
    if values.size and (int(values.min()) < 0 or int(values.max()) >= size):
        raise DomainError(
            f"{caller}: pixel values [{int(values.min())}..{int(values.max())}] do not index a LUT of size {size}."
        )


def apply_lut(image: IntImage, table: Sequence[int] | ArrayLike) -> IntImage:
    """Map every grey value ``v`` to ``table[v]``.

    The result keeps the source domain and dynamic range; table entries
    outside that range are clamped on write with a warning.
    """

    lut = np.asarray(table, dtype=np.int64).ravel()
    _check_lut_range(image, int(lut.size), "apply_lut")
    pixels = image.pixels
    _check_lut_index(pixels, int(lut.size), "apply_lut")

    result = image.allocate_from()
    result.write_array(lut[pixels], source="apply_lut")
    return result


def apply_lut_rgb(image: RgbImage, table: ArrayLike) -> RgbImage:
    """Map each channel through its own column: ``(table[r][0], table[g][1], table[b][2])``.

    Like :func:`apply_lut`, the output keeps the source domain and range.
    """

    lut = np.asarray(table, dtype=np.int64)
    if lut.ndim != 2 or lut.shape[1] != 3:
        raise ValueError(f"apply_lut_rgb: table must have shape (n, 3), got {lut.shape}")
    size = int(lut.shape[0])
    _check_lut_range(image, size, "apply_lut_rgb")
    pixels = image.pixels
    _check_lut_index(pixels, size, "apply_lut_rgb")

    mapped = np.stack([lut[pixels[..., channel], channel] for channel in range(3)], axis=-1)
    result = image.allocate_from()
    result.write_array(mapped, source="apply_lut_rgb")
    return result


__all__ = [
    "BinaryOp",
    "add_images",
    "apply_lut",
    "apply_lut_rgb",
    "combine",
    "max_images",
    "min_images",
    "multiply_complex",
    "multiply_images",
    "subtract_images",
]
