"""Error types raised by pyimproc.

Contract violations (bad construction parameters, out-of-bounds access,
mismatched operands, unknown selectors) abort the running operation with an
:class:`ImageInvariantError`. Writing a pixel value outside an image's dynamic
range is *not* an error: the value is clamped and a warning is logged.
"""

from __future__ import annotations


class ImageInvariantError(ValueError):
    """An operation was asked to continue from an ill-defined state."""


class DomainError(ImageInvariantError):
    """Invalid image domain, out-of-bounds access or mismatched domains."""


class HistogramRangeError(ImageInvariantError):
    """Histogram bin queried or updated outside its value range."""


class QuackOverflowError(ImageInvariantError):
    """Push into a full bounded deque."""


class UnsupportedOperationError(ImageInvariantError):
    """Unknown selector or an input the algorithm cannot handle."""


class ReleasedImageError(ImageInvariantError):
    """Pixel storage accessed or released after it has already been released."""


class NetpbmFormatError(ValueError):
    """Malformed or unsupported netpbm file."""


__all__ = [
    "DomainError",
    "HistogramRangeError",
    "ImageInvariantError",
    "NetpbmFormatError",
    "QuackOverflowError",
    "ReleasedImageError",
    "UnsupportedOperationError",
]
