"""Frequency tables over an integer value range.

A histogram has one bin per value in ``[min_range..max_range]`` (both bounds
included). Unlike pixel writes there is no clamp: touching a value outside
the range raises :class:`HistogramRangeError`.
"""

from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np
from numpy.typing import NDArray

from pyimproc.errors import HistogramRangeError
from pyimproc.image import IntImage, RgbImage


class Histogram:
    def __init__(self, min_range: int, max_range: int) -> None:
        min_range, max_range = int(min_range), int(max_range)
        if max_range < min_range:
            raise HistogramRangeError(f"Invalid histogram range [{min_range}..{max_range}]")
        self.min_range = min_range
        self.max_range = max_range
        self.frequencies: NDArray = np.zeros(max_range - min_range + 1, dtype=np.int64)

    @property
    def range(self) -> Tuple[int, int]:
        return (self.min_range, self.max_range)

    @property
    def bins(self) -> int:
        return int(self.frequencies.size)

    def _offset(self, value: int) -> int:
        if value < self.min_range or value > self.max_range:
            raise HistogramRangeError(
                f"Attempt to access frequency for {value}, which is outside the histogram domain "
                f"[{self.min_range}..{self.max_range}]."
            )
        return int(value) - self.min_range

    def frequency(self, value: int) -> int:
        return int(self.frequencies[self._offset(value)])

    def set_frequency(self, value: int, frequency: int) -> None:
        self.frequencies[self._offset(value)] = int(frequency)

    def increment(self, value: int) -> None:
        self.frequencies[self._offset(value)] += 1

    def add_values(self, values: NDArray) -> None:
        """Increment the bin of every value in ``values``."""

        flat = np.asarray(values, dtype=np.int64).ravel()
        if flat.size == 0:
            return
        low, high = int(flat.min()), int(flat.max())
        if low < self.min_range:
            self._offset(low)
        if high > self.max_range:
            self._offset(high)
        self.frequencies += np.bincount(flat - self.min_range, minlength=self.bins)

    def items(self) -> Iterator[Tuple[int, int]]:
        for offset, count in enumerate(self.frequencies.tolist()):
            yield self.min_range + offset, int(count)

    def total(self) -> int:
        return int(self.frequencies.sum())

    def format(self) -> str:
        """``value:frequency`` pairs on a single line."""

        return "  ".join(f"{value}:{count}" for value, count in self.items())

    def to_dict(self) -> dict:
        return {
            "min_range": self.min_range,
            "max_range": self.max_range,
            "frequencies": self.frequencies.tolist(),
        }

    def __repr__(self) -> str:
        return f"Histogram(range=[{self.min_range}..{self.max_range}], total={self.total()})"


def create_empty_histogram(min_range: int, max_range: int) -> Histogram:
    return Histogram(min_range, max_range)


def create_histogram(image: IntImage) -> Histogram:
    """Histogram over the image's declared dynamic range.

    Note that this allocates one bin per representable value, so images with
    the default (full integer) range should have their range narrowed first.
    """

    histogram = Histogram(image.min_range, image.max_range)
    histogram.add_values(image.pixels)
    return histogram


def create_rgb_histograms(image: RgbImage) -> Tuple[Histogram, Histogram, Histogram]:
    """One histogram per channel, all over the image's dynamic range."""

    pixels = image.pixels
    histograms = []
    for channel in range(3):
        histogram = Histogram(image.min_range, image.max_range)
        histogram.add_values(pixels[..., channel])
        histograms.append(histogram)
    return tuple(histograms)


__all__ = ["Histogram", "create_empty_histogram", "create_histogram", "create_rgb_histograms"]
