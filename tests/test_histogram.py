import numpy as np
import pytest

from pyimproc.errors import HistogramRangeError
from pyimproc.histogram import Histogram, create_empty_histogram, create_histogram, create_rgb_histograms
from pyimproc.image import IntImage, RgbImage


def test_histogram_has_one_bin_per_value_inclusive() -> None:
    histogram = create_empty_histogram(-2, 3)
    assert histogram.bins == 6
    assert histogram.range == (-2, 3)
    assert histogram.total() == 0


def test_create_histogram_counts_every_pixel() -> None:
    image = IntImage.from_array(np.array([[0, 1, 1], [3, 3, 3]]), min_range=0, max_range=3)
    histogram = create_histogram(image)

    assert [histogram.frequency(v) for v in range(4)] == [1, 2, 0, 3]
    assert histogram.total() == image.width * image.height
    assert histogram.format() == "0:1  1:2  2:0  3:3"


def test_histogram_access_outside_range_raises() -> None:
    histogram = Histogram(0, 3)
    with pytest.raises(HistogramRangeError, match="outside the histogram domain"):
        histogram.frequency(4)
    with pytest.raises(HistogramRangeError):
        histogram.increment(-1)
    with pytest.raises(HistogramRangeError):
        histogram.set_frequency(10, 1)


def test_histogram_rejects_pixels_beyond_declared_range() -> None:
    image = IntImage.allocate(2, 1, 0, 3)
    image.set_pixel_unchecked(0, 0, 7)
    with pytest.raises(HistogramRangeError):
        create_histogram(image)


def test_histogram_updates() -> None:
    histogram = Histogram(10, 12)
    histogram.increment(11)
    histogram.increment(11)
    histogram.set_frequency(12, 5)
    assert list(histogram.items()) == [(10, 0), (11, 2), (12, 5)]
    assert histogram.to_dict() == {"min_range": 10, "max_range": 12, "frequencies": [0, 2, 5]}


def test_rgb_histograms_are_per_channel() -> None:
    pixels = np.array([[[0, 1, 2], [0, 2, 2]]])
    image = RgbImage.from_array(pixels, min_range=0, max_range=2)
    red, green, blue = create_rgb_histograms(image)

    assert red.frequencies.tolist() == [2, 0, 0]
    assert green.frequencies.tolist() == [0, 1, 1]
    assert blue.frequencies.tolist() == [0, 0, 2]
