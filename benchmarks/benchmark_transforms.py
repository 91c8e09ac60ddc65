"""
Benchmark the pure-Python transforms against their compiled counterparts.

Algorithms measured:
- Distance transforms (chamfer and exact Euclidean) vs scipy.ndimage
- Rectangular dilation vs cv2.dilate
- 2D FFT vs numpy.fft.fft2

Each row reports the best wall-clock time over a few repeats and whether the
outputs agree.
"""

import os
import sys
import time
from typing import Callable, List, Optional

import numpy as np

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pyimproc.distance import distance_transform
from pyimproc.image import IntImage
from pyimproc.morphology import dilate_rect
from pyimproc.spectral import fft2d
from pyimproc.utils.optional_deps import optional_import


class BenchmarkResult:
    """Container for benchmark results."""

    def __init__(self, name: str):
        self.name = name
        self.ours = 0.0
        self.reference: Optional[float] = None
        self.matches: Optional[bool] = None

    def __repr__(self):
        if self.reference is None:
            return f"{self.name}: ours={self.ours:.4f}s (no reference available)"
        return (f"{self.name}: "
                f"ours={self.ours:.4f}s, "
                f"reference={self.reference:.4f}s, "
                f"match={self.matches}")


def best_time(func: Callable[[], object], repeats: int = 3) -> float:
    best = float("inf")
    for _ in range(repeats):
        start = time.perf_counter()
        func()
        best = min(best, time.perf_counter() - start)
    return best


def random_mask(size: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    mask = (rng.random((size, size)) < 0.97).astype(np.int64)
    mask[0, 0] = 0
    return mask


def benchmark_distance(size: int) -> List[BenchmarkResult]:
    ndimage, _ = optional_import("scipy.ndimage")
    mask = random_mask(size)
    image = IntImage.from_array(mask, min_range=0, max_range=1)
    results = []

    for metric, reference in (("manhattan", "taxicab"), ("chessboard", "chessboard"), ("sqeuclid", None)):
        result = BenchmarkResult(f"distance_transform[{metric}] {size}x{size}")
        result.ours = best_time(lambda: distance_transform(image, metric))
        if ndimage is not None:
            if reference is None:
                expected_fn = lambda: np.rint(ndimage.distance_transform_edt(mask) ** 2).astype(np.int64)  # noqa: E731
            else:
                expected_fn = lambda: ndimage.distance_transform_cdt(mask, metric=reference)  # noqa: E731
            result.reference = best_time(expected_fn)
            result.matches = bool(np.array_equal(distance_transform(image, metric).pixels, expected_fn()))
        results.append(result)
    return results


def benchmark_dilation(size: int, kernel: int = 7) -> BenchmarkResult:
    cv2, _ = optional_import("cv2")
    rng = np.random.default_rng(1)
    pixels = rng.integers(0, 256, size=(size, size)).astype(np.uint8)
    image = IntImage.from_array(pixels, min_range=0, max_range=255)

    result = BenchmarkResult(f"dilate_rect {kernel}x{kernel} {size}x{size}")
    result.ours = best_time(lambda: dilate_rect(image, kernel, kernel))
    if cv2 is not None:
        structuring = np.ones((kernel, kernel), dtype=np.uint8)
        result.reference = best_time(lambda: cv2.dilate(pixels, structuring))
        result.matches = bool(np.array_equal(dilate_rect(image, kernel, kernel).pixels, cv2.dilate(pixels, structuring)))
    return result


def benchmark_fft(size: int) -> BenchmarkResult:
    rng = np.random.default_rng(2)
    pixels = rng.integers(0, 256, size=(size, size))
    image = IntImage.from_array(pixels)

    result = BenchmarkResult(f"fft2d {size}x{size}")
    result.ours = best_time(lambda: fft2d(image))
    result.reference = best_time(lambda: np.fft.fft2(pixels))
    result.matches = bool(np.allclose(fft2d(image).pixels, np.fft.fft2(pixels), atol=1e-6))
    return result


def main():
    print("\n" + "=" * 60)
    print("pyimproc transform benchmarks")
    print("=" * 60)

    for size in (64, 128):
        print(f"\nImage size {size}x{size}")
        for result in benchmark_distance(size):
            print(f"   {result}")
        print(f"   {benchmark_dilation(size)}")
        print(f"   {benchmark_fft(size)}")


if __name__ == "__main__":
    main()
