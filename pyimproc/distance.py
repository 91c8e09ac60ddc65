"""Distance transforms of binary (or labelled) integer images.

Four metrics are supported:

- ``MANHATTAN`` / ``CHESSBOARD``: two-pass chamfer transforms (Rosenfeld and
  Pfaltz) with the 4- and 8-neighbour masks.
- ``SQEUCLID`` / ``EUCLID``: the exact Euclidean transform of Meijster,
  Roerdink and Hesselink, either squared or square-rooted and rounded with
  ``+0.5``.

Pixels equal to ``foreground`` receive their distance to the nearest other
pixel; every other pixel is background and receives 0.

References
----------
A. Meijster, J.B.T.M. Roerdink and W.H. Hesselink, "A general algorithm for
computing distance transforms in linear time", Mathematical Morphology and
its Applications to Image and Signal Processing, Kluwer, 2000, pp. 331-340.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pyimproc.errors import UnsupportedOperationError
from pyimproc.image import IntImage

logger = logging.getLogger(__name__)


class DistanceMetric(Enum):
    MANHATTAN = "manhattan"
    CHESSBOARD = "chessboard"
    EUCLID = "euclid"
    SQEUCLID = "sqeuclid"


Offsets = Tuple[Tuple[int, int], ...]

# Offsets (dx, dy) of the neighbours already visited by a top-down,
# left-to-right raster scan. The backward pass uses them mirrored.
_CHAMFER_MASKS = {
    DistanceMetric.MANHATTAN: ((-1, 0), (0, -1)),
    DistanceMetric.CHESSBOARD: ((-1, -1), (0, -1), (1, -1), (-1, 0)),
}
_VERTICAL_MASK: Offsets = ((0, -1),)


def resolve_metric(metric: Union[str, DistanceMetric]) -> DistanceMetric:
    if isinstance(metric, DistanceMetric):
        return metric
    if isinstance(metric, str):
        try:
            return DistanceMetric(metric.strip().lower())
        except ValueError:
            pass
    raise UnsupportedOperationError(
        f"distance_transform: unrecognized metric value {metric!r} "
        "(must be MANHATTAN, CHESSBOARD, EUCLID, or SQEUCLID)."
    )


def _mask_transform(values: NDArray, foreground: int, mask: Offsets) -> Tuple[List[List[int]], int]:
    """Two raster passes with ``mask``; returns the rows and the sentinel."""

    height, width = values.shape
    infinity = width + height + 1
    is_foreground = (values == foreground).tolist()
    dt = [[0] * width for _ in range(height)]

    for y in range(height):
        row = dt[y]
        fg_row = is_foreground[y]
        for x in range(width):
            if not fg_row[x]:
                continue
            best = infinity
            for dx, dy in mask:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height:
                    nb = dt[ny][nx]
                    if nb < best:
                        best = nb
            row[x] = 1 + best if best < infinity else infinity

    for y in range(height - 1, -1, -1):
        row = dt[y]
        for x in range(width - 1, -1, -1):
            here = row[x]
            if here <= 0:
                continue
            best = infinity
            for dx, dy in mask:
                nx, ny = x - dx, y - dy
                if 0 <= nx < width and 0 <= ny < height:
                    nb = dt[ny][nx]
                    if nb < best:
                        best = nb
            best = 1 + best if best < infinity else infinity
            if best < here:
                row[x] = best

    return dt, infinity


def _chamfer(image: IntImage, foreground: int, mask: Offsets) -> IntImage:
    rows, infinity = _mask_transform(image.pixels, foreground, mask)
    result = IntImage(image.domain, 0, infinity)
    result.write_array(np.asarray(rows, dtype=np.int64), source="distance_transform")
    return result


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""

    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _lower_envelope_row(g: Sequence[int], take_square_root: bool) -> List[int]:
    width = len(g)
    s = [0] * width  # apex columns
    t = [0] * width  # first column where the apex in s[q] is the minimum
    q = 0

    for x in range(1, width):
        gx = g[x]
        while q >= 0 and (t[q] - s[q]) ** 2 + g[s[q]] > (t[q] - x) ** 2 + gx:
            q -= 1
        if q < 0:
            q = 0
            s[0] = x
        else:
            sq = s[q]
            w = 1 + _trunc_div(x * x - sq * sq + gx - g[sq], 2 * (x - sq))
            if w < width:
                q += 1
                s[q] = x
                t[q] = w

    row = [0] * width
    for x in range(width - 1, -1, -1):
        squared = (x - s[q]) ** 2 + g[s[q]]
        row[x] = int(0.5 + math.sqrt(squared)) if take_square_root else squared
        if x == t[q]:
            q -= 1
    return row


def _meijster_roerdink_hesselink(image: IntImage, foreground: int, take_square_root: bool) -> IntImage:
    domain = image.domain
    width, height = domain.width, domain.height
    infinity = width * width + height * height

    image.translate(-domain.min_x, -domain.min_y)
    try:
        vertical, _ = _mask_transform(image.pixels, foreground, _VERTICAL_MASK)
        squared = [[v * v if v < height else infinity for v in row] for row in vertical]
        del vertical

        rows = [_lower_envelope_row(g, take_square_root) for g in squared]
        result = IntImage.allocate(width, height, 0, infinity)
        result.write_array(np.asarray(rows, dtype=np.int64), source="distance_transform")
    finally:
        image.translate(domain.min_x, domain.min_y)

    result.translate(domain.min_x, domain.min_y)
    return result


def distance_transform(
    image: IntImage,
    metric: Union[str, DistanceMetric] = DistanceMetric.EUCLID,
    foreground: int = 1,
) -> IntImage:
    """Distance of every ``foreground`` pixel to the nearest background pixel.

    Parameters
    ----------
    image:
        Source image; it is not modified (its domain is translated to the
        origin for the duration of the Euclidean transforms and restored).
    metric:
        A :class:`DistanceMetric` or its name (``"euclid"``, ...).
    foreground:
        Pixel value considered foreground.

    Returns
    -------
    IntImage
        Over the same domain as ``image``. Chamfer results have dynamic range
        ``[0, width + height + 1]``, Euclidean ones ``[0, width**2 + height**2]``.
        Foreground pixels with no reachable background hold the sentinel.
    """

    if not isinstance(image, IntImage):
        raise UnsupportedOperationError(
            f"distance_transform expects an IntImage, got {type(image).__name__}"
        )
    metric = resolve_metric(metric)
    foreground = int(foreground)
    logger.debug(
        "distance_transform metric=%s foreground=%d on %dx%d image",
        metric.value, foreground, image.width, image.height,
    )

    if metric in _CHAMFER_MASKS:
        return _chamfer(image, foreground, _CHAMFER_MASKS[metric])
    return _meijster_roerdink_hesselink(image, foreground, metric is DistanceMetric.EUCLID)


__all__ = ["DistanceMetric", "distance_transform", "resolve_metric"]
