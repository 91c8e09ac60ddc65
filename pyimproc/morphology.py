"""Grey-value dilation and erosion with rectangular structuring elements.

A ``kw x kh`` rectangle is separable, so the 2D extremum is computed as a
horizontal sliding-window pass over every row followed by a vertical pass
over every column of the row result. Each 1D pass keeps a monotonic queue of
candidate indices (the :class:`Quack`), giving amortised O(1) work per pixel
regardless of the kernel size.

The window of output ``j`` covers ``[j - w//2, j + w - 1 - w//2]``, the same
anchor as ``cv2.dilate``/``cv2.erode`` with the default anchor. Near the image
border the window is clipped; no padding values are introduced.
"""

from __future__ import annotations

import logging
from typing import List, MutableSequence, Optional, Sequence

import numpy as np

from pyimproc.errors import QuackOverflowError, UnsupportedOperationError
from pyimproc.image import IntImage

logger = logging.getLogger(__name__)


class Quack:
    """Fixed-capacity double-ended queue on a circular buffer.

    ``memory`` may be passed to reuse an existing list of at least
    ``capacity`` slots; its contents are irrelevant.
    """

    __slots__ = ("_buffer", "_start", "_end", "_size", "capacity")

    def __init__(self, capacity: int, memory: Optional[MutableSequence[int]] = None) -> None:
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if memory is None:
            memory = [0] * capacity
        elif len(memory) < capacity:
            raise ValueError(f"memory of size {len(memory)} is too small for capacity {capacity}")
        self._buffer = memory
        self._start = 0
        self._end = 0
        self._size = 0
        self.capacity = capacity

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def is_full(self) -> bool:
        return self._size >= self.capacity

    def _require_items(self, what: str) -> None:
        if self._size == 0:
            raise IndexError(f"{what} from an empty quack")

    def peek_front(self) -> int:
        self._require_items("peek")
        return self._buffer[self._start]

    def peek_back(self) -> int:
        self._require_items("peek")
        return self._buffer[(self._end - 1) % self.capacity]

    def push_back(self, value: int) -> None:
        if self._size >= self.capacity:
            raise QuackOverflowError(f"attempted to insert into full quack. capacity: {self.capacity}")
        self._buffer[self._end] = value
        self._end = (self._end + 1) % self.capacity
        self._size += 1

    def push_front(self, value: int) -> None:
        if self._size >= self.capacity:
            raise QuackOverflowError(f"attempted to insert into full quack. capacity: {self.capacity}")
        self._start = (self._start - 1) % self.capacity
        self._buffer[self._start] = value
        self._size += 1

    def pop_back(self) -> int:
        value = self.peek_back()
        self._end = (self._end - 1) % self.capacity
        self._size -= 1
        return value

    def pop_front(self) -> int:
        value = self.peek_front()
        self._start = (self._start + 1) % self.capacity
        self._size -= 1
        return value

    def __repr__(self) -> str:
        items = [self._buffer[(self._start + i) % self.capacity] for i in range(self._size)]
        return f"Quack(capacity={self.capacity}, items={items})"


def sliding_window_extremum(
    src: Sequence[int],
    out: MutableSequence[int],
    n: int,
    w: int,
    is_dilation: bool,
    offset: int = 1,
    start: int = 0,
    workspace: Optional[MutableSequence[int]] = None,
) -> None:
    """Centred sliding-window maximum (``is_dilation``) or minimum.

    Element ``i`` of the logical sequence lives at ``src[i * offset + start]``
    and its result is written to ``out[i * offset + start]``, so the same
    routine walks rows (``offset=1``) and columns (``offset=width``).
    """

    quack = Quack(w, workspace)
    lead = w - 1 - w // 2

    # the queue holds indices whose values decrease (dilation) or increase
    # (erosion) from front to back; the front is the current extremum
    for i in range(n + lead):
        while not quack.is_empty() and quack.peek_front() <= i - w:
            quack.pop_front()

        if i < n:
            value = src[i * offset + start]
            while not quack.is_empty() and (src[quack.peek_back() * offset + start] <= value) == is_dilation:
                quack.pop_back()
            quack.push_back(i)

        j = i - lead
        if j >= 0:
            out[j * offset + start] = src[quack.peek_front() * offset + start]


def dilate_erode_rect(image: IntImage, kernel_width: int, kernel_height: int, is_dilation: bool) -> IntImage:
    """Dilation (``is_dilation=True``) or erosion with a ``kernel_width x kernel_height`` rectangle.

    The result has the domain and dynamic range of ``image``.
    """

    if not isinstance(image, IntImage):
        raise UnsupportedOperationError(f"dilate_erode_rect expects an IntImage, got {type(image).__name__}")
    kernel_width, kernel_height = int(kernel_width), int(kernel_height)
    if kernel_width < 1 or kernel_height < 1:
        raise ValueError(
            f"kernel dimensions must be >= 1, got kernel_width={kernel_width}, kernel_height={kernel_height}"
        )
    width, height = image.width, image.height
    logger.debug(
        "%s with %dx%d rectangle on %dx%d image",
        "dilation" if is_dilation else "erosion", kernel_width, kernel_height, width, height,
    )

    source: List[int] = image.pixels.ravel().tolist()
    out: List[int] = [0] * (width * height)
    workspace: List[int] = [0] * max(kernel_width, kernel_height)

    for row in range(height):
        sliding_window_extremum(source, out, width, kernel_width, is_dilation, 1, row * width, workspace)

    # the column pass reads row results in column order, so it needs its own copy
    row_pass = list(out)
    for col in range(width):
        sliding_window_extremum(row_pass, out, height, kernel_height, is_dilation, width, col, workspace)
    del row_pass

    result = image.allocate_from()
    result.write_array(np.asarray(out, dtype=np.int64).reshape(height, width), source="dilate_erode_rect")
    return result


def dilate_rect(image: IntImage, kernel_width: int, kernel_height: int) -> IntImage:
    """Grey-value dilation (sliding maximum) with a rectangular kernel."""

    return dilate_erode_rect(image, kernel_width, kernel_height, True)


def erode_rect(image: IntImage, kernel_width: int, kernel_height: int) -> IntImage:
    """Grey-value erosion (sliding minimum) with a rectangular kernel."""

    return dilate_erode_rect(image, kernel_width, kernel_height, False)


__all__ = ["Quack", "dilate_erode_rect", "dilate_rect", "erode_rect", "sliding_window_extremum"]
