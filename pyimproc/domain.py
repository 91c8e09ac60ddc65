"""Rectangular coordinate domains.

An image in pyimproc is defined over ``[min_x..max_x] x [min_y..max_y]`` with
both bounds included, so coordinates may be negative or start anywhere.
Pixel storage itself is always addressed from ``(0, 0)``; the domain only
describes the logical coordinate frame.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyimproc.errors import DomainError


@dataclass(frozen=True)
class ImageDomain:
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    def __post_init__(self) -> None:
        width = 1 + self.max_x - self.min_x
        height = 1 + self.max_y - self.min_y
        if width <= 0 or height <= 0:
            raise DomainError(
                f"Attempting to initialise image with width={width}, height={height}. "
                "Image dimensions must be greater than 0."
            )

    @classmethod
    def from_size(cls, width: int, height: int) -> "ImageDomain":
        """Domain ``[0..width) x [0..height)``."""

        return cls(0, int(width) - 1, 0, int(height) - 1)

    @property
    def width(self) -> int:
        return 1 + self.max_x - self.min_x

    @property
    def height(self) -> int:
        return 1 + self.max_y - self.min_y

    @property
    def shape(self) -> tuple[int, int]:
        """Storage shape in numpy order, ``(height, width)``."""

        return (self.height, self.width)

    def values(self) -> tuple[int, int, int, int]:
        return (self.min_x, self.max_x, self.min_y, self.max_y)

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def contains_index(self, ix: int, iy: int) -> bool:
        return 0 <= ix < self.width and 0 <= iy < self.height

    def check(self, x: int, y: int) -> None:
        if not self.contains(x, y):
            raise DomainError(
                f"Attempt to access pixel (x,y)=({x},{y}) which is outside the image domain "
                f"[{self.min_x}..{self.max_x}]x[{self.min_y}..{self.max_y}]."
            )

    def check_index(self, ix: int, iy: int) -> None:
        if not self.contains_index(ix, iy):
            raise DomainError(
                f"Attempt to access pixel (x,y)=({ix},{iy}) which is outside the image of "
                f"{self.width}x{self.height}"
            )

    def translated(self, dx: int, dy: int) -> "ImageDomain":
        return ImageDomain(self.min_x + dx, self.max_x + dx, self.min_y + dy, self.max_y + dy)

    def flipped_horizontal(self) -> "ImageDomain":
        """Mirror the x bounds around the origin."""

        return ImageDomain(-self.max_x, -self.min_x, self.min_y, self.max_y)

    def flipped_vertical(self) -> "ImageDomain":
        """Mirror the y bounds around the origin."""

        return ImageDomain(self.min_x, self.max_x, -self.max_y, -self.min_y)

    def padded(self, top: int, right: int, bottom: int, left: int) -> "ImageDomain":
        return ImageDomain(self.min_x - left, self.max_x + right, self.min_y - top, self.max_y + bottom)

    def require_same(self, other: "ImageDomain") -> None:
        """Raise unless ``other`` has exactly the same four bounds."""

        if self != other:
            raise DomainError(
                "Images do not have the same domain: "
                f"[{self.min_x}..{self.max_x}]x[{self.min_y}..{self.max_y}] vs "
                f"[{other.min_x}..{other.max_x}]x[{other.min_y}..{other.max_y}]."
            )


__all__ = ["ImageDomain"]
