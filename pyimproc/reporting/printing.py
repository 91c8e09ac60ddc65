"""Plain-text and LaTeX renderings of small images (handy in notebooks and slides)."""

from __future__ import annotations

import sys
from typing import Callable, List, Optional, TextIO

from pyimproc.histogram import Histogram
from pyimproc.image import ComplexImage, DoubleImage, GenericImage, RgbImage


def format_value(image: GenericImage, value) -> str:
    """Render one pixel value the way the buffer/table dumps do."""

    if isinstance(image, RgbImage):
        r, g, b = value
        return f"({r},{g},{b})"
    if isinstance(image, ComplexImage):
        return f"{value.real:.2f}{value.imag:+.2f}i"
    if isinstance(image, DoubleImage):
        return f"{value:.2f}"
    return str(value)


def _rows(image: GenericImage, fmt: Callable[[object], str]) -> List[List[str]]:
    d = image.domain
    return [[fmt(image.get_pixel(x, y)) for x in range(d.min_x, d.max_x + 1)] for y in range(d.min_y, d.max_y + 1)]


def format_buffer(image: GenericImage) -> str:
    """One line per image row (``min_y`` first), values separated by spaces."""

    rows = _rows(image, lambda v: format_value(image, v))
    return "".join(" ".join(row) + "\n" for row in rows)


def format_latex_table(image: GenericImage) -> str:
    """LaTeX ``tabular`` with x coordinates as header, y coordinates as first column.

    The pixel at the logical origin ``(0, 0)`` is set in bold.
    """

    d = image.domain
    lines = ["\\begin{tabular}{|c|" + "|c" * d.width + "|}", "\\hline"]
    lines.append("(x,y)" + "".join(f"&{x}" for x in range(d.min_x, d.max_x + 1)) + "\\\\")
    lines.extend(["\\hline", "\\hline"])
    for y in range(d.min_y, d.max_y + 1):
        cells = []
        for x in range(d.min_x, d.max_x + 1):
            text = format_value(image, image.get_pixel(x, y))
            cells.append(f"&{{\\bf {text}}}" if (x, y) == (0, 0) else f"&{text}")
        lines.append(f"{y}" + "".join(cells) + "\\\\\\hline")
    lines.append("\\end{tabular}")
    return "\n".join(lines) + "\n"


def print_buffer(image: GenericImage, out: Optional[TextIO] = None) -> None:
    (out or sys.stdout).write(format_buffer(image))


def print_latex_table(image: GenericImage, out: Optional[TextIO] = None) -> None:
    (out or sys.stdout).write(format_latex_table(image))


def print_histogram(histogram: Histogram, out: Optional[TextIO] = None) -> None:
    (out or sys.stdout).write(histogram.format() + "\n")


__all__ = [
    "format_buffer",
    "format_latex_table",
    "format_value",
    "print_buffer",
    "print_histogram",
    "print_latex_table",
]
