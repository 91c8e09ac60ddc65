"""Image file input/output."""

from __future__ import annotations

from .netpbm import (
    NetpbmData,
    load_int_image,
    load_rgb_image,
    read_netpbm,
    save_complex_image,
    save_int_image,
    save_pbm,
    save_pgm,
    save_ppm,
    save_rgb_image,
)

__all__ = [
    "NetpbmData",
    "load_int_image",
    "load_rgb_image",
    "read_netpbm",
    "save_complex_image",
    "save_int_image",
    "save_pbm",
    "save_pgm",
    "save_ppm",
    "save_rgb_image",
]
