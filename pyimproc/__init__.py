"""pyimproc - classic image processing on coordinate-addressable images.

The core (domains, images, histograms, pixelwise algebra, distance
transforms, FFT, morphology) depends on NumPy only. File formats beyond
netpbm, viewers and YAML configs pull in OpenCV, matplotlib, Pillow and
PyYAML, so those exports are loaded lazily.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    # Modules
    "config",
    "io",
    "pipelines",
    "reporting",
    "utils",
    "visualization",
    # Core types
    "ImageDomain",
    "GenericImage",
    "IntImage",
    "DoubleImage",
    "RgbImage",
    "ComplexImage",
    "Histogram",
    # Algorithms
    "BinaryOp",
    "combine",
    "apply_lut",
    "apply_lut_rgb",
    "create_histogram",
    "create_rgb_histograms",
    "DistanceMetric",
    "distance_transform",
    "fft2d",
    "ifft2d",
    "ifft2d_double",
    "fft2d_shift",
    "ifft2d_shift",
    "dilate_rect",
    "erode_rect",
    # I/O and display
    "load_int_image",
    "save_int_image",
    "load_rgb_image",
    "save_rgb_image",
    "display_image",
]


_LAZY_SUBMODULES = {
    "config",
    "io",
    "pipelines",
    "reporting",
    "utils",
    "visualization",
}

_LAZY_EXPORTS = {
    "ImageDomain": ("domain", "ImageDomain"),
    "GenericImage": ("image", "GenericImage"),
    "IntImage": ("image", "IntImage"),
    "DoubleImage": ("image", "DoubleImage"),
    "RgbImage": ("image", "RgbImage"),
    "ComplexImage": ("image", "ComplexImage"),
    "Histogram": ("histogram", "Histogram"),
    "create_histogram": ("histogram", "create_histogram"),
    "create_rgb_histograms": ("histogram", "create_rgb_histograms"),
    "BinaryOp": ("ops", "BinaryOp"),
    "combine": ("ops", "combine"),
    "apply_lut": ("ops", "apply_lut"),
    "apply_lut_rgb": ("ops", "apply_lut_rgb"),
    "DistanceMetric": ("distance", "DistanceMetric"),
    "distance_transform": ("distance", "distance_transform"),
    "fft2d": ("spectral", "fft2d"),
    "ifft2d": ("spectral", "ifft2d"),
    "ifft2d_double": ("spectral", "ifft2d_double"),
    "fft2d_shift": ("spectral", "fft2d_shift"),
    "ifft2d_shift": ("spectral", "ifft2d_shift"),
    "dilate_rect": ("morphology", "dilate_rect"),
    "erode_rect": ("morphology", "erode_rect"),
    "load_int_image": ("io.netpbm", "load_int_image"),
    "save_int_image": ("io.netpbm", "save_int_image"),
    "load_rgb_image": ("io.netpbm", "load_rgb_image"),
    "save_rgb_image": ("io.netpbm", "save_rgb_image"),
    "display_image": ("visualization.viewer", "display_image"),
}


def __getattr__(name: str) -> Any:  # pragma: no cover - thin delegation
    if name in _LAZY_SUBMODULES:
        module = import_module(f"{__name__}.{name}")
        globals()[name] = module
        return module

    target = _LAZY_EXPORTS.get(name)
    if target is not None:
        module_name, attr = target
        module = import_module(f"{__name__}.{module_name}")
        value = getattr(module, attr)
        globals()[name] = value
        return value

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
