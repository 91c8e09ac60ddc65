"""Netpbm (PBM/PGM/PPM) reading and writing.

Supported variants: P1/P4 (bitmap), P2/P5 (grey map, 8 or 16 bit) and P3/P6
(pixel map). Raw 16-bit samples are big-endian as in the Netpbm format
definition. Row 0 of the file is the first row of the image storage.

PBM polarity follows the format: a set bit is black. Black loads as pixel 0
and white as pixel 1; on save, pixels ``> 0`` are written white and pixels
``<= 0`` black.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray

from pyimproc.errors import NetpbmFormatError
from pyimproc.image import ComplexImage, IntImage, RgbImage, complex_real_to_int_image

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MAX_SAMPLE = 65535
_WHITESPACE = b" \t\r\n\v\f"
_KIND_BY_MAGIC = {1: "pbm", 4: "pbm", 2: "pgm", 5: "pgm", 3: "ppm", 6: "ppm"}


@dataclass
class NetpbmData:
    """Decoded raster of a netpbm file.

    ``samples`` has shape ``(height, width)`` for PBM/PGM and
    ``(height, width, 3)`` for PPM. For PBM the samples are already mapped to
    pixel values (black=0, white=1) and ``maxval`` is 1.
    """

    magic: int
    width: int
    height: int
    maxval: int
    samples: NDArray

    @property
    def kind(self) -> str:
        return _KIND_BY_MAGIC[self.magic]

    @property
    def raw(self) -> bool:
        return self.magic >= 4


class _HeaderReader:
    def __init__(self, data: bytes, caller: str) -> None:
        self.data = data
        self.pos = 0
        self.caller = caller

    def _skip_space_and_comments(self) -> None:
        data = self.data
        while self.pos < len(data):
            ch = data[self.pos:self.pos + 1]
            if ch == b"#":
                end = data.find(b"\n", self.pos)
                if end < 0:
                    raise NetpbmFormatError(f"{self.caller}: corrupt file (unterminated comment).")
                self.pos = end + 1
            elif ch in _WHITESPACE:
                self.pos += 1
            else:
                return

    def token(self, what: str) -> bytes:
        self._skip_space_and_comments()
        start = self.pos
        data = self.data
        while self.pos < len(data) and data[self.pos:self.pos + 1] not in _WHITESPACE:
            self.pos += 1
        if start == self.pos:
            raise NetpbmFormatError(f"{self.caller}: corrupt file: no {what} found.")
        return data[start:self.pos]

    def int_token(self, what: str) -> int:
        tok = self.token(what)
        try:
            return int(tok)
        except ValueError as exc:
            raise NetpbmFormatError(f"{self.caller}: corrupt file: no {what} found (got {tok!r}).") from exc

    def raster_start(self) -> int:
        # exactly one whitespace byte separates the header from raw data
        if self.pos < len(self.data):
            return self.pos + 1
        return self.pos


def _parse_magic(data: bytes, caller: str) -> int:
    if len(data) < 2 or data[0:1] != b"P" or not data[1:2].isdigit():
        raise NetpbmFormatError(f"{caller}: corrupt file: no magic number found.")
    magic = int(data[1:2])
    if magic not in _KIND_BY_MAGIC:
        raise NetpbmFormatError(f"{caller}: illegal magic number P{magic} found.")
    return magic


def _ascii_samples(reader: _HeaderReader, count: int, maxval: int) -> NDArray:
    caller = reader.caller
    body = reader.data[reader.pos:]
    lines = [line.split(b"#", 1)[0] for line in body.splitlines()]
    tokens = b" ".join(lines).split()
    if len(tokens) < count:
        raise NetpbmFormatError(f"{caller}: corrupt file, file is truncated ({len(tokens)} of {count} samples).")
    try:
        values = np.array([int(tok) for tok in tokens[:count]], dtype=np.int64)
    except ValueError as exc:
        raise NetpbmFormatError(f"{caller}: corrupt file: non numeric data found.") from exc
    bad = (values < 0) | (values > maxval)
    if np.any(bad):
        value = int(values[np.argmax(bad)])
        raise NetpbmFormatError(
            f"{caller}: pixel with value {value} found. Valid dynamic range is [0..{maxval}]."
        )
    return values


def _raw_samples(reader: _HeaderReader, count: int, maxval: int) -> NDArray:
    start = reader.raster_start()
    dtype = np.dtype(">u2") if maxval > 255 else np.dtype(np.uint8)
    nbytes = count * dtype.itemsize
    if len(reader.data) - start < nbytes:
        raise NetpbmFormatError(f"{reader.caller}: corrupt file, file is truncated.")
    values = np.frombuffer(reader.data, dtype=dtype, count=count, offset=start).astype(np.int64)
    if np.any(values > maxval):
        raise NetpbmFormatError(
            f"{reader.caller}: pixel with value {int(values.max())} found. Valid dynamic range is [0..{maxval}]."
        )
    return values


def _pbm_samples(reader: _HeaderReader, width: int, height: int, raw: bool) -> NDArray:
    caller = reader.caller
    if raw:
        start = reader.raster_start()
        row_bytes = (width + 7) // 8
        if len(reader.data) - start < row_bytes * height:
            raise NetpbmFormatError(f"{caller}: corrupt file, file is truncated.")
        packed = np.frombuffer(reader.data, dtype=np.uint8, count=row_bytes * height, offset=start)
        bits = np.unpackbits(packed.reshape(height, row_bytes), axis=1)[:, :width]
    else:
        body = reader.data[reader.pos:]
        digits = bytes(ch for ch in body if ch not in _WHITESPACE)
        count = width * height
        if len(digits) < count:
            raise NetpbmFormatError(f"{caller}: corrupt file, file is truncated.")
        digits = digits[:count]
        if digits.translate(None, b"01"):
            raise NetpbmFormatError(f"{caller}: illegal character found.")
        bits = (np.frombuffer(digits, dtype=np.uint8) - ord("0")).reshape(height, width)
    return 1 - bits.astype(np.int64)


def read_netpbm(path: PathLike) -> NetpbmData:
    """Decode any P1..P6 file."""

    caller = "read_netpbm"
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"{caller}: failed to open file '{path}'.")
    data = path.read_bytes()
    magic = _parse_magic(data, caller)
    reader = _HeaderReader(data, caller)
    reader.pos = 2

    width = reader.int_token("file dimensions")
    height = reader.int_token("file dimensions")
    if width < 1 or height < 1:
        raise NetpbmFormatError(f"{caller}: corrupt file: invalid dimensions {width}x{height}.")

    if magic in (1, 4):
        samples = _pbm_samples(reader, width, height, raw=magic == 4)
        return NetpbmData(magic, width, height, 1, samples)

    maxval = reader.int_token("maximal value")
    if maxval < 0 or maxval > MAX_SAMPLE:
        raise NetpbmFormatError(
            f"{caller}: corrupt file: maximum value found is {maxval} (must be in range [0..{MAX_SAMPLE}])."
        )
    channels = 3 if magic in (3, 6) else 1
    count = width * height * channels
    if magic in (2, 3):
        values = _ascii_samples(reader, count, maxval)
    else:
        values = _raw_samples(reader, count, maxval)
    shape = (height, width, 3) if channels == 3 else (height, width)
    return NetpbmData(magic, width, height, maxval, values.reshape(shape))


def _extension(path: PathLike, caller: str) -> str:
    suffix = Path(path).suffix.lower().lstrip(".")
    if not suffix:
        raise NetpbmFormatError(f"{caller}: filename '{path}' has no extension.")
    return suffix


# ----------------------------------------------------------------------
# loading


def load_int_image(path: PathLike) -> IntImage:
    """Load a ``.pgm`` or ``.pbm`` file.

    PGM images get dynamic range ``[0, maxval]``; PBM images ``[0, 255]``.
    """

    caller = "load_int_image"
    ext = _extension(path, caller)
    if ext not in ("pgm", "pbm"):
        raise NetpbmFormatError(f"{caller}: filename '{path}' must have either pgm or pbm as extension.")
    decoded = read_netpbm(path)
    if decoded.kind != ext:
        raise NetpbmFormatError(
            f"{caller}: illegal magic number P{decoded.magic} found in '{path}' (expected a {ext.upper()} file)."
        )
    max_range = 255 if decoded.kind == "pbm" else decoded.maxval
    return IntImage.from_array(decoded.samples, min_range=0, max_range=max_range)


def load_rgb_image(path: PathLike) -> RgbImage:
    """Load a ``.ppm`` file with dynamic range ``[0, maxval]``."""

    caller = "load_rgb_image"
    if _extension(path, caller) != "ppm":
        raise NetpbmFormatError(f"{caller}: filename '{path}' must have ppm as extension.")
    decoded = read_netpbm(path)
    if decoded.kind != "ppm":
        raise NetpbmFormatError(f"{caller}: illegal magic number P{decoded.magic} found. Only P3 and P6 are valid PPM files.")
    return RgbImage.from_array(decoded.samples, min_range=0, max_range=decoded.maxval)


# ----------------------------------------------------------------------
# saving


def _clamped_samples(pixels: NDArray, path: PathLike, caller: str) -> NDArray:
    low, high = int(pixels.min()), int(pixels.max())
    if low < 0 or high > MAX_SAMPLE:
        logger.warning(
            "%s: range of image %s is [%d,%d]. Saved image values are clamped to [%d,%d].",
            caller, path, low, high, max(low, 0), min(high, MAX_SAMPLE),
        )
    return np.clip(pixels, 0, MAX_SAMPLE).astype(np.int64)


def _write_samples(path: PathLike, magic: int, samples: NDArray) -> None:
    height, width = samples.shape[:2]
    # maxval 0 is not accepted by most readers
    maxval = max(1, int(samples.max()))
    header = f"P{magic}\n{width} {height}\n{maxval}\n".encode("ascii")
    if magic in (5, 6):
        dtype = ">u2" if maxval > 255 else np.uint8
        body = samples.astype(dtype).tobytes()
    else:
        flat_rows = samples.reshape(height, -1)
        body = "".join(" ".join(str(v) for v in row) + "\n" for row in flat_rows.tolist()).encode("ascii")
    Path(path).write_bytes(header + body)


def save_pgm(image: IntImage, path: PathLike, *, raw: bool = True) -> None:
    """Write a P5 (``raw``) or P2 file; values are clamped to ``[0, 65535]``."""

    samples = _clamped_samples(image.pixels, path, "save_pgm")
    _write_samples(path, 5 if raw else 2, samples)


def save_ppm(image: RgbImage, path: PathLike, *, raw: bool = True) -> None:
    """Write a P6 (``raw``) or P3 file; every channel is clamped to ``[0, 65535]``."""

    samples = _clamped_samples(image.pixels, path, "save_ppm")
    _write_samples(path, 6 if raw else 3, samples)


def save_pbm(image: IntImage, path: PathLike, *, raw: bool = True) -> None:
    """Write a P4 (``raw``) or P1 file: pixels ``> 0`` white, the rest black."""

    pixels = image.pixels
    low, high = int(pixels.min()), int(pixels.max())
    if low < 0 or high > 1:
        logger.warning(
            "save_pbm: range of image %s is [%d,%d]. Saved image values are clamped to [%d,%d].",
            path, low, high, max(low, 0), min(high, 1),
        )
    height, width = pixels.shape
    black = (pixels <= 0).astype(np.uint8)
    if raw:
        body = np.packbits(black, axis=1).tobytes()
        header = f"P4\n{width} {height}\n".encode("ascii")
    else:
        body = "".join(" ".join(str(v) for v in row) + "\n" for row in black.tolist()).encode("ascii")
        header = f"P1\n{width} {height}\n".encode("ascii")
    Path(path).write_bytes(header + body)


def save_int_image(image: IntImage, path: PathLike) -> None:
    """Raw PGM or PBM, chosen by the file extension."""

    caller = "save_int_image"
    ext = _extension(path, caller)
    if ext == "pgm":
        save_pgm(image, path, raw=True)
    elif ext == "pbm":
        save_pbm(image, path, raw=True)
    else:
        raise NetpbmFormatError(f"{caller}: filename '{path}' must have either pgm or pbm as extension.")


def save_rgb_image(image: RgbImage, path: PathLike) -> None:
    caller = "save_rgb_image"
    if _extension(path, caller) != "ppm":
        raise NetpbmFormatError(f"{caller}: filename '{path}' must have ppm as extension.")
    save_ppm(image, path, raw=True)


def save_complex_image(image: ComplexImage, path: PathLike, *, raw: bool = False) -> None:
    """Save the rounded real parts as a PGM (ascii by default)."""

    with complex_real_to_int_image(image) as real_values:
        save_pgm(real_values, path, raw=raw)


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
