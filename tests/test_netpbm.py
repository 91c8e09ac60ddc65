import logging

import numpy as np
import pytest

from pyimproc.errors import NetpbmFormatError
from pyimproc.image import ComplexImage, IntImage, RgbImage
from pyimproc.io.netpbm import (
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


def _grey(seed: int = 0, high: int = 256, shape=(5, 7)) -> IntImage:
    rng = np.random.default_rng(seed)
    return IntImage.from_array(rng.integers(0, high, size=shape), min_range=0, max_range=high - 1)


@pytest.mark.parametrize("raw", [True, False])
def test_pgm_round_trip(tmp_path, raw) -> None:
    image = _grey()
    path = tmp_path / "grey.pgm"
    save_pgm(image, path, raw=raw)

    loaded = load_int_image(path)
    np.testing.assert_array_equal(loaded.pixels, image.pixels)
    assert loaded.dynamic_range == (0, int(image.pixels.max()))
    assert path.read_bytes().startswith(b"P5" if raw else b"P2")


def test_sixteen_bit_raw_pgm_is_big_endian(tmp_path) -> None:
    image = IntImage.from_array(np.array([[0, 258], [65535, 1]]), min_range=0, max_range=65535)
    path = tmp_path / "deep.pgm"
    save_pgm(image, path)

    data = path.read_bytes()
    assert data.endswith(b"\x00\x00\x01\x02\xff\xff\x00\x01")
    np.testing.assert_array_equal(load_int_image(path).pixels, image.pixels)


@pytest.mark.parametrize("raw", [True, False])
def test_ppm_round_trip(tmp_path, raw) -> None:
    rng = np.random.default_rng(3)
    image = RgbImage.from_array(rng.integers(0, 256, size=(4, 9, 3)), min_range=0, max_range=255)
    path = tmp_path / "colour.ppm"
    save_ppm(image, path, raw=raw)

    loaded = load_rgb_image(path)
    np.testing.assert_array_equal(loaded.pixels, image.pixels)
    assert loaded.get_pixel(2, 1) == image.get_pixel(2, 1)


def test_ascii_ppm_lists_every_channel(tmp_path) -> None:
    image = RgbImage.from_array(np.array([[[1, 2, 3], [4, 5, 6]]]), min_range=0, max_range=255)
    path = tmp_path / "tiny.ppm"
    save_ppm(image, path, raw=False)
    assert path.read_text() == "P3\n2 1\n6\n1 2 3 4 5 6\n"


@pytest.mark.parametrize("raw", [True, False])
def test_pbm_polarity_and_round_trip(tmp_path, raw) -> None:
    # width 10 spans two packed bytes per row
    pixels = np.zeros((3, 10), dtype=np.int64)
    pixels[0, ::2] = 1
    pixels[2, 9] = 1
    image = IntImage.from_array(pixels, min_range=0, max_range=1)
    path = tmp_path / "bits.pbm"
    save_pbm(image, path, raw=raw)

    loaded = load_int_image(path)
    np.testing.assert_array_equal(loaded.pixels, pixels)
    assert loaded.dynamic_range == (0, 255)


def test_pbm_set_bit_is_black(tmp_path) -> None:
    path = tmp_path / "hand.pbm"
    path.write_bytes(b"P1\n# a comment line\n3 2\n1 0 1\n0 0 0\n")
    loaded = load_int_image(path)
    np.testing.assert_array_equal(loaded.pixels, [[0, 1, 0], [1, 1, 1]])


def test_pbm_save_treats_positive_values_as_white(tmp_path, caplog) -> None:
    image = IntImage.from_array(np.array([[-4, 0, 7]]))
    path = tmp_path / "signed.pbm"
    with caplog.at_level(logging.WARNING):
        save_pbm(image, path, raw=False)
    assert path.read_text() == "P1\n3 1\n1 1 0\n"
    assert any("clamped" in r.getMessage() for r in caplog.records)


def test_comments_are_skipped_anywhere_in_header(tmp_path) -> None:
    path = tmp_path / "commented.pgm"
    path.write_bytes(b"P2\n# created by hand\n2 # width\n2\n# maxval next\n9\n0 1\n# body comment\n8 9\n")
    decoded = read_netpbm(path)
    assert (decoded.magic, decoded.width, decoded.height, decoded.maxval) == (2, 2, 2, 9)
    np.testing.assert_array_equal(decoded.samples, [[0, 1], [8, 9]])
    assert decoded.kind == "pgm"
    assert not decoded.raw


def test_save_clamps_to_sample_range(tmp_path, caplog) -> None:
    image = IntImage.from_array(np.array([[-5, 70000]]))
    path = tmp_path / "clamped.pgm"
    with caplog.at_level(logging.WARNING):
        save_pgm(image, path, raw=False)
    assert path.read_text() == "P2\n2 1\n65535\n0 65535\n"
    assert any("clamped to [0,65535]" in r.getMessage() for r in caplog.records)


def test_all_zero_image_gets_maxval_one(tmp_path) -> None:
    path = tmp_path / "zeros.pgm"
    save_pgm(IntImage.allocate(2, 2, 0, 255), path, raw=False)
    assert path.read_text().splitlines()[2] == "1"


def test_save_complex_writes_real_part(tmp_path) -> None:
    image = ComplexImage.from_array(np.array([[1.4 + 9j, 2.6 - 1j]]))
    path = tmp_path / "complex.pgm"
    save_complex_image(image, path)
    assert path.read_text() == "P2\n2 1\n3\n1 3\n"


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError, match="failed to open file"):
        read_netpbm(tmp_path / "nope.pgm")


@pytest.mark.parametrize(
    "content, match",
    [
        (b"", "no magic number"),
        (b"X5\n1 1\n255\n\x00", "no magic number"),
        (b"P7\n1 1\n255\n\x00", "illegal magic number"),
        (b"P2\n", "no file dimensions"),
        (b"P2\n2 2\n", "no maximal value"),
        (b"P2\n2 2\n255\n1 2 3\n", "truncated"),
        (b"P5\n2 2\n255\n\x00\x01", "truncated"),
        (b"P2\n1 1\n7\n8\n", "Valid dynamic range is \\[0..7\\]"),
        (b"P2\n1 1\n255\nab\n", "non numeric"),
        (b"P1\n2 1\n0 2\n", "illegal character"),
        (b"P4\n9 2\n\x00\x00", "truncated"),
    ],
)
def test_corrupt_files_raise(tmp_path, content, match) -> None:
    path = tmp_path / "broken.pgm"
    path.write_bytes(content)
    with pytest.raises(NetpbmFormatError, match=match):
        read_netpbm(path)


def test_loader_checks_extension_and_magic(tmp_path) -> None:
    image = _grey()
    pgm = tmp_path / "grey.pgm"
    save_pgm(image, pgm)

    with pytest.raises(NetpbmFormatError, match="pgm or pbm"):
        load_int_image(tmp_path / "grey.ppm")
    with pytest.raises(NetpbmFormatError, match="ppm as extension"):
        load_rgb_image(pgm)

    disguised = tmp_path / "grey.pbm"
    disguised.write_bytes(pgm.read_bytes())
    with pytest.raises(NetpbmFormatError, match="illegal magic number"):
        load_int_image(disguised)


def test_save_dispatch_by_extension(tmp_path) -> None:
    image = IntImage.from_array(np.array([[0, 1]]), min_range=0, max_range=1)
    save_int_image(image, tmp_path / "a.pbm")
    save_int_image(image, tmp_path / "a.pgm")
    assert (tmp_path / "a.pbm").read_bytes().startswith(b"P4")
    assert (tmp_path / "a.pgm").read_bytes().startswith(b"P5")

    with pytest.raises(NetpbmFormatError):
        save_int_image(image, tmp_path / "a.png")
    with pytest.raises(NetpbmFormatError):
        save_rgb_image(RgbImage.allocate(1, 1), tmp_path / "a.pgm")
