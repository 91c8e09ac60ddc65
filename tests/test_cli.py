import json

import numpy as np
import pytest

import pyimproc.cli as cli
from pyimproc.cli import main
from pyimproc.image import IntImage
from pyimproc.io.netpbm import load_int_image, save_pgm


def _gradient(path):
    pixels = np.tile(np.arange(0, 256, 32), (4, 1))
    save_pgm(IntImage.from_array(pixels, min_range=0, max_range=255), path)
    return pixels


def test_cli_threshold_writes_three_bitmaps(tmp_path, capsys):
    pixels = _gradient(tmp_path / "ramp.pgm")
    out_dir = tmp_path / "thresholds"

    code = main(["threshold", str(tmp_path / "ramp.pgm"), "--out-dir", str(out_dir)])

    assert code == 0
    printed = capsys.readouterr().out.split()
    assert printed == [str(out_dir / f"threshold{level}.pbm") for level in (64, 128, 192)]
    for level in (64, 128, 192):
        bitmap = load_int_image(out_dir / f"threshold{level}.pbm")
        np.testing.assert_array_equal(bitmap.pixels, (pixels >= level).astype(int))


def test_cli_threshold_snapshots_every_image(tmp_path):
    pytest.importorskip("PIL")
    _gradient(tmp_path / "ramp.pgm")
    shots = tmp_path / "shots"

    code = main(["threshold", str(tmp_path / "ramp.pgm"), "--out-dir", str(tmp_path), "--snapshot-dir", str(shots)])

    assert code == 0
    assert sorted(p.name for p in shots.iterdir()) == ["view1.png", "view2.png", "view3.png", "view4.png"]


def test_cli_dt_and_morph(tmp_path):
    mask = np.ones((5, 5), dtype=int)
    mask[2, 2] = 0
    save_pgm(IntImage.from_array(mask, min_range=0, max_range=1), tmp_path / "mask.pgm")

    assert main(["dt", str(tmp_path / "mask.pgm"), "--metric", "chessboard", "--output", str(tmp_path / "dt.pgm")]) == 0
    dt = load_int_image(tmp_path / "dt.pgm")
    assert dt.pixels.max() == 2
    assert dt.get_pixel(2, 2) == 0

    assert main(["morph", str(tmp_path / "mask.pgm"), "--op", "erode", "--output", str(tmp_path / "er.pgm")]) == 0
    eroded = load_int_image(tmp_path / "er.pgm")
    assert eroded.pixels[1:4, 1:4].max() == 0
    assert eroded.pixels[0, 0] == 1


def test_cli_fft_writes_spectrum(tmp_path):
    _gradient(tmp_path / "ramp.pgm")
    assert main(["fft", str(tmp_path / "ramp.pgm"), "--output", str(tmp_path / "spectrum.pgm")]) == 0
    spectrum = load_int_image(tmp_path / "spectrum.pgm")
    assert (spectrum.width, spectrum.height) == (8, 4)
    assert spectrum.pixels.max() == 255


def test_cli_histogram_json_to_stdout(tmp_path, capsys):
    _gradient(tmp_path / "ramp.pgm")

    assert main(["histogram", str(tmp_path / "ramp.pgm")]) == 0

    payload = json.loads(capsys.readouterr().out)
    frequencies = payload["histograms"][0]["frequencies"]
    assert payload["histograms"][0]["min_range"] == 0
    assert sum(frequencies) == 32
    assert frequencies[32] == 4
    assert payload["input"] == str(tmp_path / "ramp.pgm")


def test_cli_run_pipeline_config(tmp_path, capsys):
    _gradient(tmp_path / "ramp.pgm")
    config_path = tmp_path / "pipeline.json"
    config_path.write_text(
        json.dumps(
            {
                "input": str(tmp_path / "ramp.pgm"),
                "output": str(tmp_path / "inverted.pgm"),
                "steps": [{"op": "invert"}],
            }
        ),
        encoding="utf-8",
    )

    assert main(["run", "--config", str(config_path)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["steps"][0]["op"] == "invert"
    assert load_int_image(tmp_path / "inverted.pgm").get_pixel(0, 0) == 224


def test_cli_ops_lists_registered_operations(capsys):
    assert main(["ops"]) == 0
    names = capsys.readouterr().out.split()
    assert "distance_transform" in names
    assert names == sorted(names)

    assert main(["ops", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["translate"]["kinds"] == ["int", "rgb"]
    assert "description" in payload["dilate"]


def test_cli_reports_errors(tmp_path, capsys):
    code = main(["dt", str(tmp_path / "missing.pgm"), "--output", str(tmp_path / "out.pgm")])
    assert code == 1
    assert "failed to open file" in capsys.readouterr().err


def test_cli_releases_result_when_save_fails(tmp_path, monkeypatch):
    def failing_save(image, path):
        raise OSError("disk full")

    monkeypatch.setattr(cli, "save_image", failing_save)
    image = IntImage.from_array(np.zeros((2, 2), dtype=int))

    with pytest.raises(OSError, match="disk full"):
        cli._finish(image, str(tmp_path / "out.pgm"), None, "result")
    assert image.released
