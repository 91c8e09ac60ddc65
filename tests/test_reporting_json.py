import json

import numpy as np

from pyimproc.histogram import create_histogram
from pyimproc.image import ComplexImage, IntImage
from pyimproc.reporting.report import (
    REPORT_SCHEMA_VERSION,
    describe_image,
    histogram_report,
    save_run_report,
    stamp_report_payload,
)


def test_save_run_report(tmp_path):
    path = tmp_path / "nested" / "report.json"
    results = {
        "peak": np.float64(0.9),
        "flag": np.bool_(False),
        "labels": np.array([0, 1, 0]),
        "nested": {"x": np.int64(1), 2: np.bool_(True), "arr": np.array([1.0, 2.0], dtype=np.float32)},
        "path": tmp_path / "artifact.pgm",
    }
    save_run_report(path, results)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["peak"] == 0.9
    assert data["flag"] is False
    assert data["labels"] == [0, 1, 0]
    assert data["nested"]["x"] == 1
    assert data["nested"]["2"] is True
    assert data["nested"]["arr"] == [1.0, 2.0]
    assert data["path"].endswith("artifact.pgm")


def test_stamp_report_payload_keeps_existing_keys():
    from pyimproc import __version__

    stamped = stamp_report_payload({"a": 1, "schema_version": 99})
    assert stamped["a"] == 1
    assert stamped["schema_version"] == 99
    assert stamped["pyimproc_version"] == __version__
    assert "timestamp_utc" in stamped

    assert stamp_report_payload({})["schema_version"] == REPORT_SCHEMA_VERSION


def test_describe_image():
    image = IntImage.from_array(np.array([[3, 9]]), min_x=-1, min_y=2, min_range=0, max_range=10)
    assert describe_image(image) == {
        "kind": "int",
        "domain": [-1, 0, 2, 2],
        "width": 2,
        "height": 1,
        "dynamic_range": [0, 10],
        "min_max": [3, 9],
    }


def test_describe_complex_image_has_no_range():
    payload = describe_image(ComplexImage.from_array(np.array([[1 + 1j, -2 + 0j]])))
    assert payload["dynamic_range"] == [None, None]
    assert payload["min_max"] == [-2.0, 1.0]


def test_histogram_report():
    image = IntImage.from_array(np.array([[0, 2, 2]]), min_range=0, max_range=2)
    payload = histogram_report(image, [create_histogram(image)])
    assert payload["histograms"] == [{"min_range": 0, "max_range": 2, "frequencies": [1, 0, 2]}]
    assert payload["kind"] == "int"
