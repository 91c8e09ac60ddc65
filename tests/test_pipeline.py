import json

import numpy as np
import pytest

from pyimproc.image import IntImage, RgbImage
from pyimproc.io.netpbm import load_int_image, load_rgb_image, save_pgm, save_ppm
from pyimproc.pipelines.registry import OPERATION_REGISTRY, OperationRegistry, apply_operation, register_operation
from pyimproc.pipelines.runner import PipelineConfig, StepConfig, run_pipeline


def _write_square(path, size=8):
    pixels = np.zeros((size, size), dtype=np.int64)
    pixels[3:5, 3:5] = 200
    save_pgm(IntImage.from_array(pixels, min_range=0, max_range=255), path)
    return pixels


def test_builtin_operations_are_registered() -> None:
    for name in ("threshold", "distance_transform", "dilate", "erode", "invert", "spectrum", "pad"):
        assert name in OPERATION_REGISTRY
    assert "flip_vertical" in OPERATION_REGISTRY.available(kind="rgb")
    assert "dilate" not in OPERATION_REGISTRY.available(kind="rgb")


def test_registry_rejects_duplicates_and_reports_unknown_names() -> None:
    registry = OperationRegistry()
    registry.register("noop", lambda image: image)
    with pytest.raises(KeyError, match="already exists"):
        registry.register("noop", lambda image: image)
    registry.register("noop", lambda image: None, overwrite=True, metadata={"description": "x"})
    assert registry.info("noop").metadata == {"description": "x"}
    with pytest.raises(KeyError, match="Available operations: noop"):
        registry.get("missing")


def test_register_operation_decorator() -> None:
    @register_operation("test_negate_for_registry", overwrite=True)
    def negate(image):
        return IntImage.from_array(-image.pixels)

    try:
        image = IntImage.from_array(np.array([[1, -2]]))
        np.testing.assert_array_equal(apply_operation("test_negate_for_registry", image).pixels, [[-1, 2]])
        assert OPERATION_REGISTRY.info("test_negate_for_registry").kinds == ("int",)
    finally:
        OPERATION_REGISTRY._registry.pop("test_negate_for_registry", None)


def test_apply_operation_checks_image_kind() -> None:
    rgb = RgbImage.allocate(2, 2)
    with pytest.raises(ValueError, match="does not support 'rgb'"):
        apply_operation("dilate", rgb)


def test_operations_leave_input_untouched() -> None:
    image = IntImage.from_array(np.array([[0, 100], [200, 255]]), min_x=-1, min_range=0, max_range=255)
    before = image.to_array()

    thresholded = apply_operation("threshold", image, level=128)
    inverted = apply_operation("invert", image)
    flipped = apply_operation("flip_horizontal", image)
    moved = apply_operation("translate", image, dx=3, dy=1)
    padded = apply_operation("pad", image, top=1, right=0, bottom=0, left=0, value=7)

    np.testing.assert_array_equal(image.pixels, before)
    np.testing.assert_array_equal(thresholded.pixels, [[0, 0], [255, 255]])
    np.testing.assert_array_equal(inverted.pixels, [[255, 155], [55, 0]])
    assert flipped.domain.values() == (0, 1, 0, 1)
    assert moved.domain.values() == (2, 3, 1, 2)
    assert padded.height == 3
    assert image.domain.values() == (-1, 0, 0, 1)


def test_rgb_pad_broadcasts_scalar_value() -> None:
    image = RgbImage.from_array(np.ones((1, 1, 3), dtype=int))
    padded = apply_operation("pad", image, top=0, right=1, bottom=0, left=0, value=9)
    assert padded.get_pixel(1, 0) == (9, 9, 9)


def test_pipeline_config_from_dict() -> None:
    config = PipelineConfig.from_dict(
        {
            "input": "in.pgm",
            "output": "out.pgm",
            "kind": "INT",
            "steps": [{"op": "dilate", "width": 5}, {"op": "invert"}],
        }
    )
    assert config.kind == "int"
    assert config.steps == (StepConfig("dilate", {"width": 5}), StepConfig("invert", {}))
    assert config.report is None


@pytest.mark.parametrize(
    "raw, match",
    [
        ([], "config must be a dict"),
        ({}, "input is required"),
        ({"input": "  "}, "non-empty path"),
        ({"input": "a.pgm", "kind": "double"}, "kind must be one of"),
        ({"input": "a.pgm", "steps": {"op": "dilate"}}, "steps must be a list"),
        ({"input": "a.pgm", "steps": ["dilate"]}, "steps\\[0\\] must be a dict"),
        ({"input": "a.pgm", "steps": [{"width": 3}]}, "steps\\[0\\].op is required"),
        ({"input": "a.pgm", "steps": [{"op": "blur"}]}, "'blur' is unknown"),
    ],
)
def test_pipeline_config_validation(raw, match) -> None:
    with pytest.raises(ValueError, match=match):
        PipelineConfig.from_dict(raw)


def test_run_pipeline_writes_output_and_report(tmp_path) -> None:
    source = _write_square(tmp_path / "square.pgm")
    config = PipelineConfig.from_dict(
        {
            "input": str(tmp_path / "square.pgm"),
            "output": str(tmp_path / "out" / "grown.pgm"),
            "report": str(tmp_path / "out" / "report.json"),
            "steps": [{"op": "dilate", "width": 3, "height": 3}, {"op": "threshold", "level": 100}],
        }
    )

    summary = run_pipeline(config)

    result = load_int_image(tmp_path / "out" / "grown.pgm")
    expected = np.zeros_like(source)
    expected[2:6, 2:6] = 255
    np.testing.assert_array_equal(result.pixels, expected)

    assert [step["op"] for step in summary["steps"]] == ["dilate", "threshold"]
    assert summary["steps"][1]["result"]["dynamic_range"] == [0, 255]
    assert summary["output"] == str(tmp_path / "out" / "grown.pgm")

    report = json.loads((tmp_path / "out" / "report.json").read_text(encoding="utf-8"))
    assert report["schema_version"] == 1
    assert report["source"]["width"] == 8
    assert "pyimproc_version" in report


def test_run_pipeline_without_steps_copies_rgb(tmp_path) -> None:
    pixels = np.arange(12).reshape(2, 2, 3)
    save_ppm(RgbImage.from_array(pixels, min_range=0, max_range=255), tmp_path / "in.ppm")
    config = PipelineConfig(input=str(tmp_path / "in.ppm"), output=str(tmp_path / "out.ppm"), kind="rgb")

    summary = run_pipeline(config)

    np.testing.assert_array_equal(load_rgb_image(tmp_path / "out.ppm").pixels, pixels)
    assert summary["steps"] == []
    assert summary["source"]["kind"] == "rgb"


def test_run_pipeline_shows_final_image(tmp_path) -> None:
    _write_square(tmp_path / "square.pgm")
    calls = []

    class Viewer:
        def show(self, buffer, width, height, origin_mark, title):
            calls.append((len(buffer), width, height, title))

    run_pipeline(PipelineConfig(input=str(tmp_path / "square.pgm")), viewer=Viewer())
    assert calls == [(64, 8, 8, "square.pgm")]
