from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from pyimproc.io.image import load_image, save_image
from pyimproc.pipelines import operations as _operations  # noqa: F401 - registers built-in operations
from pyimproc.pipelines.registry import OPERATION_REGISTRY, apply_operation
from pyimproc.reporting.report import describe_image, save_run_report, stamp_report_payload
from pyimproc.visualization.viewer import Viewer, display_image

logger = logging.getLogger(__name__)

_KINDS = ("int", "rgb")


def _require_mapping(value: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be a dict/object, got {type(value).__name__}")
    return value


def _optional_path(value: Any, *, name: str) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        raise ValueError(f"{name} must be a non-empty path or null")
    return text


@dataclass(frozen=True)
class StepConfig:
    op: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PipelineConfig:
    input: str
    output: Optional[str] = None
    kind: str = "int"
    steps: tuple[StepConfig, ...] = ()
    report: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PipelineConfig":
        top = _require_mapping(raw, name="config")

        input_path = _optional_path(top.get("input", None), name="input")
        if input_path is None:
            raise ValueError("input is required")
        output = _optional_path(top.get("output", None), name="output")
        report = _optional_path(top.get("report", None), name="report")

        kind = str(top.get("kind", "int")).strip().lower()
        if kind not in _KINDS:
            raise ValueError(f"kind must be one of {', '.join(_KINDS)}, got {kind!r}")

        steps_raw = top.get("steps", [])
        if steps_raw is None:
            steps_raw = []
        if not isinstance(steps_raw, (list, tuple)):
            raise ValueError(f"steps must be a list, got {type(steps_raw).__name__}")

        steps = []
        for i, step_raw in enumerate(steps_raw):
            step_map = dict(_require_mapping(step_raw, name=f"steps[{i}]"))
            op = step_map.pop("op", None)
            if op is None:
                raise ValueError(f"steps[{i}].op is required")
            op = str(op)
            if op not in OPERATION_REGISTRY:
                available = ", ".join(OPERATION_REGISTRY.available())
                raise ValueError(f"steps[{i}].op {op!r} is unknown. Available operations: {available}")
            steps.append(StepConfig(op=op, params=step_map))

        return cls(input=input_path, output=output, kind=kind, steps=tuple(steps), report=report)


def run_pipeline(config: PipelineConfig, *, viewer: Optional[Viewer] = None) -> dict[str, Any]:
    """Load the input, apply every step in order, then save and/or display.

    Returns a JSON-friendly summary; it is also written to ``config.report``
    when set.
    """

    image = load_image(config.input, config.kind)
    summary: dict[str, Any] = {"input": config.input, "source": describe_image(image), "steps": []}

    for step in config.steps:
        logger.info("applying %s %s", step.op, step.params)
        result = apply_operation(step.op, image, **step.params)
        image.release()
        image = result
        summary["steps"].append({"op": step.op, "params": dict(step.params), "result": describe_image(image)})

    if config.output is not None:
        Path(config.output).parent.mkdir(parents=True, exist_ok=True)
        save_image(image, config.output)
        summary["output"] = config.output
    if viewer is not None:
        display_image(image, Path(config.input).name, viewer=viewer)
    image.release()

    summary = stamp_report_payload(summary)
    if config.report is not None:
        save_run_report(config.report, summary)
    return summary
