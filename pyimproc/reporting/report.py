from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pyimproc.histogram import Histogram
from pyimproc.image import GenericImage
from pyimproc.utils.jsonable import to_jsonable

REPORT_SCHEMA_VERSION = 1


def stamp_report_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Attach run-level metadata to report payloads without changing their shape."""

    from pyimproc import __version__ as pyimproc_version

    stamped = dict(payload)
    stamped.setdefault("schema_version", int(REPORT_SCHEMA_VERSION))
    stamped.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    stamped.setdefault("pyimproc_version", pyimproc_version)
    return stamped


def describe_image(image: GenericImage) -> dict[str, Any]:
    """Domain, dynamic range and value extent of an image."""

    low, high = image.min_max()
    return {
        "kind": image.kind,
        "domain": list(image.domain.values()),
        "width": image.width,
        "height": image.height,
        "dynamic_range": [image.min_range, image.max_range],
        "min_max": [low, high],
    }


def histogram_report(image: GenericImage, histograms: list[Histogram]) -> dict[str, Any]:
    payload = describe_image(image)
    payload["histograms"] = [h.to_dict() for h in histograms]
    return payload


def save_run_report(path: str | Path, results: dict) -> None:
    """Save a result dict as JSON (converting numpy types, enums and paths)."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    payload = to_jsonable(results)
    out_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
