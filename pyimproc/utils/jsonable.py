from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np


def to_jsonable(value: Any) -> Any:
    """Convert paths, enums, numpy values and histograms into JSON-friendly values.

    - `pathlib.Path` -> `str`
    - `Enum` -> its value
    - numpy scalars -> builtin scalars via `.item()`
    - `numpy.ndarray` -> nested lists via `.tolist()`
    - objects with a `to_dict()` method (e.g. `Histogram`) -> that dict
    - recurses through `dict` / `list` / `tuple`
    """

    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return to_jsonable(value.to_dict())
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
