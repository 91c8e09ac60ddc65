from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from pyimproc.utils.optional_deps import require

# keys of a pipeline config that hold file paths
PATH_KEYS = ("input", "output", "report")


def _read_mapping(config_path: Path) -> dict[str, Any]:
    suffix = config_path.suffix.lower()
    with config_path.open("r", encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yml", ".yaml"):
            yaml = require("yaml", extra="yaml", purpose="YAML config files")
            data = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported config extension: {suffix!r} for {str(config_path)!r}. "
                "Supported: .json, .yml, .yaml."
            )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config must be a mapping at the top level, got {type(data).__name__} from {str(config_path)!r}."
        )
    return dict(data)


def load_config(
    path: str | Path,
    *,
    relative_to_file: bool = False,
    path_keys: Iterable[str] = PATH_KEYS,
) -> dict[str, Any]:
    """Load a pipeline config file into a dict.

    JSON (``.json``) is always supported; YAML (``.yml``/``.yaml``) needs the
    ``yaml`` extra (PyYAML).

    With ``relative_to_file=True`` the relative paths stored under
    ``path_keys`` are resolved against the directory of the config file, so
    a config can sit next to its images and be run from anywhere.
    """

    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {str(config_path)!r}")

    data = _read_mapping(config_path)
    if relative_to_file:
        base = config_path.resolve().parent
        for key in path_keys:
            value = data.get(key)
            if isinstance(value, str) and value.strip() and not Path(value).is_absolute():
                data[key] = str(base / value)
    return data
