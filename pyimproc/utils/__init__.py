"""Small shared helpers for pyimproc."""

from __future__ import annotations

from .jsonable import to_jsonable
from .optional_deps import install_hint, optional_import, require

__all__ = ["install_hint", "optional_import", "require", "to_jsonable"]
