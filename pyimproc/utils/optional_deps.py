"""Optional dependency helpers.

The numerical core only needs NumPy. File formats beyond netpbm (OpenCV),
interactive display (matplotlib), PNG snapshots (Pillow) and YAML configs
(PyYAML) are imported lazily through these helpers.
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Optional, Tuple

# import name -> distribution name on the index
_DISTRIBUTIONS = {
    "cv2": "opencv-python",
    "PIL": "Pillow",
    "yaml": "PyYAML",
}


def optional_import(module_name: str) -> Tuple[Optional[ModuleType], Optional[BaseException]]:
    """Attempt to import a module, returning (module, error)."""

    try:
        return import_module(module_name), None
    except Exception as exc:  # noqa: BLE001 - return import error without swallowing BaseException
        return None, exc


def install_hint(module_name: str, *, extra: Optional[str] = None) -> str:
    """``pip install`` command that provides ``module_name``.

    With ``extra`` the hint names the pyimproc extra instead of the bare
    distribution, e.g. ``pip install 'pyimproc[yaml]'``.
    """

    if extra:
        return f"pip install 'pyimproc[{extra}]'"
    root = str(module_name).split(".", 1)[0]
    return f"pip install '{_DISTRIBUTIONS.get(root, root)}'"


def require(module_name: str, *, extra: Optional[str] = None, purpose: Optional[str] = None) -> ModuleType:
    """Import ``module_name`` or raise an ImportError carrying :func:`install_hint`."""

    module, error = optional_import(module_name)
    if module is not None:
        return module

    context = f" for {purpose}" if purpose else ""
    raise ImportError(
        f"Optional dependency '{module_name}' is required{context}.\n"
        f"Install it via:\n  {install_hint(module_name, extra=extra)}\n"
        f"Original error: {error}"
    ) from error
