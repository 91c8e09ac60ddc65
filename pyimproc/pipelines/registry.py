"""
Operation registry for image pipelines.

Named image-to-image operations are registered here so that pipeline
configs and the CLI can refer to them by string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional


@dataclass
class OperationEntry:
    name: str
    func: Callable[..., Any]
    kinds: tuple[str, ...]
    metadata: Dict[str, Any]


class OperationRegistry:
    """Registry mapping operation names to callables ``func(image, **params)``."""

    def __init__(self) -> None:
        self._registry: Dict[str, OperationEntry] = {}

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        *,
        kinds: Optional[Iterable[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        overwrite: bool = False,
    ) -> None:
        if not overwrite and name in self._registry:
            raise KeyError(f"Operation {name!r} already exists. Set overwrite=True to replace it.")
        self._registry[name] = OperationEntry(
            name=name,
            func=func,
            kinds=tuple(kinds or ("int",)),
            metadata=metadata or {},
        )

    def get(self, name: str) -> Callable[..., Any]:
        return self.info(name).func

    def info(self, name: str) -> OperationEntry:
        try:
            return self._registry[name]
        except KeyError as exc:
            available = ", ".join(sorted(self._registry)) or "<empty>"
            raise KeyError(f"Operation {name!r} not found. Available operations: {available}") from exc

    def available(self, *, kind: Optional[str] = None) -> List[str]:
        if kind is None:
            return sorted(self._registry)
        return sorted(entry.name for entry in self._registry.values() if kind in entry.kinds)

    def __contains__(self, name: object) -> bool:
        return name in self._registry


OPERATION_REGISTRY = OperationRegistry()


def register_operation(
    name: str,
    *,
    kinds: Optional[Iterable[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    overwrite: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator registering an operation at import time.

    Parameters
    ----------
    name : str
        Unique operation name used in pipeline configs
    kinds : Iterable[str], optional
        Image kinds the operation accepts (``"int"``, ``"rgb"``); defaults to ``("int",)``
    metadata : Dict[str, Any], optional
        Free-form description shown by ``pyimproc ops``
    overwrite : bool, default=False
        Whether to replace an existing registration

    Examples
    --------
    >>> @register_operation("negate")
    ... def negate(image):
    ...     ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        OPERATION_REGISTRY.register(name, func, kinds=kinds, metadata=metadata, overwrite=overwrite)
        return func

    return decorator


def apply_operation(name: str, image, **params):
    """Look up ``name`` and apply it to ``image``; the input is never modified."""

    entry = OPERATION_REGISTRY.info(name)
    if image.kind not in entry.kinds:
        raise ValueError(
            f"Operation {name!r} does not support {image.kind!r} images (supported: {', '.join(entry.kinds)})"
        )
    return entry.func(image, **params)
