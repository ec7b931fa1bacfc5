"""Recursive structural merge used for header and option composition."""

from __future__ import annotations

from typing import Any, Mapping

HEADERS_KEY = "headers"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _fold(key: Any, fold_keys: bool) -> Any:
    if fold_keys and isinstance(key, str):
        return key.lower()
    return key


def merge(base: Any, overrides: Any = None, fold_keys: bool = False) -> Any:
    """Merge ``overrides`` into ``base`` and return a new structure.

    Sequences concatenate, mappings merge key by key (recursing into nested
    containers) and scalars replace. When ``fold_keys`` is set, string keys are
    lower-cased so names differing only in case collapse into one entry, the
    last write winning. Values stored under ``headers`` are always folded.

    Neither argument is mutated.
    """
    if _is_sequence(base):
        if overrides is None:
            return list(base)
        if _is_sequence(overrides):
            return [*base, *overrides]
        return [*base, overrides]

    out: dict[Any, Any] = {}
    for key, value in (base or {}).items():
        out[_fold(key, fold_keys)] = value

    for key, value in (overrides or {}).items():
        key = _fold(key, fold_keys)
        if key in out and _can_merge(out[key], value):
            out[key] = merge(out[key], value, fold_keys or key == HEADERS_KEY)
        else:
            out[key] = value

    return out


def _can_merge(existing: Any, value: Any) -> bool:
    if _is_sequence(existing):
        return _is_sequence(value) or isinstance(value, Mapping)
    return isinstance(existing, Mapping) and isinstance(value, Mapping)
