"""Naming and string helpers that never raise or trigger user code twice."""

from __future__ import annotations

from typing import Any


def safe_type_name(obj: Any) -> str:
    """Get the fully qualified type name of an object, safely."""
    try:
        return qualified_name(type(obj))
    except Exception:
        return "<unknown type>"


def qualified_name(cls: type) -> str:
    """`module.QualName` for a class, just `QualName` for builtins."""
    module = getattr(cls, "__module__", None)
    qualname = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", "?")
    if module and module != "builtins":
        return f"{module}.{qualname}"
    return qualname


def safe_str(obj: Any, default: str = "") -> str:
    """str(obj), or `default` when __str__ raises or returns a non-string."""
    try:
        result = str(obj)
    except Exception:
        return default
    return result if isinstance(result, str) else default


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")
