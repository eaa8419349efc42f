"""Configuration management for specimen."""

from __future__ import annotations

import dataclasses
import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

UNLIMITED = sys.maxsize


@dataclass(frozen=True)
class PrinterConfig:
    """Truncation limits and layout switches for one print.

    Defaults are unlimited. A config is immutable; use `merge()` to derive
    a modified copy before printing.
    """

    max_string_length: int = UNLIMITED
    max_array_entries: int = UNLIMITED
    max_object_properties: int = UNLIMITED
    max_stack_frames: int = UNLIMITED
    max_function_arguments: int = UNLIMITED
    max_local_variables: int = UNLIMITED
    max_global_variables: int = UNLIMITED
    escape_tabs_in_strings: bool = False
    split_multi_line_strings: bool = True
    show_exception_local_variables: bool = True
    show_exception_global_variables: bool = True
    show_exception_stack_trace: bool = True
    # Summed one-line width above which a sequence is laid out vertically.
    multi_line_threshold: int = 32

    def __post_init__(self):
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.type == "int" and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValueError(f"{f.name} must be a non-negative int, got {value!r}")

    def merge(self, **overrides) -> PrinterConfig:
        """Return a copy with `overrides` applied. Unknown names raise TypeError."""
        return dataclasses.replace(self, **overrides)

    @classmethod
    def compact(cls) -> PrinterConfig:
        """Limits used when printing uncaught exceptions to a terminal."""
        return cls(
            max_string_length=100,
            max_array_entries=10,
            max_object_properties=10,
            max_stack_frames=20,
            max_local_variables=20,
            max_global_variables=20,
        )

    @classmethod
    def from_env(cls, base: PrinterConfig | None = None) -> PrinterConfig:
        """Create config from SPECIMEN_* environment variables."""
        base = base or cls()
        overrides = {}
        for f in dataclasses.fields(cls):
            raw = os.environ.get(f"SPECIMEN_{f.name.upper()}")
            if raw is None:
                continue
            current = getattr(base, f.name)
            if f.type == "bool":
                overrides[f.name] = _parse_bool(raw, default=current)
            else:
                overrides[f.name] = _parse_int(raw, default=current)
        return base.merge(**overrides)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"unlimited", "max", "inf"}:
        return UNLIMITED
    try:
        parsed = int(lowered)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default
