"""Tests for safe naming helpers."""

from __future__ import annotations

from specimen.utils.safe_access import is_dunder, qualified_name, safe_str, safe_type_name


class _BadStr:
    def __str__(self):
        raise RuntimeError("no")


def test_builtin_names_are_bare():
    assert safe_type_name(1) == "int"
    assert qualified_name(ValueError) == "ValueError"


def test_user_names_are_qualified():
    assert qualified_name(_BadStr) == f"{__name__}._BadStr"
    assert safe_type_name(_BadStr()) == f"{__name__}._BadStr"


def test_safe_str():
    assert safe_str(_BadStr()) == ""
    assert safe_str(_BadStr(), default="?") == "?"
    assert safe_str(ValueError("m")) == "m"


def test_is_dunder():
    assert is_dunder("__name__")
    assert not is_dunder("_private")
    assert not is_dunder("____")
