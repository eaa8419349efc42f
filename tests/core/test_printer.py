"""Tests for the PrettyPrinter facade and the top-level API."""

from __future__ import annotations

import specimen
from specimen.core.printer import PrettyPrinter
from specimen.utils.config import PrinterConfig


def _fail():
    raise LookupError("missing")


def test_each_print_is_a_new_session():
    printer = PrettyPrinter()
    shared = [1]
    first = printer.pretty_print([shared, shared])
    second = printer.pretty_print([shared, shared])
    assert first == second == "list( #1 list( 1 ), #1 list( 1 ) )"


def test_pretty_print_has_no_trailing_newline(printer):
    assert not printer.pretty_print({"a": 1}).endswith("\n")


def test_pretty_print_exception_ends_with_newline(printer):
    try:
        _fail()
    except LookupError as e:
        text = printer.pretty_print_exception(e)
    assert text.startswith("uncaught LookupError\n")
    assert text.endswith("\n")
    assert "_fail();" in text


def test_one_line_from_live_exception(printer):
    try:
        _fail()
    except LookupError as e:
        line = printer.pretty_print_exception_one_line(e)
    assert line.startswith('uncaught LookupError, code, message "missing", in file "')
    assert line.endswith(f", line {_fail.__code__.co_firstlineno + 1}")


def test_config_is_used():
    printer = PrettyPrinter(PrinterConfig(max_string_length=2))
    assert printer.pretty_print("abc") == '"ab...'


def test_package_level_helpers():
    assert specimen.pretty_print([1, 2]) == "list( 1, 2 )"
    assert specimen.pretty_print("abcdef", max_string_length=1) == '"a...'
    assert specimen.pretty_print_exception(ValueError("x")).startswith("uncaught ValueError\n")
