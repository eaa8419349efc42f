"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from specimen.core.introspection import Introspection
from specimen.core.printer import PrettyPrinter
from specimen.core.renderers import AnyRenderer
from specimen.core.values import CodeLocation, ExceptionValue
from specimen.utils.config import PrinterConfig


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SPECIMEN_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("SPECIMEN_"):
            monkeypatch.delenv(name)


@pytest.fixture
def config():
    return PrinterConfig()


@pytest.fixture
def printer(config):
    return PrettyPrinter(config)


@pytest.fixture
def renderer(config):
    return AnyRenderer(config)


@pytest.fixture
def introspection():
    return Introspection()


@pytest.fixture
def simple_exception():
    """The smallest complete exception model: no locals, no frames, no chain."""
    return ExceptionValue(
        class_name="Err",
        code="C",
        message="boom",
        location=CodeLocation("/f", 10),
        locals=[],
    )
