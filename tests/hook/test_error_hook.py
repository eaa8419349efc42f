"""Tests for the process-wide error hook."""

from __future__ import annotations

import sys
import threading

import pytest

from specimen.hook.error_hook import ErrorHook


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:
        return caught


class _Reports:
    def __init__(self):
        self.items: list[tuple[BaseException, str]] = []

    def __call__(self, exc, text):
        self.items.append((exc, text))


@pytest.fixture
def reports():
    return _Reports()


@pytest.fixture
def hook(reports):
    hook = ErrorHook(on_report=reports)
    yield hook
    hook.uninstall()


def test_install_and_uninstall_restore_hooks(hook):
    original, original_threading = sys.excepthook, threading.excepthook
    hook.install()
    assert hook.is_installed
    assert sys.excepthook != original
    assert threading.excepthook != original_threading

    hook.uninstall()
    assert not hook.is_installed
    assert sys.excepthook is original
    assert threading.excepthook is original_threading


def test_install_is_idempotent(hook):
    original = sys.excepthook
    hook.install()
    hook.install()
    hook.uninstall()
    hook.uninstall()
    assert sys.excepthook is original


def test_uninstall_leaves_foreign_hook_alone(hook):
    original = sys.excepthook
    hook.install()

    def foreign(*args):
        return None

    sys.excepthook = foreign
    try:
        hook.uninstall()
        assert sys.excepthook is foreign
    finally:
        sys.excepthook = original


def test_excepthook_reports_rendering(hook, reports):
    hook.install()
    exc = _raised(ValueError("boom"))
    sys.excepthook(type(exc), exc, exc.__traceback__)

    assert len(reports.items) == 1
    reported, text = reports.items[0]
    assert reported is exc
    assert text.startswith("uncaught ValueError\n")
    assert hook.last_exception is exc


def test_keyboard_interrupt_goes_to_previous_hook(monkeypatch, reports):
    seen = []
    monkeypatch.setattr(sys, "excepthook", lambda *args: seen.append(args[1]))
    hook = ErrorHook(on_report=reports).install()
    try:
        exc = KeyboardInterrupt()
        sys.excepthook(KeyboardInterrupt, exc, None)
    finally:
        hook.uninstall()
    assert seen == [exc]
    assert reports.items == []


def test_render_failure_falls_back(monkeypatch, reports):
    seen = []
    monkeypatch.setattr(sys, "excepthook", lambda *args: seen.append(args[1]))
    hook = ErrorHook(on_report=reports).install()

    def explode(self, exc, include_globals=True):
        raise RuntimeError("introspection broke")

    monkeypatch.setattr("specimen.core.introspection.Introspection.introspect_exception", explode)
    try:
        exc = ValueError("x")
        sys.excepthook(ValueError, exc, None)
    finally:
        hook.uninstall()
    assert seen == [exc]
    assert reports.items == []


class _BrokenFormatter:
    def show_exception(self, text, location=None):
        raise OSError("closed stderr")


def test_report_failure_falls_back(monkeypatch):
    seen = []
    monkeypatch.setattr(sys, "excepthook", lambda *args: seen.append(args[1]))
    hook = ErrorHook(formatter=_BrokenFormatter()).install()
    try:
        exc = _raised(ValueError("x"))
        sys.excepthook(ValueError, exc, exc.__traceback__)
    finally:
        hook.uninstall()
    assert seen == [exc]


def test_failing_report_callback_falls_back(monkeypatch):
    seen = []
    monkeypatch.setattr(sys, "excepthook", lambda *args: seen.append(args[1]))

    def on_report(exc, text):
        raise RuntimeError("sink gone")

    hook = ErrorHook(on_report=on_report).install()
    try:
        exc = _raised(ValueError("x"))
        sys.excepthook(ValueError, exc, exc.__traceback__)
    finally:
        hook.uninstall()
    assert seen == [exc]
    assert not ErrorHook(on_report=on_report).handle(exc)


def test_thread_exceptions_are_reported(hook, reports):
    hook.install()

    def work():
        raise RuntimeError("in thread")

    thread = threading.Thread(target=work)
    thread.start()
    thread.join()

    assert len(reports.items) == 1
    assert reports.items[0][1].startswith("uncaught RuntimeError\n")


def test_context_manager_reports_and_suppresses(reports):
    original = sys.excepthook
    with ErrorHook(on_report=reports) as hook:
        assert hook.is_installed
        raise ValueError("inside")
    assert sys.excepthook is original
    assert reports.items[0][1].startswith("uncaught ValueError\n")


def test_context_manager_lets_system_exit_through(reports):
    with pytest.raises(SystemExit):
        with ErrorHook(on_report=reports):
            raise SystemExit(2)
    assert reports.items == []


def test_default_config_is_compact():
    hook = ErrorHook()
    assert hook.config.max_string_length == 100
