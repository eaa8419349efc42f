"""Process-wide hook that reports uncaught exceptions with the pretty printer."""

from __future__ import annotations

import sys
import threading
from typing import Callable

from loguru import logger

from specimen.core.introspection import Introspection
from specimen.core.printer import PrettyPrinter
from specimen.output.formatter import OutputFormatter
from specimen.utils.config import PrinterConfig


class ErrorHook:
    """Owns the replacement of `sys.excepthook` and `threading.excepthook`.

    `install()` and `uninstall()` are the only methods that touch
    interpreter state. Both are idempotent, and the hook can be used as a
    context manager:

        with ErrorHook():
            main()
    """

    def __init__(
        self,
        config: PrinterConfig | None = None,
        formatter: OutputFormatter | None = None,
        on_report: Callable[[BaseException, str], None] | None = None,
    ):
        self.config = config or PrinterConfig.compact()
        self.formatter = formatter or OutputFormatter()
        self.on_report = on_report
        self.last_exception: BaseException | None = None
        self._previous_excepthook = None
        self._previous_threading_hook = None
        self._installed = False

    @property
    def is_installed(self) -> bool:
        return self._installed

    def install(self) -> ErrorHook:
        if self._installed:
            return self
        self._previous_excepthook = sys.excepthook
        self._previous_threading_hook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook
        self._installed = True
        logger.debug("Installed error hook")
        return self

    def uninstall(self) -> None:
        if not self._installed:
            return
        # Only restore hooks that are still ours; someone may have replaced them since.
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._threading_excepthook:
            threading.excepthook = self._previous_threading_hook
        self._installed = False
        logger.debug("Uninstalled error hook")

    def __enter__(self) -> ErrorHook:
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None and not isinstance(exc, (KeyboardInterrupt, SystemExit)):
                self.handle(exc)
                return True
            return False
        finally:
            self.uninstall()

    def handle(self, exc: BaseException) -> bool:
        """Render and report `exc`. Returns False if rendering or reporting failed."""
        self.last_exception = exc
        logger.debug("Handling uncaught {}", type(exc).__name__)
        try:
            model = Introspection().introspect_exception(exc)
            text = PrettyPrinter(self.config).pretty_print_exception_info(model)
        except Exception as e:
            logger.warning("Could not render {}: {}", type(exc).__name__, e)
            return False

        try:
            if self.on_report is not None:
                self.on_report(exc, text)
            else:
                self.formatter.show_exception(text, model.location)
        except Exception as e:
            logger.warning("Could not report {}: {}", type(exc).__name__, e)
            return False
        return True

    def _excepthook(self, exc_type, exc, tb) -> None:
        if isinstance(exc, KeyboardInterrupt) or not self.handle(exc):
            self._fallback(exc_type, exc, tb)

    def _threading_excepthook(self, args) -> None:
        exc = args.exc_value
        if exc is None or isinstance(exc, KeyboardInterrupt) or not self.handle(exc):
            previous = self._previous_threading_hook or threading.__excepthook__
            previous(args)

    def _fallback(self, exc_type, exc, tb) -> None:
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc, tb)
