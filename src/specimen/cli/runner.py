"""Script runner - executes user scripts with uncaught exceptions reported."""

from __future__ import annotations

import os
import runpy
import sys
from types import TracebackType

from loguru import logger

from specimen.core.printer import PrettyPrinter
from specimen.hook.error_hook import ErrorHook
from specimen.output.formatter import OutputFormatter
from specimen.utils.config import PrinterConfig


class ScriptRunner:
    """Runs a user's Python script as `__main__` under an `ErrorHook`.

    No code changes are needed in the target script. An uncaught exception
    is reported as text (default), a JSON model, or an HTML page.
    """

    def __init__(self, config: PrinterConfig | None = None, formatter: OutputFormatter | None = None):
        self.config = config or PrinterConfig.from_env(PrinterConfig.compact())
        self.formatter = formatter or OutputFormatter()

    def run(
        self,
        script_path: str,
        script_args: list[str] | None = None,
        output: str = "text",
        html_path: str | None = None,
    ) -> int:
        """Run the script and return the process exit status."""
        script_path = os.path.abspath(script_path)
        if not os.path.isfile(script_path):
            self.formatter.show_error(f"File not found: {script_path}")
            return 1

        saved_argv, saved_path = sys.argv, list(sys.path)
        sys.argv = [script_path, *(script_args or [])]
        sys.path.insert(0, os.path.dirname(script_path))
        hook = ErrorHook(self.config, self.formatter)
        logger.debug("Running {} with args {}", script_path, sys.argv[1:])
        try:
            with hook:
                # Exceptions are caught here rather than by the hook so the
                # runner frames can be trimmed first.
                try:
                    runpy.run_path(script_path, run_name="__main__")
                except SystemExit as e:
                    return _exit_status(e.code)
                except BaseException as e:
                    if isinstance(e, KeyboardInterrupt):
                        raise
                    e.__traceback__ = _strip_runner_frames(e.__traceback__, script_path)
                    self._report(e, hook, output, html_path)
                    return 1
        finally:
            sys.argv = saved_argv
            sys.path[:] = saved_path
        return 0

    def _report(self, exc: BaseException, hook: ErrorHook, output: str, html_path: str | None) -> None:
        if output == "json":
            self.formatter.write_json(PrettyPrinter(self.config).exception_to_json_model(exc))
        elif output == "html":
            text = PrettyPrinter(self.config).pretty_print_exception(exc)
            self.formatter.write_html(html_path, f"uncaught {type(exc).__name__}", text)
            self.formatter.show_info(f"Exception report written to {html_path}")
        elif not hook.handle(exc):
            sys.__excepthook__(type(exc), exc, exc.__traceback__)


def _strip_runner_frames(tb: TracebackType | None, script_path: str) -> TracebackType | None:
    """Drop leading traceback entries that belong to the runner and runpy."""
    current = tb
    while current is not None and current.tb_frame.f_code.co_filename != script_path:
        current = current.tb_next
    return current if current is not None else tb


def _exit_status(code) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1
