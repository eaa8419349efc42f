"""specimen - readable dumps of Python values and uncaught exceptions.

Run your script through it, no code changes needed:

    $ specimen script.py

Or print values yourself:

    from specimen import pretty_print
    print(pretty_print({"a": [1, 2, 3]}))

Or report every uncaught exception from inside a program:

    import specimen
    specimen.install()
"""

from __future__ import annotations

from typing import Any

from loguru import logger

__version__ = "0.1.0"

logger.disable("specimen")

# Lazy hook for the import-based API
_hook = None


def pretty_print(value: Any, **limits) -> str:
    """Render any value as text. Keyword arguments override `PrinterConfig` fields."""
    from specimen.core.printer import PrettyPrinter
    from specimen.utils.config import PrinterConfig

    return PrettyPrinter(PrinterConfig().merge(**limits)).pretty_print(value)


def pretty_print_exception(exc: BaseException, **limits) -> str:
    """Render an exception with its locals, stack, globals and chain."""
    from specimen.core.printer import PrettyPrinter
    from specimen.utils.config import PrinterConfig

    return PrettyPrinter(PrinterConfig().merge(**limits)).pretty_print_exception(exc)


def install(**limits):
    """Report uncaught exceptions through specimen. Calling it twice is harmless."""
    from specimen.hook.error_hook import ErrorHook
    from specimen.utils.config import PrinterConfig

    global _hook
    if _hook is None:
        _hook = ErrorHook(PrinterConfig.from_env(PrinterConfig.compact()).merge(**limits))
    return _hook.install()


def uninstall() -> None:
    """Restore the exception hooks that were active before `install()`."""
    global _hook
    if _hook is not None:
        _hook.uninstall()
        _hook = None
