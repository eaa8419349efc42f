"""The `PrettyPrinter` facade: introspect a Python value, then render it.

Every public call is one session. A fresh `Introspection` (and with it a
fresh pair of identity registries) and a fresh `AnyRenderer` are created
per call, so ids always start at 0 and nothing leaks between prints.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from specimen.core.exception_renderer import ExceptionRenderer
from specimen.core.introspection import Introspection
from specimen.core.json_model import JsonModelBuilder, to_json
from specimen.core.renderers import AnyRenderer
from specimen.core.values import ExceptionValue, Value
from specimen.utils.config import PrinterConfig


class PrettyPrinter:
    def __init__(self, config: PrinterConfig | None = None):
        self.config = config or PrinterConfig()

    def render(self, value: Value) -> str:
        """Render an already-built model value."""
        return str(AnyRenderer(self.config).render(value))

    def pretty_print(self, value: Any) -> str:
        """Render any Python value. No trailing newline."""
        return self.render(Introspection().introspect(value))

    def pretty_print_exception(self, exc: BaseException) -> str:
        """Full exception report, ending with a newline."""
        model = Introspection().introspect_exception(exc)
        logger.debug("Rendering {} ({} stack frames)", model.class_name, len(model.stack))
        return self.pretty_print_exception_info(model)

    def pretty_print_exception_info(self, model: ExceptionValue) -> str:
        """Full report for an exception model built elsewhere."""
        return str(AnyRenderer(self.config).render(model).set_has_ending_newline(True))

    def pretty_print_exception_one_line(self, exc: BaseException | ExceptionValue) -> str:
        if not isinstance(exc, ExceptionValue):
            exc = Introspection().introspect_exception(exc, include_globals=False)
        return ExceptionRenderer(AnyRenderer(self.config)).render_one_line(exc)

    def to_json_model(self, value: Any) -> dict[str, Any]:
        introspection = Introspection()
        return JsonModelBuilder(introspection).build(introspection.introspect(value))

    def exception_to_json_model(self, exc: BaseException) -> dict[str, Any]:
        introspection = Introspection()
        return JsonModelBuilder(introspection).build(introspection.introspect_exception(exc))

    def to_json(self, value: Any, indent: int | None = None) -> str:
        if isinstance(value, BaseException):
            return to_json(self.exception_to_json_model(value), indent)
        return to_json(self.to_json_model(value), indent)
