"""Text rendering of exceptions: header, locals, stack, globals and the chain."""

from __future__ import annotations

from specimen.core.renderers import TRUNCATION_MARKER, AnyRenderer, TypeRenderer, escape_string, render_assignments
from specimen.core.text import LineBuffer
from specimen.core.values import (
    CodeLocation,
    ExceptionValue,
    GlobalState,
    IntValue,
    NullValue,
    StackFrame,
    StringValue,
    Variable,
)

MAIN_FRAME = "- {main}"


class ExceptionRenderer(TypeRenderer):
    def render(self, value: ExceptionValue) -> LineBuffer:
        return self._render_brief(value, outermost=True).prepend_inline("uncaught ")

    def render_one_line(self, value: ExceptionValue) -> str:
        """`uncaught Class, code X, message "...", in file "...", line N`."""
        flat = AnyRenderer(self.config.merge(split_multi_line_strings=False))
        file, line = self._location_values(value.location)
        code = f"code {self._flat_text(value.code)}".rstrip()
        return (
            f"uncaught {self._flat_text(value.class_name)}, "
            f"{code}, "
            f"message {flat.render(StringValue(value.message))}, "
            f"in file {flat.render(file)}, "
            f"line {flat.render(line)}"
        )

    def _flat_text(self, text: str) -> str:
        return escape_string(text, self.config.escape_tabs_in_strings, False)

    def _render_brief(self, value: ExceptionValue, outermost: bool) -> LineBuffer:
        file, line = self._location_values(value.location)
        result = LineBuffer.line(value.class_name)
        for detail in (
            LineBuffer.line(f"code {value.code}".rstrip()),
            LineBuffer.concat(["message ", self.any.render(StringValue(value.message))]),
            LineBuffer.concat(["file ", self.any.render(file)]),
            LineBuffer.concat(["line ", self.any.render(line)]),
        ):
            result.append_below(detail.indent())

        if self.config.show_exception_local_variables:
            _add_section(result, "local variables:", self._render_locals(value.locals))
        if self.config.show_exception_stack_trace:
            _add_section(result, "stack trace:", self._render_stack(value.stack))
        if outermost and self.config.show_exception_global_variables:
            _add_section(result, "global variables:", self._render_globals(value.globals))

        if value.previous is not None:
            previous = self._render_brief(value.previous, outermost=False)
        else:
            previous = LineBuffer.line("none")
        _add_section(result, "previous exception:", previous)
        return result

    def _render_locals(self, variables: list[Variable] | None) -> LineBuffer:
        if variables is None:
            return LineBuffer.line("unavailable")
        if not variables:
            return LineBuffer.line("none")

        shown = variables[: self.config.max_local_variables]
        return render_assignments(
            [self.any.render_variable(v.name) for v in shown],
            [self.any.render(v.value) for v in shown],
            " = ",
            ";",
            truncated=len(variables) > len(shown),
        )

    def _render_stack(self, frames: list[StackFrame]) -> LineBuffer:
        shown = frames[: self.config.max_stack_frames]
        blocks = [self._render_frame(frame) for frame in shown]
        if len(frames) > len(shown):
            blocks.append(LineBuffer.line(TRUNCATION_MARKER))
        blocks.append(LineBuffer.line(MAIN_FRAME))
        return LineBuffer.group(blocks)

    def _render_frame(self, frame: StackFrame) -> LineBuffer:
        file, line = self._location_values(frame.location)
        header = LineBuffer.concat(["- file ", self.any.render(file), ", line ", self.any.render(line)])
        return header.append_below(self._render_call(frame).indent())

    def _render_call(self, frame: StackFrame) -> LineBuffer:
        parts: list[LineBuffer | str] = []
        if frame.receiver is not None:
            parts += [self.any.render(frame.receiver), frame.call_type]
        elif frame.class_name is not None:
            parts += [frame.class_name, frame.call_type]
        parts.append(frame.function if frame.function is not None else "null")
        parts.append(self._render_args(frame.args))
        parts.append(";")
        return LineBuffer.concat(parts)

    def _render_args(self, args: list | None) -> LineBuffer:
        if args is None:
            return LineBuffer.line("( ? )")
        if not args:
            return LineBuffer.line("()")

        shown = args[: self.config.max_function_arguments]
        parts: list[LineBuffer | str] = ["( "]
        for k, arg in enumerate(shown):
            if k:
                parts.append(", ")
            parts.append(self.any.render(arg))
        if len(args) > len(shown):
            parts.append(", " + TRUNCATION_MARKER if shown else TRUNCATION_MARKER)
        parts.append(" )")
        return LineBuffer.concat(parts)

    def _render_globals(self, state: GlobalState | None) -> LineBuffer:
        if state is None:
            return LineBuffer.line("unavailable")
        if state.is_empty():
            return LineBuffer.line("none")

        names: list[LineBuffer] = []
        values = []
        for prop in state.static_properties:
            names.append(LineBuffer.concat(
                [f"{prop.access} static {prop.class_name}.", self.any.render_variable(prop.name)]
            ))
            values.append(prop.value)
        for var in state.static_variables:
            owner = f"{var.class_name}.{var.function}" if var.class_name else var.function
            names.append(LineBuffer.concat([f"function {owner}().", self.any.render_variable(var.name)]))
            values.append(var.value)
        for var in state.global_variables:
            names.append(LineBuffer.concat(["global ", self.any.render_variable(var.name)]))
            values.append(var.value)

        limit = self.config.max_global_variables
        return render_assignments(
            names[:limit],
            [self.any.render(v) for v in values[:limit]],
            " = ",
            ";",
            truncated=len(names) > limit,
        )

    @staticmethod
    def _location_values(location: CodeLocation | None):
        if location is None:
            return NullValue(), NullValue()
        return StringValue(location.file), IntValue(location.line)


def _add_section(result: LineBuffer, title: str, body: LineBuffer) -> None:
    result.add_line()
    result.add_line(title)
    result.append_below(body.indent())
