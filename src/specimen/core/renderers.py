"""Text renderers, one per value variant, plus the dispatching `AnyRenderer`."""

from __future__ import annotations

import functools
import math
from collections.abc import Sequence

from specimen.core.text import LineBuffer
from specimen.core.values import (
    BoolValue,
    CompositeValue,
    FloatValue,
    IntValue,
    NullValue,
    ResourceValue,
    SequenceValue,
    StringValue,
    UnknownValue,
    Value,
    Variant,
)
from specimen.utils.config import PrinterConfig

TRUNCATION_MARKER = "..."

_FIXED_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\r": "\\r",
    "\v": "\\v",
    "\f": "\\f",
}


@functools.cache
def escape_char(char: str, escape_tabs: bool, split_lines: bool, is_bytes: bool = False) -> str:
    """Escaped form of one character (or byte, as chr(b)) inside a double-quoted literal."""
    if char in _FIXED_ESCAPES:
        return _FIXED_ESCAPES[char]
    if char == "\t":
        return "\\t" if escape_tabs else "\t"
    if char == "\n":
        return ('\\n"\nb"' if is_bytes else '\\n"\n"') if split_lines else "\\n"

    code = ord(char)
    if 0x20 <= code <= 0x7E:
        return char
    if code >= 0x80 and char.isprintable() and not is_bytes:
        return char
    if code <= 0xFF:
        return f"\\x{code:02x}"
    if code <= 0xFFFF:
        return f"\\u{code:04x}"
    return f"\\U{code:08x}"


@functools.lru_cache(maxsize=4096)
def escape_string(text: str | bytes, escape_tabs: bool = False, split_lines: bool = True) -> str:
    """Escape the body of a string literal; memoized per exact input."""
    if isinstance(text, bytes):
        return "".join(escape_char(chr(b), escape_tabs, split_lines, is_bytes=True) for b in text)
    return "".join(escape_char(c, escape_tabs, split_lines) for c in text)


# Decimal digits per chunk when converting ints too long for str() (which
# refuses more than sys.get_int_max_str_digits() digits, 4300 by default).
INT_CHUNK_DIGITS = 4000
INT_CHUNK = 10**INT_CHUNK_DIGITS


def format_int(value: int) -> str:
    """Decimal form of any int, however many digits it has."""
    if -INT_CHUNK < value < INT_CHUNK:
        return str(value)

    sign = "-" if value < 0 else ""
    rest = abs(value)
    chunks = []
    while rest:
        rest, chunk = divmod(rest, INT_CHUNK)
        chunks.append(chunk)
    head, *tail = reversed(chunks)
    return sign + str(head) + "".join(f"{chunk:0{INT_CHUNK_DIGITS}d}" for chunk in tail)


def format_float(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    # repr keeps ".0" on integral values (or uses an exponent), so 1.0 stays "1.0".
    return repr(value)


class TypeRenderer:
    """Base for the per-variant renderers.

    Nested values are rendered through `self.any`, so every renderer sees
    the full dispatch table.
    """

    def __init__(self, any_renderer: AnyRenderer):
        self.any = any_renderer

    @property
    def config(self) -> PrinterConfig:
        return self.any.config

    def render(self, value) -> LineBuffer:
        raise NotImplementedError


class NullRenderer(TypeRenderer):
    def render(self, value: NullValue) -> LineBuffer:
        return LineBuffer.line("null")


class BoolRenderer(TypeRenderer):
    def render(self, value: BoolValue) -> LineBuffer:
        return LineBuffer.line("true" if value.value else "false")


class IntRenderer(TypeRenderer):
    def render(self, value: IntValue) -> LineBuffer:
        return LineBuffer.line(format_int(value.value))


class FloatRenderer(TypeRenderer):
    def render(self, value: FloatValue) -> LineBuffer:
        return LineBuffer.line(format_float(value.value))


class StringRenderer(TypeRenderer):
    def render(self, value: StringValue) -> LineBuffer:
        text = value.value
        limit = self.config.max_string_length
        truncated = len(text) > limit
        if truncated:
            text = text[:limit]

        escaped = escape_string(
            text,
            self.config.escape_tabs_in_strings,
            self.config.split_multi_line_strings,
        )
        opening = 'b"' if isinstance(text, bytes) else '"'
        closing = TRUNCATION_MARKER if truncated else '"'
        return LineBuffer.from_lines([opening + escaped + closing])


class ResourceRenderer(TypeRenderer):
    def render(self, value: ResourceValue) -> LineBuffer:
        return LineBuffer.line(f"{value.kind} #{value.id}")


class UnknownRenderer(TypeRenderer):
    def render(self, value: UnknownValue) -> LineBuffer:
        return LineBuffer.line("unknown type")


class SequenceRenderer(TypeRenderer):
    """Lists, tuples, sets and dicts.

    Only direct ancestors count as recursion: a sequence reached twice as
    siblings is expanded both times, with the same `#id`.
    """

    def __init__(self, any_renderer: AnyRenderer):
        super().__init__(any_renderer)
        self._stack: list[int] = []

    def render(self, value: SequenceValue) -> LineBuffer:
        prefix = f"#{value.id} " if value.references > 1 else ""

        if value.id in self._stack:
            return LineBuffer.line(f"{prefix}{value.kind}( *recursion* )")

        self._stack.append(value.id)
        try:
            result = self._render_entries(value)
        finally:
            self._stack.pop()

        return result.prepend_inline(prefix) if prefix else result

    def _render_entries(self, value: SequenceValue) -> LineBuffer:
        limit = self.config.max_array_entries
        entries = value.entries[:limit]
        truncated = len(value.entries) > len(entries)

        values = [self.any.render(entry.value) for entry in entries]
        keys = [self.any.render(entry.key) for entry in entries] if value.is_associative else None

        if keys is None:
            one_line = values
        else:
            one_line = [LineBuffer.concat([k, " => ", v]) for k, v in zip(keys, values)]

        if not self._should_be_multi_line(one_line, truncated):
            if not one_line:
                return LineBuffer.line(f"{value.kind}()")
            parts: list[LineBuffer | str] = [f"{value.kind}( "]
            for k, entry in enumerate(one_line):
                if k:
                    parts.append(", ")
                parts.append(entry)
            parts.append(" )")
            return LineBuffer.concat(parts)

        if keys is None:
            lines = [LineBuffer.concat([v, ","]) for v in values]
            if truncated:
                lines.append(LineBuffer.line(TRUNCATION_MARKER))
            block = LineBuffer.group(lines)
        else:
            block = render_assignments(keys, values, " => ", ",", truncated)
        return block.indent().wrap_lines(f"{value.kind}(", ")")

    def _should_be_multi_line(self, entries: list[LineBuffer], truncated: bool) -> bool:
        if truncated:
            return True
        total_width = 0
        for entry in entries:
            if entry.is_multi_line:
                return True
            total_width += entry.width()
        return total_width > self.config.multi_line_threshold


class CompositeRenderer(TypeRenderer):
    """Objects. Each id is expanded at most once per print."""

    def __init__(self, any_renderer: AnyRenderer):
        super().__init__(any_renderer)
        self._printed: set[int] = set()

    def render(self, value: CompositeValue) -> LineBuffer:
        header = f"{value.class_name} #{value.id}"
        if value.id in self._printed:
            return LineBuffer.line(f"{header} {{...}}")
        self._printed.add(value.id)

        if not value.fields:
            return LineBuffer.line(f"{header} {{}}")

        fields = value.fields[: self.config.max_object_properties]
        truncated = len(value.fields) > len(fields)
        names = [LineBuffer.concat([f"{f.access} ", self.any.render_variable(f.name)]) for f in fields]
        values = [self.any.render(f.value) for f in fields]
        block = render_assignments(names, values, " = ", ";", truncated)
        return block.indent().wrap_lines(f"{header} {{", "}")


class VariableRenderer(TypeRenderer):
    """Variable names: `$name`, or `${"..."}` when not an identifier."""

    def __init__(self, any_renderer: AnyRenderer):
        super().__init__(any_renderer)
        self._cache: dict[str, LineBuffer] = {}

    def render(self, name: str) -> LineBuffer:
        cached = self._cache.get(name)
        if cached is None:
            if name.isidentifier():
                cached = LineBuffer.line(f"${name}")
            else:
                cached = LineBuffer.concat(["${", self.any.render(StringValue(name)), "}"])
            self._cache[name] = cached
        return cached.copy()


def render_assignments(
    names: Sequence[LineBuffer],
    values: Sequence[LineBuffer],
    operator: str,
    terminator: str,
    truncated: bool = False,
) -> LineBuffer:
    """Vertical `name <op> value<term>` list with the operators lined up.

    Single-line names are padded to a common width; entries spanning
    several lines are set apart by blank lines. A truncated list ends with
    the `...` marker.
    """
    width = max((n.width() for n in names if not n.is_multi_line), default=0)
    lines = []
    for name, value in zip(names, values):
        name = name.copy()
        if not name.is_multi_line:
            name.pad_width(width)
        lines.append(LineBuffer.concat([name, operator, value, terminator]))
    if truncated:
        lines.append(LineBuffer.line(TRUNCATION_MARKER))
    return LineBuffer.group(lines)


class AnyRenderer:
    """Renders any value by dispatching on its variant.

    One instance serves one print: the sequence ancestor stack and the set
    of objects already printed live on the per-variant renderers.
    """

    def __init__(self, config: PrinterConfig | None = None):
        from specimen.core.exception_renderer import ExceptionRenderer

        self.config = config or PrinterConfig()
        self._renderers: dict[Variant, TypeRenderer] = {
            Variant.NULL: NullRenderer(self),
            Variant.BOOL: BoolRenderer(self),
            Variant.INT: IntRenderer(self),
            Variant.FLOAT: FloatRenderer(self),
            Variant.STRING: StringRenderer(self),
            Variant.SEQUENCE: SequenceRenderer(self),
            Variant.COMPOSITE: CompositeRenderer(self),
            Variant.RESOURCE: ResourceRenderer(self),
            Variant.EXCEPTION: ExceptionRenderer(self),
            Variant.UNKNOWN: UnknownRenderer(self),
        }
        self._variables = VariableRenderer(self)

    def render(self, value: Value) -> LineBuffer:
        renderer = self._renderers.get(getattr(value, "variant", None), self._renderers[Variant.UNKNOWN])
        return renderer.render(value)

    def render_variable(self, name: str) -> LineBuffer:
        return self._variables.render(str(name))
