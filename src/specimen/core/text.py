"""Line-oriented text blocks that renderers build and compose."""

from __future__ import annotations

from collections.abc import Iterable

INDENT = "    "


class LineBuffer:
    """An ordered block of lines plus a flag for a trailing newline.

    No stored line ever contains a newline. Every mutating method returns
    the buffer itself so compositions can be chained.
    """

    def __init__(self, text: str = "", newline: str = "\n"):
        self._newline = newline
        self._lines = text.split(newline) if text else []
        self.has_ending_newline = bool(self._lines) and self._lines[-1] == ""
        if self.has_ending_newline:
            self._lines.pop()

    @classmethod
    def line(cls, text: str = "") -> LineBuffer:
        """A buffer holding `text`: one line, even when empty.

        Embedded newlines still start new lines, so no stored line ever
        contains one.
        """
        buf = cls()
        buf._lines = text.split(buf._newline)
        buf.has_ending_newline = False
        return buf

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> LineBuffer:
        buf = cls()
        for line in lines:
            buf._lines.extend(line.split(buf._newline))
        buf.has_ending_newline = False
        return buf

    @classmethod
    def concat(cls, parts: Iterable[LineBuffer | str]) -> LineBuffer:
        """Join parts inline, left to right.

        Same result as folding `append_inline` over the parts, but done in a
        single pass over the lines.
        """
        lines: list[str] = []
        for part in parts:
            part_lines = part.lines if isinstance(part, LineBuffer) else [part]
            for k, line in enumerate(part_lines):
                if k == 0 and lines:
                    lines[-1] += line
                else:
                    lines.append(line)
        return cls.from_lines(lines)

    @classmethod
    def group(cls, blocks: Iterable[LineBuffer]) -> LineBuffer:
        """Stack blocks vertically, with a blank line around multi-line ones."""
        result = cls()
        last_was_multi_line = False
        for k, block in enumerate(blocks):
            is_multi_line = block.is_multi_line
            if k != 0 and (last_was_multi_line or is_multi_line):
                result.add_line()
            result.append_below(block)
            last_was_multi_line = is_multi_line
        return result

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def is_multi_line(self) -> bool:
        return len(self._lines) > 1

    def __len__(self) -> int:
        return len(self._lines)

    def __str__(self) -> str:
        result = self._newline.join(self._lines)
        if self.has_ending_newline and self._lines:
            result += self._newline
        return result

    def __repr__(self) -> str:
        return f"LineBuffer({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineBuffer):
            return NotImplemented
        return self._lines == other._lines and self.has_ending_newline == other.has_ending_newline

    def copy(self) -> LineBuffer:
        buf = LineBuffer(newline=self._newline)
        buf._lines = list(self._lines)
        buf.has_ending_newline = self.has_ending_newline
        return buf

    def width(self) -> int:
        """Length of the last line, 0 for an empty buffer."""
        return len(self._lines[-1]) if self._lines else 0

    def append_inline(self, other: LineBuffer | str) -> LineBuffer:
        """Continue `other` on this buffer's last line.

        The first line of `other` is joined onto the last line; its remaining
        lines follow as they are.
        """
        other_lines = other.lines if isinstance(other, LineBuffer) else other.split(self._newline)
        for k, line in enumerate(other_lines):
            if k == 0 and self._lines:
                self._lines[-1] += line
            else:
                self._lines.append(line)
        return self

    def append_below(self, other: LineBuffer) -> LineBuffer:
        self._lines.extend(other.lines)
        return self

    def add_line(self, line: str = "") -> LineBuffer:
        self._lines.extend(line.split(self._newline))
        return self

    def prepend_line(self, line: str = "") -> LineBuffer:
        self._lines[0:0] = line.split(self._newline)
        return self

    def prepend_inline(self, text: str) -> LineBuffer:
        if self._lines:
            self._lines[0] = text + self._lines[0]
        else:
            self._lines.append(text)
        return self

    def wrap(self, prefix: str, suffix: str) -> LineBuffer:
        """Put `prefix` before the first line and `suffix` after the last."""
        return self.prepend_inline(prefix).append_inline(suffix)

    def wrap_lines(self, opening: str, closing: str) -> LineBuffer:
        """Put `opening` and `closing` on lines of their own."""
        return self.prepend_line(opening).add_line(closing)

    def pad_width(self, width: int) -> LineBuffer:
        """Right-pad the last line with spaces up to `width`."""
        missing = width - self.width()
        if missing > 0:
            self.append_inline(" " * missing)
        return self

    def indent(self, levels: int = 1) -> LineBuffer:
        """Indent every non-empty line; blank separator lines stay blank."""
        space = INDENT * levels
        self._lines = [space + line if line != "" else line for line in self._lines]
        return self

    def set_has_ending_newline(self, value: bool) -> LineBuffer:
        self.has_ending_newline = bool(value)
        return self
