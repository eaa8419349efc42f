"""Rich-based delivery of renderings: terminal, standalone HTML and JSON."""

from __future__ import annotations

import html
import io
from typing import Any

from loguru import logger
from rich.console import Console
from rich.text import Text

from specimen.core.json_model import to_json
from specimen.core.values import CodeLocation

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{title}</title>
<style>
{{stylesheet}}
body {{{{
    color: {{foreground}};
    background-color: {{background}};
}}}}
</style>
</head>
<body>
<pre style="font-family: Menlo, 'DejaVu Sans Mono', Consolas, monospace">{{code}}</pre>
</body>
</html>
"""


def _plain_console(**kwargs: Any) -> Console:
    # Renderings are literal text: no markup, emoji codes or highlighting.
    return Console(markup=False, emoji=False, highlight=False, **kwargs)


class OutputFormatter:
    """Writes renderings to the terminal and exports them as HTML or JSON."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None):
        self._console = console or _plain_console()
        self._err_console = err_console or _plain_console(stderr=True)

    def show(self, text: str) -> None:
        self._console.print(Text(text.rstrip("\n")), soft_wrap=True)

    def show_exception(self, text: str, location: CodeLocation | None = None) -> None:
        """Print an exception rendering, then the source around the failing line."""
        self._err_console.print(Text(text.rstrip("\n")), soft_wrap=True)
        if location is not None and location.source_code:
            self._err_console.print()
            self._show_source_snippet(location.source_code, location.line, location.file)

    def _show_source_snippet(self, lines: dict[int, str], current_line: int, filename: str) -> None:
        source = Text()
        source.append(f"{filename}\n", style="dim")
        for lineno in sorted(lines):
            marker = ">>>" if lineno == current_line else "   "
            style = "bold red" if lineno == current_line else None
            source.append(f" {marker} {lineno:4d} │ {lines[lineno]}\n", style=style)
        self._err_console.print(source, soft_wrap=True, end="")

    def to_html(self, title: str, text: str) -> str:
        """Wrap a rendering in a standalone HTML page."""
        console = _plain_console(record=True, file=io.StringIO())
        console.print(Text(text.rstrip("\n")), soft_wrap=True)
        safe_title = html.escape(title).replace("{", "{{").replace("}", "}}")
        return console.export_html(code_format=_HTML_TEMPLATE.format(title=safe_title), inline_styles=True)

    def write_html(self, path: str, title: str, text: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_html(title, text))
        logger.debug("Wrote HTML report to {}", path)

    def write_json(self, model: dict[str, Any]) -> None:
        self._console.print(to_json(model, indent=2), soft_wrap=True)

    def show_error(self, message: str) -> None:
        self._err_console.print(Text.assemble(("Error: ", "bold red"), message), soft_wrap=True)

    def show_info(self, message: str) -> None:
        self._err_console.print(Text(message, style="dim"), soft_wrap=True)
