"""Terminal, HTML and JSON delivery of renderings."""

from specimen.output.formatter import OutputFormatter

__all__ = ["OutputFormatter"]
