"""CLI entry point for specimen."""

from __future__ import annotations

import argparse
import sys

from loguru import logger


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="specimen",
        description="specimen - structured reports for uncaught Python exceptions. "
        "No code changes needed -- just run your script through this tool.",
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Python script to run",
    )
    parser.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments for the script",
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the exception as a JSON model instead of text",
    )
    output.add_argument(
        "--html",
        default=None,
        metavar="FILE",
        help="Write the exception report to FILE as a standalone HTML page",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        default=False,
        help="Print a sample exception report and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log what specimen is doing to stderr",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")
        logger.enable("specimen")

    if args.demo:
        _print_demo(args)
        return

    if args.script is None:
        parser.print_help()
        sys.exit(1)

    if not args.script.endswith(".py"):
        parser.error(f"Expected a .py file, got: {args.script}")

    from specimen.cli.runner import ScriptRunner

    runner = ScriptRunner()
    status = runner.run(
        script_path=args.script,
        script_args=args.script_args,
        output="json" if args.json else "html" if args.html else "text",
        html_path=args.html,
    )
    sys.exit(status)


def _print_demo(args: argparse.Namespace) -> None:
    from specimen.core.introspection import Introspection
    from specimen.core.json_model import JsonModelBuilder
    from specimen.core.printer import PrettyPrinter
    from specimen.output.formatter import OutputFormatter

    formatter = OutputFormatter()
    introspection = Introspection()
    model = introspection.mock_exception()
    if args.json:
        formatter.write_json(JsonModelBuilder(introspection).build(model))
        return

    text = PrettyPrinter().pretty_print_exception_info(model)
    if args.html:
        formatter.write_html(args.html, f"uncaught {model.class_name}", text)
    else:
        formatter.show(text)


if __name__ == "__main__":
    main()
