"""Command-line interface for rendering and checking SBGN pathway data."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from .config import ConfigError, build_config
from .document import render
from .models import PathwayDataError
from .resources import ExampleNotFoundError, list_examples, load_example
from .themes import ThemeRegistry
from .validation import find_circular_connections, validate_pathway_data

logger = logging.getLogger(__name__)

SUBCOMMANDS = "render, validate, themes, example"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="sbgnpathway",
        description="Lay out SBGN-style pathway JSON and render it to SVG.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser("render", help="Render pathway JSON to SVG")
    render_parser.add_argument("input", nargs="?", help="Input pathway .json file")
    render_parser.add_argument("--text", help="Raw pathway JSON")
    render_parser.add_argument("--stdout", action="store_true", help="Write SVG to stdout")
    render_parser.add_argument("-o", "--output", help="Output .svg path")
    render_parser.add_argument("--theme", help="Built-in theme name")
    render_parser.add_argument("--config", help="JSON file with a configuration patch")
    render_parser.add_argument(
        "--no-auto-resize",
        action="store_true",
        help="Keep the configured height, even when the input's config sets autoResize",
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Check pathway JSON for structural problems"
    )
    validate_parser.add_argument("input", nargs="?", help="Input pathway .json file")
    validate_parser.add_argument("--text", help="Raw pathway JSON")
    validate_parser.add_argument("--format", choices=["text", "json"], default="text")

    subparsers.add_parser("themes", help="List built-in themes")

    example_parser = subparsers.add_parser("example", help="Print a bundled example pathway")
    example_parser.add_argument("name", nargs="?", help="Example name; omit to list them")
    example_parser.add_argument("--render", action="store_true", help="Print the example as SVG")

    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> tuple[str, str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, "<text>", None

    if path:
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(
                "E_IO_READ",
                f"input file not found: {input_path}",
                exit_code=2,
                file=str(input_path),
            )
        try:
            return input_path.read_text(encoding="utf-8"), str(input_path), input_path
        except OSError as exc:
            raise CliError(
                "E_IO_READ",
                f"failed to read input file: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Use a subcommand with FILE, --text, or pipe stdin.",
            exit_code=2,
        )

    data = sys.stdin.read()
    if not data.strip():
        raise CliError(
            "E_ARGS",
            "stdin was empty",
            hint="Pipe pathway JSON into stdin.",
            exit_code=2,
        )
    return data, "<stdin>", None


def _parse_json(source: str, source_name: str) -> Any:
    try:
        return json.loads(source)
    except json.JSONDecodeError as exc:
        raise CliError(
            "E_PARSE_JSON",
            f"failed to parse JSON: {exc.msg}",
            hint="Ensure the input is a JSON object with a nodes array.",
            exit_code=2,
            file=source_name,
            line=exc.lineno,
            column=exc.colno,
        )


def _load_config_patch(path: str) -> Any:
    source, source_name, _path = _read_input(path, None)
    return _parse_json(source, source_name)


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, PathwayDataError):
        return CliError(
            "E_DATA",
            str(exc),
            hint="Run `sbgnpathway validate` to list structural problems.",
            exit_code=3,
        )
    if isinstance(exc, ConfigError):
        return CliError(
            "E_CONFIG",
            str(exc),
            hint="Configuration sections must be JSON objects.",
            exit_code=3,
        )
    if isinstance(exc, ExampleNotFoundError):
        return CliError(
            "E_EXAMPLE",
            str(exc),
            hint=f"Available examples: {', '.join(list_examples())}.",
            exit_code=2,
        )
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "line": err.line,
            "column": err.column,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _render_config(args: argparse.Namespace, registry: ThemeRegistry) -> Any:
    theme_styles = None
    if args.theme:
        if not registry.has_theme(args.theme):
            names = ", ".join(theme["id"] for theme in registry.list_themes())
            raise CliError(
                "E_THEME",
                f"unknown theme: {args.theme}",
                hint=f"Use one of: {names}.",
                exit_code=2,
            )
        theme_styles = registry.get_theme(args.theme).styles
    patch = _load_config_patch(args.config) if args.config else None
    if patch is not None and not isinstance(patch, dict):
        raise ConfigError("configuration file must contain a JSON object")
    return build_config(patch, theme_styles=theme_styles)


def _handle_render(args: argparse.Namespace) -> int:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )

    config = _render_config(args, ThemeRegistry())
    source, source_name, source_path = _read_input(args.input, args.text)
    data = _parse_json(source, source_name)
    if isinstance(data, dict) and isinstance(data.get("config"), dict):
        # command-line flags outrank the data's own config block
        config = config.update(data["config"])
        data = {key: value for key, value in data.items() if key != "config"}
    if args.no_auto_resize:
        config = config.update({"layout": {"autoResize": False}})
    logger.debug("rendering %s", source_name)
    svg_text = render(data, config=config)

    if args.stdout or source_path is None:
        sys.stdout.write(svg_text)
        if not svg_text.endswith("\n"):
            sys.stdout.write("\n")
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".svg")
    _write_text(output_path, svg_text)
    print(f"Wrote {output_path}")
    return 0


def _handle_validate(args: argparse.Namespace) -> int:
    source, source_name, _path = _read_input(args.input, args.text)
    data = _parse_json(source, source_name)
    result = validate_pathway_data(data)
    cycles = find_circular_connections(data["nodes"]) if result.valid else []

    if args.format == "json":
        payload = result.to_dict()
        payload["cycles"] = cycles
        print(json.dumps(payload, indent=2))
    elif result.valid:
        print(f"{source_name}: valid")
        for cycle in cycles:
            print(f"warning: circular connection {' -> '.join(cycle)}")
    else:
        for error in result.errors:
            print(f"{source_name}: {error}")
    if not result.valid:
        count = len(result.errors)
        raise CliError(
            "E_VALIDATION",
            f"{count} structural problem(s) found",
            hint="Fix the listed problems; rendering skips unresolvable references.",
            exit_code=3,
            file=source_name,
        )
    return 0


def _handle_themes() -> int:
    for theme in ThemeRegistry().list_themes():
        print(f"{theme['id']:<12} {theme['description']}")
    return 0


def _handle_example(args: argparse.Namespace) -> int:
    if not args.name:
        for name in list_examples():
            print(name)
        return 0
    data = load_example(args.name)
    if args.render:
        sys.stdout.write(render(data))
    else:
        print(json.dumps(data, indent=2))
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    if not raw_argv:
        err = CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv("SBGNPATHWAY_DEBUG") == "1"
    if debug_enabled:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format

        if args.command == "render":
            return _handle_render(args)
        if args.command == "validate":
            return _handle_validate(args)
        if args.command == "themes":
            return _handle_themes()
        if args.command == "example":
            return _handle_example(args)

        raise CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint=f"Use subcommands: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
