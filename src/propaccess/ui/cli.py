"""Command line access to property paths inside JSON documents."""

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from types import SimpleNamespace
from typing import TYPE_CHECKING, TextIO

from dotenv import load_dotenv

from propaccess.config import (
    ConfigurationError,
    configure_logging,
    get_resolver_config,
    get_subprocess_config,
)
from propaccess.config.resolver import KNOWN_NAMINGS
from propaccess.errors import InvalidArgumentError
from propaccess.resolver import PropertyResolver

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

STDIN_DOCUMENT = "-"


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve property paths in JSON documents")
    parser.add_argument(
        "--naming",
        choices=sorted(KNOWN_NAMINGS),
        help="Accessor naming convention (defaults to PROPACCESS_NAMING or snake)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log resolver decisions at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    get = subparsers.add_parser("get", help="Print the value at a property path as JSON")
    get.add_argument("document", type=str, help="JSON file, or - for stdin")
    get.add_argument("path", type=str, help="Dot-delimited property path")

    names = subparsers.add_parser("names", help="List the gettable property names of an object")
    names.add_argument("document", type=str, help="JSON file, or - for stdin")
    names.add_argument("path", type=str, nargs="?", help="Property path of the object to inspect")

    serve = subparsers.add_parser(
        "serve",
        help="Answer property paths read from stdin, one per line",
    )
    serve.add_argument("document", type=str, help="JSON file")

    return parser.parse_args(list(argv))


def load_document(source: str, *, stdin: TextIO | None = None) -> object:
    """Load JSON with objects turned into plain attribute bags."""

    def object_hook(values: dict[str, object]) -> SimpleNamespace:
        return SimpleNamespace(**values)

    if source == STDIN_DOCUMENT:
        return json.load(stdin or sys.stdin, object_hook=object_hook)
    with Path(source).open(encoding="utf-8") as handle:
        return json.load(handle, object_hook=object_hook)


def _to_json(value: object) -> object:
    if isinstance(value, SimpleNamespace):
        return vars(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_value(value: object) -> str:
    return json.dumps(value, default=_to_json, ensure_ascii=False)


def serve(
    document: object,
    *,
    resolver: PropertyResolver,
    stdin: TextIO,
    stdout: TextIO,
) -> None:
    """Answer one property path per input line until EOF or the quit command."""

    config = get_subprocess_config()
    print(config.ready_marker, file=stdout, flush=True)
    for raw_line in iter(stdin.readline, ""):
        line = raw_line.strip()
        if line == config.quit_command:
            break
        if line:
            print(dump_value(resolver.get_property_path(document, line)), file=stdout)
        print(config.ready_marker, file=stdout, flush=True)
    log.info("Worker stopped")


def _build_resolver(args: argparse.Namespace) -> PropertyResolver:
    config = get_resolver_config()
    if args.naming:
        config = replace(config, naming=args.naming)
    return PropertyResolver(config=config)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        resolver = _build_resolver(parsed_args)
        document = load_document(parsed_args.document)
    except (ValueError, OSError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "get":
            print(dump_value(resolver.get_property_path(document, parsed_args.path)))
        elif parsed_args.command == "names":
            target = (
                document
                if parsed_args.path is None
                else resolver.get_property_path(document, parsed_args.path)
            )
            for name in resolver.get_gettable_property_names(target):
                print(name)
        elif parsed_args.command == "serve":
            serve(document, resolver=resolver, stdin=sys.stdin, stdout=sys.stdout)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except InvalidArgumentError:
        log.exception("Cannot inspect this value")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
