"""CLI entrypoints for sandboxgen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .assembler import SandboxAssembler
from .config import ConfigError, load_config
from .errors import SandboxError
from .logging import configure_logging
from .tree import load_directory


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sandboxgen",
        description="Build sandbox descriptors from project source trees.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Assemble a sandbox descriptor for a local project directory.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    build_parser.add_argument(
        "--config",
        default=None,
        help="Path to a .sandboxgen.yml file (defaults to the project root).",
    )
    build_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the descriptor JSON to this file instead of stdout.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sandboxgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "build":
        config_path = Path(args.config) if args.config else Path(args.path)
        try:
            config = load_config(config_path)
            tree = load_directory(args.path)
            descriptor = SandboxAssembler.from_config(config).assemble_sync(tree)
        except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except SandboxError as exc:
            parser.exit(1, f"sandboxgen build failed: {exc}\n")
        payload = json.dumps(descriptor.to_dict(), indent=2)
        if args.output:
            Path(args.output).write_text(payload + "\n", encoding="utf-8")
            print(f"Descriptor written to {args.output}")
        else:
            print(payload)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
