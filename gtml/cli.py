"""CLI entrypoints for gtml commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .errors import CompileError
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gtml",
        description="Compile gtml component templates into static HTML.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Scaffold a new project with starter components and a route.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    _add_path_argument(init_parser)
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Write the scaffold even if the directory already exists.",
    )

    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile every route into the dist directory.",
    )
    _add_verbose_option(compile_parser, suppress_default=True)
    _add_path_argument(compile_parser)
    compile_parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and recompile when sources change.",
    )

    watch_parser = subparsers.add_parser(
        "watch",
        help="Compile, then recompile whenever a source file changes.",
    )
    _add_verbose_option(watch_parser, suppress_default=True)
    _add_path_argument(watch_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP compile service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gtml commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    if args.command == "init":
        try:
            root = orchestrator.run_init(args.path, force=bool(args.force))
        except FileExistsError as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"gtml init failed: {exc}\n")
        print(f"Project created at {_relativize(root)}")
    elif args.command == "compile" and not args.watch:
        try:
            report = orchestrator.run_compile(args.path)
        except (CompileError, ConfigError) as exc:
            parser.exit(1, f"Compilation failed: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"Compilation failed: {exc}\n")
        print(
            f"Compiled {len(report.routes)} route(s) from {report.components} component(s) "
            f"into {_relativize(report.dist)}"
        )
    elif args.command in {"compile", "watch"}:
        try:
            orchestrator.run_watch(args.path)
        except ConfigError as exc:
            parser.exit(1, f"Compilation failed: {exc}\n")
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
