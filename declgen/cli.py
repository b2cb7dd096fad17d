"""CLI entrypoints for declgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import OUTPUT_LAYOUTS, ConfigError, load_config
from .dumper import Dumper
from .errors import SinkFailure
from .graph import GraphLoadError, load_graph
from .logging import configure_logging, get_logger

_DEFAULT_SINGLE_OUTPUT = "types.cs"
_DEFAULT_SPLIT_OUTPUT = "types"


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
        prog="declgen",
        description="Reconstruct C# declarations from an ahead-of-time compiled metadata graph.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    dump_parser = subparsers.add_parser(
        "dump",
        help="Render a graph document into C# declaration source.",
    )
    _add_verbose_option(dump_parser, suppress_default=True)
    dump_parser.add_argument(
        "graph",
        help="Path to the graph document (.json, .yml or .yaml).",
    )
    dump_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (single layout) or directory (split layouts).",
    )
    dump_parser.add_argument(
        "--layout",
        choices=OUTPUT_LAYOUTS,
        default=None,
        help="Write one file, one file per namespace, or one file per assembly.",
    )
    dump_parser.add_argument(
        "-e",
        "--exclude-namespace",
        action="append",
        default=[],
        metavar="NAMESPACE",
        help="Skip types in this namespace and its children. Repeatable.",
    )
    dump_parser.add_argument(
        "--exclude-defaults",
        action="store_true",
        help="Also skip the standard runtime and engine namespaces.",
    )
    dump_parser.add_argument(
        "--suppress-generated",
        action="store_true",
        help="Omit compiler-generated types and members.",
    )
    dump_parser.add_argument(
        "--config",
        default=None,
        help="Path to .declgen.yml (defaults to the graph document's directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for declgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    if args.command == "dump":
        graph_path = Path(args.graph).expanduser()
        try:
            config = load_config(Path(args.config) if args.config else graph_path)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")

        options = config.to_options(
            extra_exclusions=args.exclude_namespace,
            use_default_exclusions=bool(args.exclude_defaults),
            suppress_compiler_generated=bool(args.suppress_generated),
        )
        layout = args.layout or config.output.layout
        output = _resolve_output(args.output, config.output.path, layout)
        logger.debug("Options: %s", options)

        try:
            assemblies = load_graph(graph_path)
        except GraphLoadError as exc:
            parser.exit(1, f"{exc}\n")

        try:
            written = Dumper(options).dump(assemblies, output, layout=layout)
        except SinkFailure as exc:
            parser.exit(1, f"declgen dump failed: {exc}\n")
        if len(written) == 1:
            print(f"Declarations written to {_relativize(written[0])}")
        else:
            print(f"{len(written)} files written to {_relativize(output)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _resolve_output(cli_value: str | None, config_value: Path | None, layout: str) -> Path:
    if cli_value:
        return Path(cli_value).expanduser()
    if config_value is not None:
        return config_value
    return Path(_DEFAULT_SINGLE_OUTPUT if layout == "single" else _DEFAULT_SPLIT_OUTPUT)


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
