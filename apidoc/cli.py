"""CLI entrypoint for apidoc."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import MODES, ConfigError, load_config
from .logging import configure_logging
from .mirrors import SnapshotError
from .orchestrator import Orchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apidoc",
        description="Generate cross-linked HTML API documentation from a program snapshot.",
    )
    parser.add_argument(
        "snapshot",
        help="Path to the program snapshot (.json, .yml or .yaml).",
    )
    parser.add_argument(
        "--no-code",
        action="store_true",
        help="Do not include source listings in the generated pages.",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default=None,
        help="Navigation mode: baked into every page (static) or loaded from nav.json (live-nav).",
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Output directory (defaults to docs).",
    )
    parser.add_argument(
        "--generate-app-cache",
        action="store_true",
        help="Write an appcache.manifest listing every generated file.",
    )
    parser.add_argument(
        "--omit-generation-time",
        action="store_true",
        help="Leave the generation timestamp out of page footers.",
    )
    parser.add_argument(
        "--library",
        action="append",
        dest="libraries",
        metavar="NAME",
        help="Only document the named library (repeatable).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .apidoc.yml (defaults to the current directory).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records, with timestamps, to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apidoc."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.no_code:
        config.include_source = False
    if args.mode:
        config.mode = args.mode
    if args.out:
        config.output_dir = Path(args.out)
    if args.generate_app_cache:
        config.generate_app_cache = True
    if args.omit_generation_time:
        config.omit_generation_time = True
    if args.libraries:
        config.libraries = list(args.libraries)

    try:
        Orchestrator().run(Path(args.snapshot), config)
    except (SnapshotError, FileNotFoundError) as exc:
        parser.exit(1, f"{exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"apidoc failed: {exc}\nRun with --verbose for more details.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
