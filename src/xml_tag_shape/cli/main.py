"""Main CLI entry point for the xml-tag-shape command-line tool.

Prints the deduplicated tag shape of one XML document. Exit codes separate a
clean run from a truncated one and from a missing input.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from xml_tag_shape import __version__
from xml_tag_shape.api import DEFAULT_SOURCE, shape_file
from xml_tag_shape.shared import (
    ConfigError,
    ShapeConfig,
    ShapeError,
    SourceUnavailableError,
    configure_logging,
    get_logger,
)

EXIT_OK = 0
EXIT_TRUNCATED = 1
EXIT_SOURCE_UNAVAILABLE = 2
EXIT_INTERRUPTED = 130


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-tag-shape",
        description="Print the distinct tag structure of an XML document"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path(DEFAULT_SOURCE),
        help=f"XML file to analyse (default: {DEFAULT_SOURCE})"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--indent",
        type=int,
        help="Spaces per nesting level (default: 2)"
    )
    parser.add_argument(
        "--unsorted",
        action="store_true",
        help="Keep siblings in first-seen order instead of sorting by name"
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Write a JSON summary with metrics and diagnostics to stderr"
    )

    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--strict",
        action="store_true",
        help="Warn about stray closing tags and truncated input"
    )
    policy.add_argument(
        "--silent",
        action="store_true",
        help="Ignore stray closing tags and do not report truncation"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Verbose logging (repeat for debug output)"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser


def build_config(args: argparse.Namespace) -> ShapeConfig:
    """Combine the config file, policy preset and flag overrides."""
    if args.config:
        config = ShapeConfig.from_file(args.config)
    elif args.strict:
        config = ShapeConfig.strict()
    elif args.silent:
        config = ShapeConfig.quiet()
    else:
        config = ShapeConfig.lenient()

    if args.config and args.strict:
        strict = ShapeConfig.strict().builder
        config = config.override(
            builder__underflow_policy=strict.underflow_policy,
            builder__truncation_policy=strict.truncation_policy,
        )
    elif args.config and args.silent:
        quiet = ShapeConfig.quiet().builder
        config = config.override(
            builder__underflow_policy=quiet.underflow_policy,
            builder__truncation_policy=quiet.truncation_policy,
        )

    if args.indent is not None:
        config = config.override(render__indent_width=args.indent)
    if args.unsorted:
        config = config.override(render__sort_children=False)

    return config


def cmd_shape(args: argparse.Namespace) -> int:
    """Shape one file, print it, and pick the exit code."""
    logger = get_logger(__name__, None, "cli")

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_SOURCE_UNAVAILABLE

    try:
        result = shape_file(args.path, config)
    except SourceUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SOURCE_UNAVAILABLE
    except ShapeError as e:
        logger.error("Shape extraction aborted", extra={"file": str(args.path)})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_TRUNCATED

    sys.stdout.write(result.render(config.render))

    if args.summary:
        print(json.dumps(result.summary(), indent=2), file=sys.stderr)

    if result.truncated:
        return EXIT_TRUNCATED
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    configure_logging(-1 if args.quiet else args.verbose)

    try:
        return cmd_shape(args)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
