"""Command-line interface for building triple stub generation contexts.

Notes:
    - Without `--input`, the generator behaves as a protoc plugin: it reads a `CodeGeneratorRequest`
      from stdin and writes a `CodeGeneratorResponse` to stdout.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from triple_stub_generator import __version__
from triple_stub_generator.run import run

logger = logging.getLogger(__name__)


def _add_verbose_argument(parser: argparse.ArgumentParser):
    """Add a verbose argument to a parser.

    Args:
        parser (argparse.ArgumentParser): The parser to add the argument to.
    """
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        default=False,
        action="store_true",
        help="log debug output, e.g. import and alias assignments.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Build generation contexts for triple RPC stubs.")

    parser.add_argument(
        "-i",
        "--input",
        type=str,
        default="",
        help="serialized FileDescriptorSet to read; runs as a protoc plugin on stdin/stdout if omitted.",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="",
        help="file to write the JSON contexts to; defaults to stdout.",
    )

    parser.add_argument(
        "-f",
        "--files",
        type=str,
        nargs="+",
        default=[],
        help="schema file paths to generate contexts for; defaults to every file that declares services.",
    )

    parser.add_argument(
        "--reserve",
        type=str,
        nargs="+",
        default=[],
        help="names that no import alias may take, e.g. names the rendered stubs import themselves.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
    )

    _add_verbose_argument(parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    return run(args)
