# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: command line launcher for patchdiff: checks the two directories, runs the comparison, and
prints where the report went. the terminal shows a small banner and one status line per file that
differs or exists on only one side.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import argparse  # for parsing command line arguments
import logging  # for the per-file status lines
import re  # for colouring status words in log messages
import sys  # for exit codes and stdout
from dataclasses import replace  # for applying CLI overrides to the frozen config
from pathlib import Path  # for the report path
from typing import Any  # type hint for the override values

from colorama import init as _colorama_init
from dotenv import load_dotenv

from app.compare import compare_trees
from dashboard.config import ConfigError, load_config, validate

# ANSI color codes (enabled on Windows terminals by colorama)
PURPLE = "\x1b[35m"
CYAN = "\x1b[36m"
RED = "\x1b[31m"
GOLDEN = "\x1b[33m"
GREEN = "\x1b[32m"
DIM = "\x1b[2m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"


class ColoredStatusFormatter(logging.Formatter):
    """Shows only the message, with status words coloured."""

    def __init__(self, *args, use_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record):
        msg = super().format(record)
        if not self.use_color:
            return msg

        patterns = [
            (r"^(Not equal:)", RED + r"\1" + RESET),
            (r"^(Only in (?:old|new):)", GOLDEN + r"\1" + RESET),
            (r"^(Extraction failed)", RED + r"\1" + RESET),
            (r"(✓)", GREEN + r"\1" + RESET),
        ]
        for pattern, replacement in patterns:
            msg = re.sub(pattern, replacement, msg)
        return msg


def setup_logging(verbose: bool = False, use_color: bool = True) -> logging.Logger:
    """Route every patchdiff.* logger to stdout, message only."""
    logger = logging.getLogger("patchdiff")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in list(logger.handlers):  # calling twice must not double every line
        logger.removeHandler(h)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredStatusFormatter("%(message)s", use_color=use_color))
    logger.addHandler(handler)
    logger.propagate = False  # prevent duplicate messages
    return logger


def print_banner(use_color: bool = True) -> None:
    if use_color:
        cyan, mag, dim, bold, reset = CYAN, PURPLE, DIM, BOLD, RESET
    else:
        cyan = mag = dim = bold = reset = ""

    banner = f"""
{dim}┌──────────────────────────────────────────┐{reset}
{dim}│{reset}{cyan}{bold}        p  a  t  c  h  d  i  f  f{reset}{dim}         │{reset}
{dim}├──────────────────────────────────────────┤{reset}
{dim}│{reset}  {mag}old{reset} ──▶ {mag}new{reset}   what changed, and where   {dim}│{reset}
{dim}└──────────────────────────────────────────┘{reset}
"""
    print(banner)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchdiff",
        description="Compare two directory trees and write an HTML report of every difference.",
    )
    parser.add_argument("old_dir", help="directory with the old (unpatched) files")
    parser.add_argument("new_dir", help="directory with the new (patched) files")
    parser.add_argument("-o", "--output", help="report path (default: config output_path)")
    parser.add_argument(
        "--context-before", type=int, help="unchanged lines shown before each change"
    )
    parser.add_argument("--context-after", type=int, help="unchanged lines shown after each change")
    parser.add_argument("-v", "--verbose", action="store_true", help="also list equal files")
    parser.add_argument("--no-banner", action="store_true", help="do not print the banner")
    parser.add_argument("--no-color", action="store_true", help="plain terminal output")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()  # pick up PATCHDIFF_* settings from .env before reading config
    args = build_parser().parse_args(argv)
    use_color = not args.no_color
    if use_color:
        _colorama_init()  # enable ANSI color codes on Windows terminals
    setup_logging(verbose=args.verbose, use_color=use_color)

    if not args.no_banner:
        print_banner(use_color)

    try:
        cfg = load_config()
        overrides: dict[str, Any] = {}
        if args.output:
            overrides["output_path"] = Path(args.output)
        if args.context_before is not None:
            overrides["context_before"] = args.context_before
        if args.context_after is not None:
            overrides["context_after"] = args.context_after
        cfg = replace(cfg, **overrides)
        validate(cfg)
        summary = compare_trees(args.old_dir, args.new_dir, cfg)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        # hashing or report I/O failed; sections already on disk are left as they are
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(
        f"\n{summary.differing} of {summary.compared} shared files differ"
        f" ({summary.only_old} only in old, {summary.only_new} only in new)."
    )
    print(f"Report: {summary.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
