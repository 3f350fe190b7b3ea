# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: runs one comparison of an old and a new directory tree, start to finish, one file at a time.

for each path present on both sides:
1. the equality check decides equal or different (equal files are skipped)
2. the extractor registry turns both sides into text (plaintext as-is, binaries disassembled)
3. the diff oracle turns the two texts into an edit script
4. the renderer turns the edit script into a diff fragment plus statistics
5. the report aggregator appends the section to the report file right away

everything runs sequentially on the calling thread; the report file has exactly one writer.
a problem with one file (failed disassembly, unreadable text) goes into that file's section and
the run moves on. only a bad root directory stops the run, and it does so before any file is read.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import html  # for escaping extraction error text
import logging  # for per-file status lines
import os  # for checking that the roots are directories
from collections.abc import Callable  # type hint for the diff oracle
from dataclasses import dataclass  # for the run summary
from functools import partial  # for binding the diff timeout
from pathlib import Path  # for the report path

from agent.equality import files_equal
from agent.extractors import ExtractorRegistry, ExtractResult, default_registry
from agent.tree_walk import FileEntry, pair_trees
from algorithm.edit_script import EditOp, compute_edit_script
from algorithm.renderer import RenderResult, render
from dashboard.config import Config, ConfigError
from dashboard.report import ReportAggregator

logger = logging.getLogger("patchdiff.run")

# (old text, new text) -> edit script
Differ = Callable[[str, str], list[EditOp]]


@dataclass(frozen=True)
class RunSummary:
    compared: int  # paths present on both sides
    differing: int
    only_old: int
    only_new: int
    output_path: Path


def check_roots(old_root: str, new_root: str) -> None:
    for root in (old_root, new_root):
        if not os.path.isdir(root):
            raise ConfigError(f"{root} is not a valid directory.")


def _failure_fragment(old: ExtractResult, new: ExtractResult) -> str:
    messages = [r.error for r in (old, new) if r.error]
    body = "\n".join(html.escape(m) for m in messages if m)
    return f'<div class="error">{body}</div>\n'


def diff_entry(
    entry: FileEntry,
    registry: ExtractorRegistry,
    config: Config,
    differ: Differ,
) -> tuple[RenderResult, ExtractResult, ExtractResult]:
    """Extract, diff and render one differing file."""
    old = registry.extract(entry.old_path)
    new = registry.extract(entry.new_path)

    if old.failed or new.failed:
        # stats still get recorded; with no edit script every count is zero
        empty = render(entry.relative_path, [], config.context_before, config.context_after)
        return RenderResult(_failure_fragment(old, new), empty.stats), old, new

    if not old.has_text or not new.has_text:
        # unregistered type: reported as different, no diff body
        return render(entry.relative_path, [], config.context_before, config.context_after), old, new

    script = differ(old.text or "", new.text or "")
    result = render(entry.relative_path, script, config.context_before, config.context_after)
    return result, old, new


def compare_trees(
    old_root: str,
    new_root: str,
    config: Config,
    aggregator: ReportAggregator | None = None,
    registry: ExtractorRegistry | None = None,
    differ: Differ | None = None,
) -> RunSummary:
    """Compare two trees and write the report; returns counts for the caller to print."""
    check_roots(old_root, new_root)

    if aggregator is None:
        aggregator = ReportAggregator(config.output_path)
    if registry is None:
        registry = default_registry(config.objdump_path, config.disassembler_timeout or None)
    if differ is None:
        differ = partial(compute_edit_script, timeout=config.diff_timeout)

    pairing = pair_trees(old_root, new_root)
    aggregator.start()

    for rel in pairing.only_old:
        logger.info("Only in old: %s", rel)
        aggregator.note(f"Only in old: {rel}")
    for rel in pairing.only_new:
        logger.info("Only in new: %s", rel)
        aggregator.note(f"Only in new: {rel}")

    differing = 0
    for entry in pairing.shared:
        if files_equal(entry.old_path, entry.new_path):
            logger.debug("Equal: %s", entry.relative_path)
            continue

        differing += 1
        logger.info("Not equal: %s", entry.relative_path)
        result, old, new = diff_entry(entry, registry, config, differ)
        for side in (old, new):
            if side.failed:
                logger.warning("Extraction failed: %s: %s", entry.relative_path, side.error)
                aggregator.note(f"Extraction failed: {entry.relative_path}: {side.error}")
        aggregator.record(result.stats, result.fragment)

    output = aggregator.finalize()
    return RunSummary(
        compared=len(pairing.shared),
        differing=differing,
        only_old=len(pairing.only_old),
        only_new=len(pairing.only_new),
        output_path=output,
    )
