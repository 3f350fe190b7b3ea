# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: turns one file's edit script into a compact, readable HTML fragment plus change statistics.

how it works, step by step:
- escape every operation's text for HTML, keep spaces visible with &nbsp;, and turn newlines into
  explicit <br> markers. unchanged carriage returns are dropped; an inserted or deleted one shows
  as a CR symbol so line-ending edits still mark their line. each line piece of an operation gets
  its own styled span (ins / del / eq) so every line an insertion or deletion touches carries its
  markup
- count bytes on the raw (unescaped) payloads: inserted, deleted, equal
- derive old/new totals and percentages from those counts
- split the markup on <br> into numbered lines and flag the ones holding ins/del markup
- mark changed lines plus a window of context lines around them as shown
- emit shown lines in order with their index, and an ellipsis wherever lines were skipped

percentage convention: a side whose total is 0 bytes (for example a file created from nothing)
contributes 0% instead of dividing by zero.
"""

from __future__ import annotations

import hashlib
import html
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import NamedTuple

from algorithm.edit_script import EditKind, EditOp

LINE_BREAK = "<br>"
GAP_MARKER = '<div class="gap">&hellip;</div>\n'
CR_MARK = "&#9229;"  # U+240D, symbol for carriage return

_SPAN_CLASS = {
    EditKind.INSERT: "ins",
    EditKind.DELETE: "del",
    EditKind.EQUAL: "eq",
}
_CHANGE_MARKUP = ('<span class="ins">', '<span class="del">')


@dataclass(frozen=True)
class ChangeStats:
    relative_path: str
    path_id: str  # anchor key only, never used for equality
    percent_changed: float
    percent_old: float
    percent_new: float
    bytes_inserted: int
    bytes_deleted: int
    bytes_equal: int
    total_old: int
    total_new: int


@dataclass(frozen=True)
class DiffedLine:
    index: int
    text: str
    is_change: bool
    shown: bool = False


class RenderResult(NamedTuple):
    fragment: str
    stats: ChangeStats


class ByteTally(NamedTuple):
    inserted: int = 0
    deleted: int = 0
    equal: int = 0

    def add(self, op: EditOp) -> ByteTally:
        size = len(op.text.encode("utf-8"))
        if op.kind is EditKind.INSERT:
            return self._replace(inserted=self.inserted + size)
        if op.kind is EditKind.DELETE:
            return self._replace(deleted=self.deleted + size)
        return self._replace(equal=self.equal + size)


def path_id(relative_path: str) -> str:
    """Stable, fragment-safe identifier for a relative path."""
    return hashlib.md5(relative_path.encode("utf-8")).hexdigest()


def _percent(part: int, total: int) -> float:
    # zero-byte side -> 0%
    if total == 0:
        return 0.0
    return part / total * 100


def compute_stats(relative_path: str, tally: ByteTally) -> ChangeStats:
    total_old = tally.equal + tally.deleted
    total_new = tally.equal + tally.inserted
    pct_old = _percent(tally.deleted, total_old)
    pct_new = _percent(tally.inserted, total_new)
    return ChangeStats(
        relative_path=relative_path,
        path_id=path_id(relative_path),
        percent_changed=(pct_old + pct_new) / 2,
        percent_old=pct_old,
        percent_new=pct_new,
        bytes_inserted=tally.inserted,
        bytes_deleted=tally.deleted,
        bytes_equal=tally.equal,
        total_old=total_old,
        total_new=total_new,
    )


def markup_op(op: EditOp) -> str:
    """Escape one operation and wrap each of its line pieces in a styled span."""
    css = _SPAN_CLASS[op.kind]
    # a changed CR or newline stays visible inside its span; unchanged ones vanish
    if op.kind is EditKind.EQUAL:
        cr_mark, newline_mark = "", ""
    else:
        cr_mark, newline_mark = CR_MARK, "&para;"
    text = html.escape(op.text, quote=False).replace(" ", "&nbsp;").replace("\r", cr_mark)
    pieces = text.split("\n")

    out: list[str] = []
    last = len(pieces) - 1
    for n, piece in enumerate(pieces):
        if n < last:
            piece += newline_mark
        if piece:
            out.append(f'<span class="{css}">{piece}</span>')
        if n < last:
            out.append(LINE_BREAK)
    return "".join(out)


def segment_lines(markup: str) -> list[DiffedLine]:
    """Split markup on line breaks, dropping empty fragments, and classify each line."""
    fragments = [f for f in markup.split(LINE_BREAK) if f]
    return [
        DiffedLine(index=i, text=text, is_change=any(m in text for m in _CHANGE_MARKUP))
        for i, text in enumerate(fragments)
    ]


def select_context(
    lines: Sequence[DiffedLine], context_before: int = 1, context_after: int = 1
) -> list[DiffedLine]:
    """Mark changed lines and their surrounding context as shown."""
    if context_before < 0 or context_after < 0:
        raise ValueError("context sizes must be non-negative")

    shown: set[int] = set()
    for line in lines:
        if not line.is_change:
            continue
        lo = max(0, line.index - context_before)
        hi = min(len(lines) - 1, line.index + context_after)
        shown.update(range(lo, hi + 1))
    return [replace(line, shown=line.index in shown) for line in lines]


def _emit_line(line: DiffedLine) -> str:
    if line.is_change:
        label = f'<span class="lineno changed"><b>{line.index}</b></span>'
    else:
        label = f'<span class="lineno">{line.index}</span>'
    return f'<div class="line">{label}{line.text}</div>\n'


def emit(lines: Sequence[DiffedLine]) -> str:
    """Join the shown lines in order, with a gap marker wherever lines were elided."""
    out: list[str] = []
    prev = -1  # virtual line before index 0
    for line in lines:
        if not line.shown:
            continue
        if line.index != prev + 1:
            out.append(GAP_MARKER)
        out.append(_emit_line(line))
        prev = line.index
    if lines and prev != lines[-1].index:  # trailing lines were elided (or none were shown)
        out.append(GAP_MARKER)
    return "".join(out)


def render(
    relative_path: str,
    script: Iterable[EditOp],
    context_before: int = 1,
    context_after: int = 1,
) -> RenderResult:
    """Render one file's edit script into a context-windowed fragment and its stats."""
    tally = ByteTally()
    pieces: list[str] = []
    for op in script:
        pieces.append(markup_op(op))
        tally = tally.add(op)

    lines = select_context(segment_lines("".join(pieces)), context_before, context_after)
    return RenderResult(fragment=emit(lines), stats=compute_stats(relative_path, tally))
