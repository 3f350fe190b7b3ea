# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: collects every differing file's statistics and rendered diff and keeps the report file on
disk up to date while the run is going.

the report file has two write modes:
- during the run, each file's section (anchor + diff + separator) is appended and synced to disk
  as soon as it is recorded, so a crash leaves every finished section readable
- at the end, the whole file is replaced with the complete document: summary table, running log,
  then every section in the order it was recorded

if the process dies between the last append and the final write, the file holds only raw
sections with no summary table. that is the expected partial result, not a corrupted report.
the final write goes through a temporary file and os.replace so it can not damage the sections
already on disk.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import html  # for escaping paths and log text
import logging  # for reporting where the report was written
import os  # for fsync and atomic replace
import tempfile  # for the staging file used by the final write
from dataclasses import dataclass  # for the per-file section record
from pathlib import Path  # for output path handling

from algorithm.renderer import ChangeStats

logger = logging.getLogger("patchdiff.report")

SECTION_SEPARATOR = "<hr>\n"

_STYLE = """<style>
body { font-family: Consolas, "SFMono-Regular", monospace; font-size: 13px; }
table.summary { border-collapse: collapse; margin-bottom: 24px; }
table.summary th, table.summary td { border: 1px solid #ccc; padding: 2px 8px; }
table.summary th { background: #eee; cursor: pointer; }
td.num { text-align: right; }
span.ins { background: #e6ffe6; }
span.del { background: #ffe6e6; text-decoration: line-through; }
span.lineno { color: #888; display: inline-block; min-width: 4em; }
span.lineno.changed { color: #000; }
div.gap { color: #888; }
div.error { color: #b00; white-space: pre-wrap; }
pre.log { background: #f8f8f8; padding: 8px; }
</style>"""

# click a header to sort the summary table by that column
_SORT_SCRIPT = """<script>
document.querySelectorAll("table.summary th").forEach(function (th, col) {
  th.addEventListener("click", function () {
    var body = th.closest("table").tBodies[0];
    var asc = th.dataset.asc !== "1";
    th.dataset.asc = asc ? "1" : "0";
    var rows = Array.prototype.slice.call(body.rows);
    rows.sort(function (a, b) {
      var x = a.cells[col].dataset.key || a.cells[col].textContent;
      var y = b.cells[col].dataset.key || b.cells[col].textContent;
      var nx = parseFloat(x), ny = parseFloat(y);
      var cmp = (!isNaN(nx) && !isNaN(ny)) ? nx - ny : x.localeCompare(y);
      return asc ? cmp : -cmp;
    });
    rows.forEach(function (r) { body.appendChild(r); });
  });
});
</script>"""


@dataclass(frozen=True)
class ReportSection:
    stats: ChangeStats
    fragment: str


def render_section(stats: ChangeStats, fragment: str) -> str:
    """Anchor + heading + fragment + separator for one differing file."""
    name = html.escape(stats.relative_path)
    return (
        f'<a id="{stats.path_id}"></a>\n'
        f"<h3>{name}</h3>\n"
        f'<div class="diff">\n{fragment}</div>\n'
        f"{SECTION_SEPARATOR}"
    )


def render_summary(sections: list[ReportSection]) -> str:
    rows = []
    for section in sections:
        s = section.stats
        rows.append(
            "<tr>"
            f'<td><a href="#{s.path_id}">{html.escape(s.relative_path)}</a></td>'
            f'<td class="num" data-key="{s.percent_changed:.6f}">{s.percent_changed:.2f}%</td>'
            f'<td class="num">{s.bytes_deleted}</td>'
            f'<td class="num">{s.bytes_inserted}</td>'
            f'<td class="num">{s.total_old}</td>'
            f'<td class="num">{s.total_new}</td>'
            "</tr>"
        )
    return (
        '<table class="summary">\n<thead><tr>'
        "<th>Path</th><th>Changed</th><th>Bytes deleted</th><th>Bytes inserted</th>"
        "<th>Total bytes old</th><th>Total bytes new</th>"
        "</tr></thead>\n<tbody>\n" + "\n".join(rows) + "\n</tbody>\n</table>\n"
    )


class ReportAggregator:
    """Single writer for the report file; append during the run, replace at the end."""

    def __init__(self, output_path: str | Path, title: str = "diff") -> None:
        self.output_path = Path(output_path)
        self.title = title
        self.sections: list[ReportSection] = []  # recorded in traversal order, never sorted
        self.log_lines: list[str] = []  # running textual log shown in the final document

    def start(self) -> None:
        """Truncate the report file at the beginning of a run."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text("", encoding="utf-8")

    def note(self, message: str) -> None:
        self.log_lines.append(message)

    def record(self, stats: ChangeStats, fragment: str) -> None:
        """Keep the file's section in memory and append it to disk right away."""
        self.sections.append(ReportSection(stats, fragment))
        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(render_section(stats, fragment))
            f.flush()
            os.fsync(f.fileno())  # section must survive if the process dies next

    def render_document(self) -> str:
        parts = [
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n",
            f"<title>{html.escape(self.title)}</title>\n{_STYLE}\n</head>\n<body>\n",
            f"<h2>{html.escape(self.title)}</h2>\n",
            render_summary(self.sections),
        ]
        if self.log_lines:
            log = "\n".join(html.escape(line) for line in self.log_lines)
            parts.append(f'<pre class="log">{log}</pre>\n')
        parts.extend(render_section(s.stats, s.fragment) for s in self.sections)
        parts.append(f"{_SORT_SCRIPT}\n</body>\n</html>\n")
        return "".join(parts)

    def finalize(self) -> Path:
        """Replace the appended log with the full document (last write wins)."""
        document = self.render_document()
        fd, tmp = tempfile.mkstemp(
            prefix=".patchdiff-", suffix=".tmp", dir=str(self.output_path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.output_path)
        except BaseException:
            # staging file is ours to clean up; the appended report stays untouched
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        logger.info("✓ Report written: %s (%d differing files)", self.output_path, len(self.sections))
        return self.output_path
