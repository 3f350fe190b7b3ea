# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: the edit script types (Equal/Insert/Delete operations over text) and the adapter around the
diff_match_patch oracle that produces them. a semantic cleanup pass runs after the raw diff so
small fragmented edits are merged into boundaries a person would pick.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import NamedTuple

from diff_match_patch import diff_match_patch


class EditKind(Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


class EditOp(NamedTuple):
    kind: EditKind
    text: str  # raw payload, not escaped


EditScript = Sequence[EditOp]

# diff_match_patch tags each tuple with -1 / 0 / 1
_DMP_KINDS = {
    diff_match_patch.DIFF_DELETE: EditKind.DELETE,
    diff_match_patch.DIFF_EQUAL: EditKind.EQUAL,
    diff_match_patch.DIFF_INSERT: EditKind.INSERT,
}


def compute_edit_script(old: str, new: str, timeout: float = 1.0) -> list[EditOp]:
    """Diff ``old`` against ``new`` and return the cleaned-up edit script."""
    dmp = diff_match_patch()
    dmp.Diff_Timeout = timeout  # 0 means no limit
    diffs = dmp.diff_main(old, new)
    dmp.diff_cleanupSemantic(diffs)
    return [EditOp(_DMP_KINDS[op], data) for op, data in diffs]
