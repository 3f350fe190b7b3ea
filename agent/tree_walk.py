# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: lists every file under the old and new roots, derives relative paths, and pairs them up.
relative paths come from stripping the root string exactly as it was given (no case folding or
root normalization), then dropping the leading separator and using "/" between parts.
files that exist on only one side are listed separately; they are never diffed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileEntry:
    relative_path: str  # identity of the pair, unique within a run
    old_path: str
    new_path: str


@dataclass(frozen=True)
class TreePairing:
    shared: list[FileEntry] = field(default_factory=list)  # in new-tree discovery order
    only_old: list[str] = field(default_factory=list)
    only_new: list[str] = field(default_factory=list)


def _relative(root: str, absolute: str) -> str:
    rel = absolute[len(root) :]  # exact prefix strip
    rel = rel.lstrip("/\\")
    return rel.replace(os.sep, "/")


def list_relative_files(root: str) -> dict[str, str]:
    """Map relative path -> path on disk for every file under ``root``, in traversal order."""
    found: dict[str, str] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()  # walk subdirectories in a stable order
        for name in sorted(filenames):
            absolute = os.path.join(dirpath, name)
            found[_relative(root, absolute)] = absolute
    return found


def pair_trees(old_root: str, new_root: str) -> TreePairing:
    old_files = list_relative_files(old_root)
    new_files = list_relative_files(new_root)

    shared = [
        FileEntry(relative_path=rel, old_path=old_files[rel], new_path=path)
        for rel, path in new_files.items()
        if rel in old_files
    ]
    only_old = [rel for rel in old_files if rel not in new_files]
    only_new = [rel for rel in new_files if rel not in old_files]
    return TreePairing(shared=shared, only_old=only_old, only_new=only_new)
