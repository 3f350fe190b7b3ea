# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: decides whether two same-path files have identical contents without reading both fully
when that can be avoided. checks run cheapest first and stop at the first mismatch:
file size, then an MD5 digest, then an independent SHA-1 digest. only a pair that passes all
three is declared equal.

read-only files get write permission for the duration of each digest read and are put back
exactly as they were afterwards, even if the read fails.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import hashlib  # for MD5 and SHA-1 digests
import logging  # for tracing which check rejected a pair
import os  # for stat/chmod on the files being compared
import stat  # for the owner-write permission bit
from collections.abc import Iterator  # type hint for the context manager generator
from contextlib import contextmanager  # for the scoped permission change

logger = logging.getLogger("patchdiff.equality")

_CHUNK = 1024 * 1024  # read 1 MB at a time while hashing


@contextmanager
def writable(path: str) -> Iterator[None]:
    """
    Temporarily clear the read-only flag on ``path``.
    The original mode is restored on every exit path.
    """
    original = os.stat(path).st_mode  # remember the exact mode so we can put it back
    read_only = not (original & stat.S_IWUSR)  # owner can not write -> treat as read-only
    if read_only:
        os.chmod(path, stat.S_IMODE(original) | stat.S_IWUSR)  # grant owner write for the read
    try:
        yield
    finally:
        if read_only:
            os.chmod(path, stat.S_IMODE(original))  # always restore, even on I/O failure


def _digest(path: str, algo: str) -> str:
    h = hashlib.new(algo)
    with writable(path):
        with open(path, "rb") as f:  # binary read, contents are hashed as-is
            for chunk in iter(lambda: f.read(_CHUNK), b""):
                h.update(chunk)
    return h.hexdigest()


def md5_of(path: str) -> str:
    """Whole-file MD5 hex digest."""
    return _digest(path, "md5")


def sha1_of(path: str) -> str:
    """Whole-file SHA-1 hex digest."""
    return _digest(path, "sha1")


def files_equal(path_a: str, path_b: str) -> bool:
    """Return True when both files have the same size, MD5 and SHA-1."""
    # size first: cheapest check and catches most real differences
    if os.path.getsize(path_a) != os.path.getsize(path_b):
        logger.debug("size differs: %s", path_b)
        return False

    if md5_of(path_a) != md5_of(path_b):
        logger.debug("md5 differs: %s", path_b)
        return False

    # second, independent hash family
    if sha1_of(path_a) != sha1_of(path_b):
        logger.debug("sha1 differs: %s", path_b)
        return False

    return True
