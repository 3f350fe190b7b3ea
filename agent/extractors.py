# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: maps a file's extension to something that can produce a comparable text version of it.
plaintext types are read as-is, executables and libraries are disassembled into an instruction
listing, and anything unregistered has no text version at all (the file is still reported as
different, just without a diff body).

extraction never raises to the caller: a failed read or disassembly comes back as an
ExtractResult carrying the error message, which the report shows in place of the diff.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for recording extraction failures
from collections.abc import Callable, Iterable  # type hints for extractor callables
from pathlib import Path  # for pulling the suffix off a path
from typing import NamedTuple

from agent.disassembler import DisassemblyError, disassemble

logger = logging.getLogger("patchdiff.extract")

# an extractor takes a path and returns its text representation (may raise)
Extractor = Callable[[str], str]

TEXT_EXTENSIONS = (
    "",  # no extension
    ".txt",
    ".xml",
    ".log",
    ".md",
    ".json",
    ".yaml",
    ".yml",
    ".ini",
    ".cfg",
    ".conf",
    ".config",
    ".toml",
    ".properties",
    ".py",
    ".js",
    ".ts",
    ".c",
    ".cpp",
    ".h",
    ".hpp",
    ".cs",
    ".java",
    ".go",
    ".rs",
    ".sh",
    ".ps1",
    ".bat",
    ".cmd",
    ".html",
    ".htm",
    ".css",
    ".sql",
    ".csv",
    ".patch",
    ".diff",
)

BINARY_EXTENSIONS = (
    ".exe",
    ".dll",
    ".sys",
    ".ocx",
    ".drv",
    ".so",
    ".dylib",
    ".o",
    ".obj",
)


class ExtractResult(NamedTuple):
    """Either ``text`` or ``error`` is set; both None means no representation exists."""

    text: str | None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def has_text(self) -> bool:
        return self.text is not None


def extension_of(path: str) -> str:
    # ".TXT" and ".txt" are the same class; files without a suffix use ""
    return Path(path).suffix.lower()


def read_text(path: str) -> str:
    """Plaintext extractor: the file's contents, undecodable bytes replaced."""
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


class ExtractorRegistry:
    """Open mapping of extension -> extractor; new formats register without touching dispatch."""

    def __init__(self) -> None:
        self._extractors: dict[str, Extractor] = {}

    def register(self, extensions: Iterable[str], extractor: Extractor) -> None:
        for ext in extensions:
            self._extractors[ext.lower()] = extractor

    def extractor_for(self, path: str) -> Extractor | None:
        return self._extractors.get(extension_of(path))

    def extract(self, path: str) -> ExtractResult:
        extractor = self.extractor_for(path)
        if extractor is None:
            return ExtractResult(None)  # unregistered type, not an error
        try:
            return ExtractResult(extractor(path))
        except (DisassemblyError, OSError, UnicodeError) as e:
            logger.debug("extractor raised for %s: %s", path, e)
            return ExtractResult(None, str(e) or e.__class__.__name__)


def default_registry(objdump: str = "objdump", timeout: float | None = None) -> ExtractorRegistry:
    """Registry with the plaintext and disassembly extractors wired in."""
    registry = ExtractorRegistry()
    registry.register(TEXT_EXTENSIONS, read_text)

    def _listing(path: str) -> str:
        return "\n".join(disassemble(path, objdump=objdump, timeout=timeout))

    registry.register(BINARY_EXTENSIONS, _listing)
    return registry
