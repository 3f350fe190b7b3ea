# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: turns an executable or library into an ordered text listing of its instructions by running
objdump. the listing keeps function labels and instruction text (mnemonic + operands) but drops
addresses, so inserting one instruction does not shift every following line of the diff.
raises DisassemblyError when the tool is missing, fails, times out, or produces nothing.
"""

from __future__ import annotations  # lets us use string annotations before functions are defined

import re  # for picking instruction and label lines out of objdump output
import subprocess  # for running objdump

# "  401000:\tpush   %rbp" -> group 1 is the instruction text after the address column
_INSN_RE = re.compile(r"^\s*[0-9a-fA-F]+:\s+(.+?)\s*$")
# "0000000000401000 <main>:" -> group 1 is the symbol label
_LABEL_RE = re.compile(r"^[0-9a-fA-F]+\s+(<[^>]+>):\s*$")


class DisassemblyError(RuntimeError):
    """Raised when a binary can not be turned into an instruction listing."""


def parse_listing(output: str) -> list[str]:
    """Pull label and instruction records out of raw ``objdump -d`` output."""
    records: list[str] = []
    for line in output.splitlines():
        label = _LABEL_RE.match(line)
        if label:
            records.append(f"{label.group(1)}:")
            continue
        insn = _INSN_RE.match(line)
        if insn:
            # collapse the tab/space padding objdump uses between mnemonic and operands
            records.append(" ".join(insn.group(1).split()))
    return records


def disassemble(path: str, objdump: str = "objdump", timeout: float | None = None) -> list[str]:
    """
    Disassemble ``path`` and return one record per instruction (or function label).
    ``timeout`` of None or 0 waits as long as objdump takes.
    """
    cmd = [
        objdump,
        "-d",  # disassemble executable sections
        "--no-show-raw-insn",  # leave out the opcode bytes
        path,
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout or None)
    except FileNotFoundError as e:
        raise DisassemblyError(f"Disassembler not found: {objdump}") from e
    except subprocess.TimeoutExpired as e:
        raise DisassemblyError(f"Disassembly timed out after {timeout} seconds: {path}") from e

    if proc.returncode != 0:  # objdump rejects unknown or corrupt formats with a non-zero exit
        detail = (proc.stderr or "").strip() or f"exit code {proc.returncode}"
        raise DisassemblyError(f"Disassembly failed for {path}: {detail}")

    records = parse_listing(proc.stdout or "")
    if not records:
        raise DisassemblyError(f"No instructions found in {path}")
    return records
