# SPDX-License-Identifier: GPL-3.0-or-later
#!/usr/bin/env python3
"""
goal: environment setup script for patchdiff. writes a starter .env file with every setting the
      comparison run reads, if one doesn't exist yet. makes it easy to see what can be tuned
      without reading the config loader.
"""

from pathlib import Path

DEFAULTS = {
    "PATCHDIFF_OUTPUT_PATH": "diff.html",
    "PATCHDIFF_CONTEXT_BEFORE": "1",
    "PATCHDIFF_CONTEXT_AFTER": "1",
    "PATCHDIFF_OBJDUMP_PATH": "objdump",
    "PATCHDIFF_DISASSEMBLER_TIMEOUT": "0",
    "PATCHDIFF_DIFF_TIMEOUT": "1.0",
}


def render_env(values: dict[str, str]) -> str:
    """Build the .env file body from a key -> value mapping."""
    lines = [
        "# =========================================",
        "# patchdiff Environment Variables",
        "# =========================================",
        "# environment variables override data/config.json; delete a line to use the default",
        "",
    ]
    lines.extend(f"{key}={value}" for key, value in values.items())
    return "\n".join(lines) + "\n"


def setup_env(env_file: Path = Path(".env")) -> bool:
    """
    main setup function. checks if .env exists, and if not, creates it with the defaults.
    returns True when a new file was written.
    """
    # if .env already exists, don't overwrite it - dev might have custom values
    if env_file.exists():
        print("[OK] .env file already exists")
        print("  Skipping setup. Delete .env if you want to regenerate.")
        return False

    env_file.write_text(render_env(DEFAULTS), encoding="utf-8")
    print("[OK] Created .env file with default patchdiff settings")
    return True


if __name__ == "__main__":
    # run the setup when script is executed directly
    setup_env()
