"""
Tests for setup_env - starter .env generation
"""

from __future__ import annotations

from setup_env import DEFAULTS, render_env, setup_env


class TestSetupEnv:
    def test_creates_env_with_defaults(self, tmp_path):
        env_file = tmp_path / ".env"
        assert setup_env(env_file) is True
        content = env_file.read_text(encoding="utf-8")
        for key, value in DEFAULTS.items():
            assert f"{key}={value}" in content

    def test_does_not_overwrite(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PATCHDIFF_CONTEXT_BEFORE=5\n", encoding="utf-8")
        assert setup_env(env_file) is False
        assert env_file.read_text(encoding="utf-8") == "PATCHDIFF_CONTEXT_BEFORE=5\n"

    def test_render_env_keys_match_config(self):
        body = render_env({"PATCHDIFF_OUTPUT_PATH": "x.html"})
        assert body.endswith("PATCHDIFF_OUTPUT_PATH=x.html\n")
        assert body.startswith("#")
