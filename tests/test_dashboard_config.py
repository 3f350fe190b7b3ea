"""
Tests for dashboard.config - Configuration loading functionality
Tests config loading from JSON and environment variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from dashboard.config import Config, ConfigError, _get, _resolve_base_dir, load_config, validate


class TestResolveBaseDir:
    """Tests for _resolve_base_dir function"""

    def test_resolve_base_dir_normal(self):
        """Test _resolve_base_dir in normal (non-frozen) mode"""
        with patch("sys.frozen", False, create=True):
            result = _resolve_base_dir()
            assert isinstance(result, Path)
            assert (result / "dashboard" / "config.py").exists()

    def test_resolve_base_dir_frozen(self):
        """Test _resolve_base_dir in frozen (PyInstaller) mode"""
        with patch("sys.frozen", True, create=True):
            with patch("sys.executable", "/opt/patchdiff/patchdiff"):
                result = _resolve_base_dir()
                assert result == Path("/opt/patchdiff")


class TestGet:
    """Tests for _get helper function"""

    def test_get_from_env_int(self):
        obj = {"key": 100}
        with patch.dict(os.environ, {"PATCHDIFF_KEY": "200"}):
            assert _get(obj, "key", 50) == 200

    def test_get_from_env_float(self):
        obj = {"key": 1.5}
        with patch.dict(os.environ, {"PATCHDIFF_KEY": "2.5"}):
            assert _get(obj, "key", 1.0) == 2.5

    def test_get_from_env_string(self):
        obj = {"key": "default"}
        with patch.dict(os.environ, {"PATCHDIFF_KEY": "override"}):
            assert _get(obj, "key", "fallback") == "override"

    def test_get_from_json_when_env_missing(self):
        obj = {"key": "json_value"}
        with patch.dict(os.environ, {}, clear=True):
            assert _get(obj, "key", "default") == "json_value"

    def test_get_from_default_when_both_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _get({}, "key", "default") == "default"

    def test_get_invalid_env_int(self):
        """Invalid integer in env var falls back to the default"""
        with patch.dict(os.environ, {"PATCHDIFF_KEY": "not_a_number"}):
            assert _get({"key": 100}, "key", 50) == 50

    def test_get_invalid_env_float(self):
        with patch.dict(os.environ, {"PATCHDIFF_KEY": "not_a_float"}):
            assert _get({"key": 1.5}, "key", 1.0) == 1.0

    def test_get_coerces_json_string_to_int(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _get({"key": "2"}, "key", 1) == 2

    def test_get_coerces_json_int_to_float(self):
        with patch.dict(os.environ, {}, clear=True):
            result = _get({"key": 3}, "key", 1.0)
        assert result == 3.0
        assert isinstance(result, float)

    @pytest.mark.parametrize("value", ["two", None, [1], {"a": 1}])
    def test_get_unusable_json_number_uses_default(self, value):
        with patch.dict(os.environ, {}, clear=True):
            assert _get({"key": value}, "key", 1) == 1

    def test_get_non_string_json_for_string_uses_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _get({"key": 5}, "key", "diff.html") == "diff.html"


class TestLoadConfig:
    """Tests for load_config function"""

    @pytest.fixture
    def tmp_base_dir(self, tmp_path):
        """Create temporary base directory with data folder"""
        (tmp_path / "data").mkdir()
        return tmp_path

    @pytest.fixture(autouse=True)
    def clean_env(self):
        with patch.dict(os.environ, {}, clear=True):
            yield

    @pytest.fixture
    def work_dir(self, tmp_path, monkeypatch):
        """Current working directory, kept apart from the base dir"""
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)
        return Path.cwd()

    def test_load_config_defaults(self, tmp_base_dir, work_dir):
        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            config = load_config()

        assert isinstance(config, Config)
        assert config.base_dir == tmp_base_dir
        assert config.output_path == work_dir / "diff.html"
        assert config.context_before == 1
        assert config.context_after == 1
        assert config.objdump_path == "objdump"
        assert config.disassembler_timeout == 0.0
        assert config.diff_timeout == 1.0

    def test_load_config_loads_from_json(self, tmp_base_dir, work_dir):
        config_file = tmp_base_dir / "data" / "config.json"
        config_file.write_text(
            json.dumps({"context_before": 3, "context_after": 2, "output_path": "out/r.html"}),
            encoding="utf-8",
        )

        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            config = load_config()

        assert config.context_before == 3
        assert config.context_after == 2
        assert config.output_path == work_dir / "out" / "r.html"

    def test_load_config_installed_package_writes_to_cwd(self, tmp_path, work_dir):
        """An installed copy must not put the report into its own install directory"""
        site = tmp_path / "site-packages"
        (site / "dashboard").mkdir(parents=True)
        with patch("dashboard.config.__file__", str(site / "dashboard" / "config.py")):
            config = load_config()

        assert config.base_dir == site.resolve()
        assert config.output_path == work_dir / "diff.html"

    def test_load_config_coerces_json_strings(self, tmp_base_dir, work_dir):
        config_file = tmp_base_dir / "data" / "config.json"
        config_file.write_text(
            json.dumps({"context_before": "2", "context_after": "oops", "diff_timeout": "0.5"}),
            encoding="utf-8",
        )

        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            config = load_config()

        assert config.context_before == 2
        assert config.context_after == 1
        assert config.diff_timeout == 0.5

    def test_load_config_env_overrides_json(self, tmp_base_dir):
        config_file = tmp_base_dir / "data" / "config.json"
        config_file.write_text(json.dumps({"context_after": 4}), encoding="utf-8")

        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            with patch.dict(os.environ, {"PATCHDIFF_CONTEXT_AFTER": "7"}):
                config = load_config()
        assert config.context_after == 7

    def test_load_config_absolute_output_path(self, tmp_base_dir, tmp_path):
        target = tmp_path / "elsewhere" / "diff.html"
        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            with patch.dict(os.environ, {"PATCHDIFF_OUTPUT_PATH": str(target)}):
                config = load_config()
        assert config.output_path == target

    @pytest.mark.parametrize("content", ["{ invalid json }", "", "[1, 2]"])
    def test_load_config_handles_bad_json(self, tmp_base_dir, content):
        (tmp_base_dir / "data" / "config.json").write_text(content, encoding="utf-8")
        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            config = load_config()
        assert config.context_before == 1

    def test_load_config_env_base_dir(self, tmp_path):
        custom_base = tmp_path / "custom"
        (custom_base / "data").mkdir(parents=True)
        with patch.dict(os.environ, {"PATCHDIFF_BASE_DIR": str(custom_base)}):
            config = load_config()
        assert config.base_dir == custom_base
        assert config.output_path == custom_base / "diff.html"

    def test_load_config_rejects_negative_context(self, tmp_base_dir):
        with patch("dashboard.config._resolve_base_dir", return_value=tmp_base_dir):
            with patch.dict(os.environ, {"PATCHDIFF_CONTEXT_BEFORE": "-1"}):
                with pytest.raises(ConfigError):
                    load_config()


class TestValidate:
    def test_validate_accepts_zero_context(self, tmp_path):
        validate(Config(base_dir=tmp_path, output_path=tmp_path / "d.html", context_before=0))

    def test_validate_rejects_negative_timeout(self, tmp_path):
        cfg = Config(base_dir=tmp_path, output_path=tmp_path / "d.html", diff_timeout=-1.0)
        with pytest.raises(ConfigError):
            validate(cfg)
