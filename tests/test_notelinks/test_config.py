"""Unit tests for notelinks.config."""

from pathlib import Path

import pytest

from notelinks.config import CheckConfig, env_options, find_config_file, load_config
from notelinks.errors import ConfigError
from notelinks.index import DEFAULT_EXTENSIONS


class TestDefaults:
    def test_defaults(self, tmp_path: Path):
        config = load_config(tmp_path, environ={})
        assert config == CheckConfig(directory=tmp_path)
        assert config.include_orphans is False
        assert config.strict is False
        assert config.extensions == DEFAULT_EXTENSIONS
        assert config.format == "text"
        assert config.output is None

    def test_missing_directory_is_not_a_config_error(self, tmp_path: Path):
        config = load_config(tmp_path / "missing", environ={})
        assert config.directory == tmp_path / "missing"


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestConfigFile:
    def test_notelinks_toml(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text(
            'include-orphans = true\nextensions = [".md"]\nformat = "json"\noutput = "out/report.json"\n',
            encoding="utf-8",
        )
        config = load_config(tmp_path, environ={})
        assert config.include_orphans is True
        assert config.extensions == (".md",)
        assert config.format == "json"
        assert config.output == tmp_path / "out" / "report.json"

    def test_pyproject_tool_table(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[tool.notelinks]\nstrict = true\n", encoding="utf-8")
        assert find_config_file(tmp_path) == tmp_path / "pyproject.toml"
        assert load_config(tmp_path, environ={}).strict is True

    def test_pyproject_without_table_ignored(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
        assert find_config_file(tmp_path) is None

    def test_explicit_config_file(self, tmp_path: Path):
        cfg = tmp_path / "elsewhere.toml"
        cfg.write_text("strict = true\n", encoding="utf-8")
        assert load_config(tmp_path / "notes", config_file=cfg, environ={}).strict is True

    def test_unknown_key(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text("fuzzy = true\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="fuzzy"):
            load_config(tmp_path, environ={})

    def test_bad_boolean(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text("strict = 3\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="strict"):
            load_config(tmp_path, environ={})

    def test_bad_format(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text('format = "html"\n', encoding="utf-8")
        with pytest.raises(ConfigError, match="format"):
            load_config(tmp_path, environ={})

    def test_invalid_toml(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text("strict = = true\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(tmp_path, environ={})

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path, config_file=tmp_path / "nope.toml", environ={})


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_env_options(self):
        env = {"NOTELINKS_STRICT": "yes", "NOTELINKS_FORMAT": "csv", "UNRELATED": "1"}
        assert env_options(env) == {"strict": "yes", "format": "csv"}

    def test_env_overrides_file(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text("strict = true\n", encoding="utf-8")
        config = load_config(tmp_path, environ={"NOTELINKS_STRICT": "0"})
        assert config.strict is False

    def test_bad_env_boolean(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, environ={"NOTELINKS_INCLUDE_ORPHANS": "maybe"})

    def test_overrides_win(self, tmp_path: Path):
        (tmp_path / "notelinks.toml").write_text("include-orphans = true\n", encoding="utf-8")
        config = load_config(
            tmp_path,
            overrides={"include_orphans": False, "strict": None},
            environ={"NOTELINKS_STRICT": "true"},
        )
        assert config.include_orphans is False
        # ``None`` means "not given on the command line"
        assert config.strict is True

    def test_extensions_override_accepts_list(self, tmp_path: Path):
        config = load_config(tmp_path, overrides={"extensions": ["txt"]}, environ={})
        assert config.extensions == ("txt",)
