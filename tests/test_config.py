"""Tests for configuration models."""

from pathlib import Path
from textwrap import dedent

import pytest

from tempo.config import FunctionProviderEntry, TempoConfig
from tempo.errors import ConfigError


class TestTempoConfig:
    """Tests for TempoConfig."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        config = TempoConfig()

        assert config.tempo_root == Path(".tempo-files")
        assert config.templates.user_data == {}
        assert config.templates.function_providers == []
        assert config.log_level == "WARNING"

    def test_from_dict(self) -> None:
        data = {
            "tempo_root": "build/tempo",
            "log_level": "info",
            "templates": {
                "user_data": {"author": "Jane"},
                "function_providers": [
                    {"name": "strings", "type": "url", "value": "https://github.com/acme/strings.git"},
                    {"name": "local", "type": "path", "value": "./funcs"},
                ],
            },
        }

        config = TempoConfig.from_dict(data)

        assert config.tempo_root == Path("build/tempo")
        assert config.log_level == "INFO"
        assert config.templates.user_data == {"author": "Jane"}
        assert [p.type for p in config.templates.function_providers] == ["url", "path"]

    def test_from_dict_keeps_defaults_for_empty_values(self) -> None:
        config = TempoConfig.from_dict({"tempo_root": "", "templates": None})

        assert config.tempo_root == Path(".tempo-files")
        assert config.templates.user_data == {}

    def test_unknown_provider_type(self) -> None:
        with pytest.raises(ConfigError, match="unknown function provider type"):
            TempoConfig.from_dict({"templates": {"function_providers": [{"type": "ftp"}]}})

    def test_templates_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError):
            TempoConfig.from_dict({"templates": ["a"]})

    def test_to_dict_round_trip(self) -> None:
        config = TempoConfig.from_dict(
            {"templates": {"function_providers": [{"name": "x", "type": "path", "value": "./x"}]}}
        )

        again = TempoConfig.from_dict(config.to_dict())

        assert again.templates.function_providers == config.templates.function_providers


class TestTempoConfigYaml:
    """Tests for loading configuration files."""

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "tempo.yaml"
        path.write_text(
            dedent(
                """\
                tempo_root: .tempo
                templates:
                  function_providers:
                    - name: funcs
                      type: path
                      value: ./funcs
                """
            )
        )

        config = TempoConfig.from_yaml(path)

        assert config.tempo_root == Path(".tempo")
        assert config.templates.function_providers == [
            FunctionProviderEntry(name="funcs", type="path", value="./funcs")
        ]

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "tempo.yaml"
        path.write_text("templates: [unclosed\n")

        with pytest.raises(ConfigError, match="failed to parse"):
            TempoConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "tempo.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            TempoConfig.from_yaml(path)

    def test_load_without_file(self, tmp_path: Path, monkeypatch) -> None:
        """Defaults apply and the root is resolved against cwd."""
        monkeypatch.delenv("TEMPO_ROOT", raising=False)
        monkeypatch.delenv("TEMPO_LOG_LEVEL", raising=False)

        config = TempoConfig.load(tmp_path)

        assert config.tempo_root == tmp_path / ".tempo-files"

    def test_load_prefers_yaml(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("TEMPO_ROOT", raising=False)
        (tmp_path / "tempo.yaml").write_text("tempo_root: first\n")
        (tmp_path / "tempo.yml").write_text("tempo_root: second\n")

        config = TempoConfig.load(tmp_path)

        assert config.tempo_root == tmp_path / "first"

    def test_env_overrides(self, tmp_path: Path, monkeypatch) -> None:
        (tmp_path / "tempo.yml").write_text("tempo_root: from-file\nlog_level: ERROR\n")
        monkeypatch.setenv("TEMPO_ROOT", str(tmp_path / "env-root"))
        monkeypatch.setenv("TEMPO_LOG_LEVEL", "debug")

        config = TempoConfig.load(tmp_path)

        assert config.tempo_root == tmp_path / "env-root"
        assert config.log_level == "DEBUG"

    def test_relative_env_root_resolved_against_cwd(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TEMPO_ROOT", "env-root")
        monkeypatch.delenv("TEMPO_LOG_LEVEL", raising=False)

        config = TempoConfig.load(tmp_path)

        assert config.tempo_root == tmp_path / "env-root"
        assert config.tempo_root.is_absolute()
