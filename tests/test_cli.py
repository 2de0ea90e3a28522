"""Tests for CLI commands."""

import json
from pathlib import Path
from textwrap import dedent

import pytest

from tempo import cli
from tempo.cli import cmd_functions, cmd_register, cmd_render, main, resolve_provider_entries
from tempo.context import AppContext


class MockArgs:
    """Mock argparse namespace for testing."""

    def __init__(self, **kwargs):
        self.verbose = kwargs.get("verbose", False)
        self.register_command = kwargs.get("register_command", "functions")
        self.functions_command = kwargs.get("functions_command", "list")
        self.name = kwargs.get("name", "")
        self.url = kwargs.get("url", "")
        self.path = kwargs.get("path", "")
        self.force = kwargs.get("force", False)
        self.json = kwargs.get("json", False)
        self.file = kwargs.get("file")
        self.data = kwargs.get("data")
        self.output = kwargs.get("output")


@pytest.fixture
def project(tmp_path: Path, monkeypatch, fake_vcs, fake_pipeline) -> Path:
    """A project directory whose context uses fake collaborators."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TEMPO_ROOT", raising=False)
    monkeypatch.delenv("TEMPO_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        cli,
        "_create_context",
        lambda args: AppContext.create(cwd=tmp_path, vcs=fake_vcs, pipeline=fake_pipeline),
    )
    return tmp_path


class TestResolveProviderEntries:
    """Tests for resolve_provider_entries."""

    def test_url_only(self) -> None:
        entries = resolve_provider_entries("", "https://github.com/acme/strings.git", "")

        assert [(e.name, e.type) for e in entries] == [("strings", "url")]

    def test_path_only_with_name(self) -> None:
        entries = resolve_provider_entries("mine", "", "./funcs")

        assert [(e.name, e.type, e.value) for e in entries] == [("mine", "path", "./funcs")]

    def test_url_and_path(self) -> None:
        """Both sources get distinct names."""
        entries = resolve_provider_entries("", "https://github.com/acme/strings.git", "./funcs")

        assert [(e.name, e.type) for e in entries] == [
            ("strings-repo", "url"),
            ("strings-local", "path"),
        ]

    def test_nothing(self) -> None:
        assert resolve_provider_entries("x", "", "") == []


class TestCmdRegister:
    """Tests for the register command."""

    def test_register_from_url(self, project: Path, fake_vcs, capsys) -> None:
        args = MockArgs(url="https://github.com/acme/strings.git")

        cmd_register(args)

        captured = capsys.readouterr()
        assert "shout" in captured.out
        assert "Functions successfully registered!" in captured.out
        assert fake_vcs.calls == [("clone", project / ".tempo-files" / "extensions" / "strings")]

    def test_register_force(self, project: Path, fake_vcs) -> None:
        args = MockArgs(url="https://github.com/acme/strings.git")
        cmd_register(args)

        cmd_register(MockArgs(url="https://github.com/acme/strings.git", force=True))

        assert fake_vcs.operations == ["clone", "force_reclone"]

    def test_register_from_path(self, project: Path, capsys) -> None:
        funcs = project / "funcs"
        funcs.mkdir()
        (funcs / "provider.py").write_text("# functions: local_fn\nProvider = None\n")

        cmd_register(MockArgs(path=str(funcs)))

        assert "local_fn" in capsys.readouterr().out

    def test_requires_url_or_path(self, project: Path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cmd_register(MockArgs())

        assert exc_info.value.code == 1
        assert "--url or --path" in capsys.readouterr().out


class TestCmdFunctions:
    """Tests for the functions command."""

    def test_list_builtins(self, project: Path, capsys) -> None:
        cmd_functions(MockArgs())

        captured = capsys.readouterr()
        assert "normalize_path" in captured.out
        assert "lookup" in captured.out

    def test_list_json_includes_configured_providers(self, project: Path, capsys) -> None:
        (project / "tempo.yaml").write_text(
            dedent(
                """\
                templates:
                  function_providers:
                    - name: strings
                      type: url
                      value: https://github.com/acme/strings.git
                """
            )
        )

        cmd_functions(MockArgs(json=True))

        data = json.loads(capsys.readouterr().out)
        sources = {item["name"]: item["source"] for item in data}
        assert sources["shout"] == "strings"
        assert sources["title_case"] == "builtin:text"


class TestCmdRender:
    """Tests for the render command."""

    def test_render_to_stdout(self, project: Path, capsys) -> None:
        template = project / "hello.j2"
        template.write_text("Hello {{ title_case(who) }}!\n")
        data = project / "data.yaml"
        data.write_text("who: world\n")

        cmd_render(MockArgs(file=str(template), data=str(data)))

        assert "Hello World!" in capsys.readouterr().out

    def test_render_to_file_with_user_data(self, project: Path) -> None:
        (project / "tempo.yaml").write_text("templates:\n  user_data:\n    author: Jane\n")
        template = project / "author.j2"
        template.write_text("by {{ author }}")
        output = project / "out.txt"

        cmd_render(MockArgs(file=str(template), output=str(output)))

        assert output.read_text() == "by Jane"


class TestMain:
    """Tests for the main entry point."""

    def test_render_error_exits(self, tmp_path: Path, monkeypatch, capsys) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "bad.j2").write_text("{{ missing('x') }}")

        with pytest.raises(SystemExit) as exc_info:
            main(["render", str(tmp_path / "bad.j2")])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Error:" in out
        assert "function 'missing' is not registered" in out

    def test_no_command_prints_help(self, capsys) -> None:
        main([])

        assert "usage: tempo" in capsys.readouterr().out
