"""End-to-end tests of the root app, ``inspect`` and ``config`` commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from abpgen import __version__
from abpgen.app import app, main
from abpgen.exceptions import ProjectNotFoundError
from abpgen.config import load_global_config

CONTRACTS = "src/Acme.BookStore.Application.Contracts"


class TestRootApp:

    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"abpgen {__version__}" in result.output

    def test_help_lists_groups(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("generate", "inspect", "config"):
            assert group in result.output

    def test_generate_help_lists_options(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["generate", "crud", "--help"])
        assert result.exit_code == 0
        for flag in ("--directory", "--exclude", "--no-overwrite", "--separate-dto"):
            assert flag in result.output
        assert "--dry-run" not in result.output

    def test_missing_argument_is_usage_error(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["generate", "crud"])
        assert result.exit_code == 2


class TestInspectRoutes:

    def test_plain_table(self, cli_runner, abp_solution: Path) -> None:
        source = abp_solution / CONTRACTS / "Books" / "IBookAppService.cs"
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "routes", str(source), "-d", str(abp_solution)],
        )
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert "Type\tMethod\tVerb\tRoute" in lines
        assert "IBookAppService\tGetAsync\tHttpGet\t{id}" in lines
        assert "IBookAppService\tCreateAsync\tHttpPost\t-" in lines
        assert "IBookAppService\tPublishAsync\tHttpPost\t{BookId}/{Edition}/publish" in lines

    def test_json(self, cli_runner, abp_solution: Path) -> None:
        source = abp_solution / CONTRACTS / "Books" / "IBookAppService.cs"
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "inspect", "routes", str(source), "-d", str(abp_solution)],
        )
        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        by_method = {r["Method"]: r for r in records}
        assert by_method["DeleteAsync"]["Verb"] == "HttpDelete"
        assert by_method["FindByTypeAsync"]["Route"] == "{id}/findByType"

    def test_without_registry_falls_back_to_single_id(self, cli_runner, abp_solution: Path) -> None:
        source = abp_solution / CONTRACTS / "Books" / "IBookAppService.cs"
        result = cli_runner.invoke(app, ["--plain", "--no-color", "inspect", "routes", str(source)])
        assert result.exit_code == 0, result.output
        assert "IBookAppService\tPublishAsync\tHttpPost\t{id}/publish" in result.stdout.splitlines()

    def test_no_methods(self, cli_runner, abp_solution: Path) -> None:
        source = abp_solution / "src" / "Acme.BookStore.Domain" / "Books" / "BookType.cs"
        result = cli_runner.invoke(app, ["--no-color", "inspect", "routes", str(source)])
        assert result.exit_code == 0
        assert "No public methods found" in result.output

    def test_unreadable_file(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "inspect", "routes", str(tmp_path / "Missing.cs")])
        assert result.exit_code == 5
        assert "Cannot read source file" in result.output


class TestConfigCommands:

    def test_show_defaults(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--quiet", "config", "show"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"exclude_directories": [], "templates_dir": None}

    def test_add_exclude(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "add-exclude", "*.Blazor"])
        assert result.exit_code == 0, result.output
        assert "Excluded '*.Blazor'" in result.output
        assert load_global_config().exclude_directories == ["*.Blazor"]

        again = cli_runner.invoke(app, ["--no-color", "config", "add-exclude", "*.Blazor"])
        assert "already excluded" in again.output
        assert load_global_config().exclude_directories == ["*.Blazor"]

    def test_show_merges_project(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "add-exclude", "*.Blazor"])
        project = isolated_config / "sln"
        project.mkdir()
        (project / "abpgen.json").write_text('{"exclude_directories": ["*.Web"]}', encoding="utf-8")

        result = cli_runner.invoke(app, ["--quiet", "config", "show", "-d", str(project)])
        assert json.loads(result.stdout)["exclude_directories"] == ["*.Blazor", "*.Web"]

    def test_set_and_clear_templates_dir(self, cli_runner, isolated_config: Path) -> None:
        templates = isolated_config / "templates"
        templates.mkdir()

        result = cli_runner.invoke(app, ["--no-color", "config", "set-templates-dir", str(templates)])
        assert result.exit_code == 0, result.output
        assert load_global_config().templates_dir == str(templates.resolve())

        result = cli_runner.invoke(app, ["--no-color", "config", "set-templates-dir"])
        assert result.exit_code == 0, result.output
        assert "cleared" in result.output
        assert load_global_config().templates_dir is None

    def test_set_missing_templates_dir(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "config", "set-templates-dir", str(isolated_config / "nope")],
        )
        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_templates_override_is_used(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        templates = isolated_config / "templates"
        (templates / "crud").mkdir(parents=True)
        (templates / "crud" / "Dto.cs.j2").write_text(
            "// custom {{ names.dto }}\n", encoding="utf-8",
        )
        cli_runner.invoke(app, ["config", "set-templates-dir", str(templates)])

        result = cli_runner.invoke(app, ["--no-color", "generate", "crud", "Book", "-d", str(abp_solution)])
        assert result.exit_code == 0, result.output
        dto = abp_solution / CONTRACTS / "Books" / "Dtos" / "BookDto.cs"
        assert dto.read_text(encoding="utf-8") == "// custom BookDto\n"


class TestMain:

    @pytest.fixture(autouse=True)
    def _no_signal_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("abpgen.app.signal.signal", lambda *args: None)

    def test_known_error_uses_its_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], plain_output,
    ) -> None:
        def _raise() -> None:
            raise ProjectNotFoundError("no solution here")

        monkeypatch.setattr("abpgen.app.app", _raise)
        with pytest.raises(SystemExit) as excinfo:
            main()
        assert excinfo.value.code == 4
        assert "Error: no solution here" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path, plain_output,
    ) -> None:
        def _raise() -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr("abpgen.config._is_xdg_platform", lambda: True)
        monkeypatch.setattr("abpgen.app.app", _raise)
        with pytest.raises(SystemExit) as excinfo:
            main()
        assert excinfo.value.code == 1
        logs = list((isolated_config / "data" / "abpgen" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text(encoding="utf-8")
