"""Tests for abpgen.commands.binder -- options model to Typer parameters."""

from __future__ import annotations

from typing import Annotated, Any

import pytest
import typer
from typer.testing import CliRunner

from abpgen.commands.binder import bind_options, build_command_function
from abpgen.commands.options import (
    CliArgument,
    CliOption,
    CommandOptions,
    CrudOptions,
    ServiceOptions,
)
from abpgen.exceptions import ConfigError


def _by_name(descriptors: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {d["name"]: d for d in descriptors}


class TestBindOptions:

    def test_base_options(self) -> None:
        descriptors = _by_name(bind_options(CommandOptions))
        assert set(descriptors) == {"directory", "exclude_directories", "no_overwrite"}
        assert descriptors["directory"]["aliases"] == ("--directory", "-d")
        assert descriptors["exclude_directories"]["aliases"] == ("--exclude",)
        assert descriptors["no_overwrite"]["is_argument"] is False

    def test_unmarked_field_is_skipped(self) -> None:
        assert "dry_run" not in _by_name(bind_options(CommandOptions))

    def test_argument(self) -> None:
        entity = _by_name(bind_options(CrudOptions))["entity"]
        assert entity["is_argument"] is True
        assert entity["aliases"] == ("entity",)
        assert entity["help"] == "The entity class name."

    def test_subclass_fields_follow_base_fields(self) -> None:
        names = [d["name"] for d in bind_options(ServiceOptions)]
        assert names[:3] == ["directory", "exclude_directories", "no_overwrite"]
        assert names[3:] == ["name", "folder"]

    def test_option_wins_over_argument(self) -> None:
        class Both(CommandOptions):
            value: Annotated[str, CliOption("value"), CliArgument("value")] = ""

        value = _by_name(bind_options(Both))["value"]
        assert value["is_argument"] is False

    def test_option_without_alias(self) -> None:
        class NoAlias(CommandOptions):
            value: Annotated[str, CliOption(description="nameless")] = ""

        with pytest.raises(ConfigError, match="needs a name"):
            bind_options(NoAlias)

    def test_argument_without_name(self) -> None:
        class NoName(CommandOptions):
            value: Annotated[str, CliArgument("")]

        with pytest.raises(ConfigError, match="argument needs a name"):
            bind_options(NoName)

    def test_duplicate_alias(self) -> None:
        class Clash(CommandOptions):
            target: Annotated[str, CliOption("out", "d")] = ""

        with pytest.raises(ConfigError, match="'-d'"):
            bind_options(Clash)

    def test_duplicate_argument(self) -> None:
        class Clash(CommandOptions):
            first: Annotated[str, CliArgument("name")]
            second: Annotated[str, CliArgument("name")]

        with pytest.raises(ConfigError, match="argument 'name'"):
            bind_options(Clash)


class TestBuildCommandFunction:

    @pytest.fixture
    def captured(self) -> list[dict[str, Any]]:
        return []

    @pytest.fixture
    def app(self, captured: list[dict[str, Any]]) -> typer.Typer:
        app = typer.Typer()
        fn = build_command_function(
            bind_options(CrudOptions),
            lambda values, root_obj: captured.append(values),
            "_cmd_crud",
            doc="Crud.",
        )
        app.command("crud")(fn)

        @app.command("other")
        def _other() -> None:
            pass

        return app

    def test_arguments_and_flags(self, app: typer.Typer, captured: list[dict[str, Any]]) -> None:
        result = CliRunner().invoke(
            app,
            ["crud", "Book", "-d", "/sln", "--exclude", "*.Blazor", "--exclude", "**/test/**",
             "--separate-dto", "--no-overwrite"],
        )
        assert result.exit_code == 0, result.output
        values = captured[0]
        assert values["entity"] == "Book"
        assert values["directory"] == "/sln"
        assert values["exclude_directories"] == ["*.Blazor", "**/test/**"]
        assert values["separate_dto"] is True
        assert values["no_overwrite"] is True
        assert values["entity_prefix_dto"] is False

    def test_omitted_list_is_left_to_model_default(
        self, app: typer.Typer, captured: list[dict[str, Any]],
    ) -> None:
        result = CliRunner().invoke(app, ["crud", "Book"])
        assert result.exit_code == 0, result.output
        assert "exclude_directories" not in captured[0]
        assert CrudOptions.model_validate(captured[0]).exclude_directories == []

    def test_missing_argument(self, app: typer.Typer, captured: list[dict[str, Any]]) -> None:
        result = CliRunner().invoke(app, ["crud"])
        assert result.exit_code == 2
        assert captured == []

    def test_function_metadata(self) -> None:
        fn = build_command_function(bind_options(CrudOptions), lambda values, root_obj: values, "_cmd_crud", doc="Crud.")
        assert fn.__name__ == "_cmd_crud"
        assert fn.__doc__ == "Crud."

    def test_root_obj_is_passed_to_dispatch(self) -> None:
        seen: list[Any] = []
        app = typer.Typer()

        @app.callback()
        def _root(ctx: typer.Context) -> None:
            ctx.obj = {"dry_run": True}

        fn = build_command_function(
            bind_options(CrudOptions),
            lambda values, root_obj: seen.append(root_obj),
            "_cmd_crud",
        )
        app.command("crud")(fn)

        result = CliRunner().invoke(app, ["crud", "Book"])
        assert result.exit_code == 0, result.output
        assert seen == [{"dry_run": True}]

    def test_context_is_not_a_cli_parameter(self) -> None:
        app = typer.Typer()
        app.command("crud")(build_command_function(
            bind_options(CrudOptions), lambda values, root_obj: None, "_cmd_crud",
        ))

        @app.command("other")
        def _other() -> None:
            pass

        result = CliRunner().invoke(app, ["crud", "--help"])
        assert result.exit_code == 0
        assert "CTX" not in result.output
