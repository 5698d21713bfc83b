"""Config commands -- view and modify the global configuration.

Provides the ``abpgen config`` sub-command group. Settings live in the
abpgen config directory (:func:`~abpgen.config.get_config_dir`) and are
merged with a project's ``abpgen.json``/``abpgen.yaml`` at run time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from abpgen.output import error, info, print_json, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    directory: Optional[Path] = typer.Option(
        None, "--directory", "-d",
        help="Also merge the project config found in this directory.",
    ),
) -> None:
    """Show the effective configuration.

    Example::

        abpgen config show
        abpgen config show -d ./Acme.BookStore
    """
    from abpgen.config import get_config_dir, resolve_config
    from abpgen.exceptions import ConfigError

    try:
        config = resolve_config(directory)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    print_json(config.model_dump(mode="json"))


@config_app.command("set-templates-dir")
def config_set_templates_dir(
    path: Optional[Path] = typer.Argument(
        None, help="Directory of template overrides. Omit to clear the setting.",
    ),
) -> None:
    """Set (or clear) the template override directory.

    Example::

        abpgen config set-templates-dir ~/abp-templates
        abpgen config set-templates-dir
    """
    from abpgen.config import load_global_config, save_global_config

    if path is not None and not path.is_dir():
        error(f"Directory '{path}' does not exist.")
        raise typer.Exit(code=2)

    config = load_global_config()
    value = str(path.resolve()) if path is not None else None
    save_global_config(config.model_copy(update={"templates_dir": value}))
    if value:
        success(f"Templates directory set to {value}")
    else:
        success("Templates directory cleared")


@config_app.command("add-exclude")
def config_add_exclude(
    pattern: str = typer.Argument(help="Gitignore-style pattern, e.g. '*.Blazor'."),
) -> None:
    """Exclude a pattern from every file search.

    Example::

        abpgen config add-exclude '**/test/**'
    """
    from abpgen.config import load_global_config, save_global_config

    config = load_global_config()
    if pattern in config.exclude_directories:
        info(f"'{pattern}' is already excluded")
        return
    excludes = [*config.exclude_directories, pattern]
    save_global_config(config.model_copy(update={"exclude_directories": excludes}))
    success(f"Excluded '{pattern}'")
