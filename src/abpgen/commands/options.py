"""Declarative command options.

Every command's options are a frozen Pydantic model. A field shows up on
the command line when its annotation carries a :class:`CliOption` or
:class:`CliArgument` marker::

    class CrudOptions(CommandOptions):
        entity: Annotated[str, CliArgument("entity", "The entity class name")]
        separate_dto: Annotated[bool, CliOption("separate-dto", None, "...")] = False

Fields without a marker (such as :attr:`CommandOptions.dry_run`) are only
settable programmatically. See :mod:`abpgen.commands.binder` for how the
markers become Typer parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class CliOption:
    """Marks a field as a named option (``--name`` / ``-n``).

    At least one of *name* and *short_name* must be given.
    """

    name: Optional[str] = None
    short_name: Optional[str] = None
    description: str = ""
    required: bool = False

    @property
    def aliases(self) -> tuple[str, ...]:
        aliases = []
        if self.name:
            aliases.append(f"--{self.name}")
        if self.short_name:
            aliases.append(f"-{self.short_name}")
        return tuple(aliases)


@dataclass(frozen=True)
class CliArgument:
    """Marks a field as a required positional argument."""

    name: str
    description: str = ""


class CommandOptions(BaseModel):
    """Options shared by every generation command."""

    model_config = ConfigDict(frozen=True)

    directory: Annotated[str, CliOption(
        "directory", "d",
        "The ABP project root directory. If no directory is specified, "
        "the current directory is used.",
    )] = ""
    exclude_directories: Annotated[list[str], CliOption(
        "exclude", None,
        "Exclude directories when searching files. Arguments can contain "
        "a combination of wildcards, e.g. --exclude '*.Blazor' --exclude '**/test/**'",
    )] = Field(default_factory=list)
    no_overwrite: Annotated[bool, CliOption(
        "no-overwrite", None, "Keep existing files instead of overwriting them.",
    )] = False
    dry_run: bool = False


class CrudOptions(CommandOptions):
    """Options of ``abpgen generate crud``."""

    entity: Annotated[str, CliArgument("entity", "The entity class name.")]
    separate_dto: Annotated[bool, CliOption(
        "separate-dto", None, "Generate separate Create and Update DTO files.",
    )] = False
    entity_prefix_dto: Annotated[bool, CliOption(
        "entity-prefix-dto", None,
        "Prefix DTO names with the entity name (BookCreateDto instead of CreateBookDto).",
    )] = False
    skip_get_list_input_dto: Annotated[bool, CliOption(
        "skip-get-list-input-dto", None,
        "Use PagedAndSortedResultRequestDto instead of generating a GetList input DTO.",
    )] = False


class ServiceOptions(CommandOptions):
    """Options of ``abpgen generate service``."""

    name: Annotated[str, CliArgument("name", "The service name, without the AppService postfix.")]
    folder: Annotated[str, CliOption(
        "folder", "f", "Folder (and namespace suffix) of the service, e.g. 'Books/Admin'.",
    )] = ""


class ControllerOptions(CommandOptions):
    """Options of ``abpgen generate controller``."""

    name: Annotated[str, CliArgument(
        "name", "The application service name, without the I prefix and AppService postfix.",
    )]
