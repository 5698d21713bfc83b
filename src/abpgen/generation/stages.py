"""Pipeline stages that discover, parse, render and write.

Each stage reads the variables it declares in :attr:`reads` and publishes
its result into :attr:`target`. The commands in :mod:`abpgen.commands`
append these stages after the four base stages, for example::

    LoadConfigStage()
    DiscoverProjectStage()
    FindFileStage("**/Book.cs")
    ParseTypeStage(SOURCE_FILE_VARIABLE, "Book", ENTITY_INFO_VARIABLE)
    RenderTemplatesStage("crud", {"entity": ENTITY_INFO_VARIABLE, ...})
    WriteFilesStage()
"""

from __future__ import annotations

from typing import Any, Optional

from abpgen.config import resolve_config
from abpgen.generation.file_finder import find_file
from abpgen.generation.project import discover_project
from abpgen.generation.renderer import TemplateRenderer
from abpgen.generation.source_parser import TypeRegistry, parse_primary_type, scan_types
from abpgen.generation.writer import write_files
from abpgen.models import GlobalConfig, ProjectInfo, TypeInfo
from abpgen.workflow import (
    BASE_DIRECTORY_VARIABLE,
    EXCLUDE_DIRECTORIES_VARIABLE,
    OVERWRITE_VARIABLE,
    Stage,
    Variable,
    WorkflowContext,
)

CONFIG_VARIABLE: Variable[GlobalConfig] = Variable(
    "Config", GlobalConfig, "Effective configuration for this run"
)
PROJECT_INFO_VARIABLE: Variable[ProjectInfo] = Variable(
    "ProjectInfo", ProjectInfo, "Discovered ABP solution layout"
)
TYPE_REGISTRY_VARIABLE: Variable[TypeRegistry] = Variable(
    "Types", TypeRegistry, "Every type declared in the solution"
)
SOURCE_FILE_VARIABLE: Variable[str] = Variable(
    "SourceFile", str, "Path of the C# file the command works on"
)
ENTITY_INFO_VARIABLE: Variable[TypeInfo] = Variable(
    "EntityInfo", TypeInfo, "Parsed entity declaration"
)
SERVICE_INFO_VARIABLE: Variable[TypeInfo] = Variable(
    "ServiceInfo", TypeInfo, "Parsed application-service interface"
)
NAMES_VARIABLE: Variable[dict] = Variable(
    "Names", dict, "Derived names used by the templates"
)
GENERATED_FILES_VARIABLE: Variable[list] = Variable(
    "GeneratedFiles", list, "Rendered files waiting to be written"
)


def _excludes(context: WorkflowContext) -> list[str]:
    """--exclude patterns followed by configured ones."""
    patterns = list(context.get(EXCLUDE_DIRECTORIES_VARIABLE))
    if context.has(CONFIG_VARIABLE):
        for pattern in context.get(CONFIG_VARIABLE).exclude_directories:
            if pattern not in patterns:
                patterns.append(pattern)
    return patterns


class LoadConfigStage(Stage):
    """Resolve global and project configuration for the base directory."""

    def __init__(self, target: Variable[GlobalConfig] = CONFIG_VARIABLE) -> None:
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (BASE_DIRECTORY_VARIABLE,)

    def execute(self, context: WorkflowContext) -> None:
        context.set(self.target, resolve_config(context.get(BASE_DIRECTORY_VARIABLE)))


class DiscoverProjectStage(Stage):
    """Find the ABP solution below the base directory."""

    def __init__(self, target: Variable[ProjectInfo] = PROJECT_INFO_VARIABLE) -> None:
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (BASE_DIRECTORY_VARIABLE, EXCLUDE_DIRECTORIES_VARIABLE)

    def execute(self, context: WorkflowContext) -> None:
        project = discover_project(context.get(BASE_DIRECTORY_VARIABLE), _excludes(context))
        context.set(self.target, project)


class FindFileStage(Stage):
    """Locate a single file by gitignore-style pattern."""

    def __init__(self, pattern: str, target: Variable[str] = SOURCE_FILE_VARIABLE) -> None:
        self.pattern = pattern
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (BASE_DIRECTORY_VARIABLE, EXCLUDE_DIRECTORIES_VARIABLE)

    def describe(self) -> str:
        return f"{self.name}({self.pattern}) -> {self.target.name}"

    def execute(self, context: WorkflowContext) -> None:
        path = find_file(context.get(BASE_DIRECTORY_VARIABLE), self.pattern, _excludes(context))
        context.set(self.target, str(path))


class ScanTypesStage(Stage):
    """Parse every ``.cs`` file of the solution into a type registry."""

    def __init__(self, target: Variable[TypeRegistry] = TYPE_REGISTRY_VARIABLE) -> None:
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (BASE_DIRECTORY_VARIABLE, EXCLUDE_DIRECTORIES_VARIABLE)

    def execute(self, context: WorkflowContext) -> None:
        context.set(self.target, scan_types(context.get(BASE_DIRECTORY_VARIABLE), _excludes(context)))


class ParseTypeStage(Stage):
    """Parse the type named *type_name* out of the file held in *source*."""

    def __init__(self, source: Variable[str], type_name: str, target: Variable[TypeInfo]) -> None:
        self.source = source
        self.type_name = type_name
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (self.source,)

    def describe(self) -> str:
        return f"{self.name}({self.type_name}) -> {self.target.name}"

    def execute(self, context: WorkflowContext) -> None:
        context.set(self.target, parse_primary_type(context.get(self.source), self.type_name))


class RenderTemplatesStage(Stage):
    """Render a template group with variables bound to template names.

    Args:
        group: Template group directory name (``"crud"``).
        bindings: Template variable name -> pipeline variable.
        types: Optional registry variable handed to the route helpers.
        target: Variable receiving the list of generated files.
    """

    def __init__(
        self,
        group: str,
        bindings: dict[str, Variable[Any]],
        types: Optional[Variable[TypeRegistry]] = None,
        target: Variable[list] = GENERATED_FILES_VARIABLE,
    ) -> None:
        self.group = group
        self.bindings = dict(bindings)
        self.types = types
        self.target = target

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        reads = list(self.bindings.values())
        if self.types is not None:
            reads.append(self.types)
        return tuple(reads)

    def describe(self) -> str:
        return f"{self.name}({self.group}) -> {self.target.name}"

    def execute(self, context: WorkflowContext) -> None:
        templates_dir = None
        if context.has(CONFIG_VARIABLE):
            templates_dir = context.get(CONFIG_VARIABLE).templates_dir
        types = context.get(self.types) if self.types is not None else None

        renderer = TemplateRenderer(templates_dir, types)
        template_context = {name: context.get(var) for name, var in self.bindings.items()}
        context.set(self.target, renderer.render_group(self.group, template_context))


class WriteFilesStage(Stage):
    """Write rendered files, honouring the Overwrite variable."""

    def __init__(self, source: Variable[list] = GENERATED_FILES_VARIABLE, dry_run: bool = False) -> None:
        self.source = source
        self.dry_run = dry_run

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return (self.source, OVERWRITE_VARIABLE)

    def describe(self) -> str:
        return f"{self.name}({self.source.name}{', dry run' if self.dry_run else ''})"

    def execute(self, context: WorkflowContext) -> None:
        write_files(
            context.get(self.source),
            overwrite=context.get(OVERWRITE_VARIABLE),
            dry_run=self.dry_run,
        )
