"""Canonical Pydantic models shared across all abpgen modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Source metadata** -- read-only projections of C# declarations produced by
:mod:`abpgen.generation.source_parser` and consumed by the naming/route
helpers and the templates:
    :class:`TypeKind`, :class:`ParameterInfo`, :class:`MethodInfo`,
    :class:`PropertyInfo`, and :class:`TypeInfo`.

**Generation models** -- the discovered solution layout and the files a
pipeline is about to write:
    :class:`ProjectInfo`, :class:`TemplateEntry`, :class:`TemplateManifest`,
    and :class:`GeneratedFile`.

**Configuration models** -- serialised as JSON (or YAML for project config):
    :class:`GlobalConfig`.

Metadata models are frozen: nothing downstream of the parser mutates them.
"""

from __future__ import annotations

import enum
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Source metadata ---


class TypeKind(str, enum.Enum):
    """Kinds of C# type declarations recognised by the source parser."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    STRUCT = "struct"


class ParameterInfo(BaseModel):
    """A single method parameter.

    ``type`` is the spelling used in the source (``Guid``, ``int?``,
    ``GetBookListDto``); ``full_type`` is the namespace-qualified name
    resolved against usings and the type registry (``System.Guid``,
    ``Acme.BookStore.Books.GetBookListDto``).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    full_type: str
    default: Optional[str] = None


class MethodInfo(BaseModel):
    """A public method declared on a class or interface."""

    model_config = ConfigDict(frozen=True)

    name: str
    return_type: str = "void"
    parameters: list[ParameterInfo] = Field(default_factory=list)
    is_async: bool = False


class PropertyInfo(BaseModel):
    """A public instance property (``public Guid? TenantId { get; set; }``)."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class TypeInfo(BaseModel):
    """A type declaration discovered in a C# source file.

    See Also:
        :class:`~abpgen.generation.source_parser.TypeRegistry`: Lookup of
        every type found in a solution.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = ""
    name: str
    kind: TypeKind = TypeKind.CLASS
    base_types: list[str] = Field(default_factory=list)
    properties: list[PropertyInfo] = Field(default_factory=list)
    methods: list[MethodInfo] = Field(default_factory=list)
    enum_members: list[str] = Field(default_factory=list)
    usings: list[str] = Field(default_factory=list)
    source_file: str = ""

    @property
    def full_name(self) -> str:
        """Namespace-qualified name (``Acme.BookStore.Books.Book``)."""
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def base_type(self) -> Optional[str]:
        """The first declared base type, or ``None``."""
        return self.base_types[0] if self.base_types else None

    @property
    def primary_key(self) -> Optional[str]:
        """Generic key argument of the base type (``AggregateRoot<Guid>`` -> ``Guid``).

        Entities with a composite key derive from the non-generic
        ``Entity``/``AggregateRoot`` bases and return ``None``.
        """
        base = self.base_type
        if not base:
            return None
        match = re.search(r"<\s*([\w.?]+)\s*>\s*$", base)
        return match.group(1) if match else None


# --- Generation models ---


class ProjectInfo(BaseModel):
    """Layout of the ABP solution found under the base directory.

    ``full_name`` is the solution's root namespace (``Acme.BookStore``) and
    ``name`` its last segment (``BookStore``). ``layers`` maps a layer
    suffix (``Domain``, ``Application.Contracts``, ``Application``,
    ``HttpApi``) to that project's directory.
    """

    full_name: str
    name: str
    base_directory: str
    layers: dict[str, str] = Field(default_factory=dict)

    def layer_dir(self, layer: str) -> str:
        """Return the directory of *layer*, falling back to ``src/<FullName>.<layer>``."""
        if layer in self.layers:
            return self.layers[layer]
        return f"{self.base_directory}/src/{self.full_name}.{layer}"

    def relative_namespace(self, namespace: str) -> str:
        """Strip the solution prefix from *namespace* (``Acme.BookStore.Books`` -> ``Books``)."""
        if namespace == self.full_name:
            return ""
        prefix = self.full_name + "."
        if namespace.startswith(prefix):
            return namespace[len(prefix):]
        return namespace


class TemplateEntry(BaseModel):
    """One template listed in a group's ``manifest.yaml``.

    ``target`` is itself a Jinja2 expression template producing the output
    path; ``when`` is an optional Jinja2 expression that must evaluate truthy
    for the file to be generated.
    """

    template: str
    target: str
    when: Optional[str] = None


class TemplateManifest(BaseModel):
    """Parsed ``manifest.yaml`` of a template group."""

    description: Optional[str] = None
    files: list[TemplateEntry] = Field(default_factory=list)


class GeneratedFile(BaseModel):
    """A rendered file waiting to be written."""

    path: str
    content: str
    template: str = ""


# --- Configuration ---


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/abpgen/config.json``.

    The same keys are accepted in a project-local ``abpgen.json`` /
    ``abpgen.yaml``. See :func:`~abpgen.config.resolve_config` for the
    precedence chain.
    """

    exclude_directories: list[str] = Field(
        default_factory=list,
        description="Patterns excluded from every file search, in addition to --exclude",
    )
    templates_dir: Optional[str] = Field(
        default=None,
        description="Directory whose template groups override the packaged ones",
    )
