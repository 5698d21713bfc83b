"""``abpgen generate controller`` -- an HTTP API controller for an application service.

The controller implements the service interface and forwards every call.
Verb attributes and routes follow ABP's conventional controllers, see
:func:`~abpgen.generation.functions.derive_route`.
"""

from __future__ import annotations

import re
from functools import partial
from typing import Any

from abpgen.commands.base import CommandWithOptions
from abpgen.commands.options import ControllerOptions
from abpgen.generation.conventions import remove_postfix
from abpgen.generation.stages import (
    NAMES_VARIABLE,
    PROJECT_INFO_VARIABLE,
    SERVICE_INFO_VARIABLE,
    SOURCE_FILE_VARIABLE,
    TYPE_REGISTRY_VARIABLE,
    DiscoverProjectStage,
    FindFileStage,
    LoadConfigStage,
    ParseTypeStage,
    RenderTemplatesStage,
    ScanTypesStage,
    WriteFilesStage,
)
from abpgen.models import TypeInfo
from abpgen.workflow import OPTION_VARIABLE, FromVariable, PipelineBuilder, SetVariable

_BASE_USINGS = (
    "System",
    "System.Collections.Generic",
    "System.Threading.Tasks",
    "Microsoft.AspNetCore.Mvc",
    "Volo.Abp",
    "Volo.Abp.Application.Dtos",
)


def kebab_case(name: str) -> str:
    """``BookStore`` -> ``book-store``."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()


def service_name(name: str) -> str:
    """Normalise ``IBookAppService`` / ``BookAppService`` / ``Book`` to ``Book``."""
    name = remove_postfix(name, "AppService")
    if len(name) > 1 and name[0] == "I" and name[1].isupper():
        name = name[1:]
    return name


def build_controller_names(service: TypeInfo, options: ControllerOptions) -> dict[str, Any]:
    name = service_name(options.name)
    usings = sorted(set(_BASE_USINGS) | set(service.usings))
    return {
        "controller": f"{name}Controller",
        "area": "app",
        "route_prefix": f"api/app/{kebab_case(name)}",
        "usings": usings,
    }


class ControllerCommand(CommandWithOptions):
    options_type = ControllerOptions

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("help", "Generate an HTTP API controller for an application service.")
        super().__init__("controller", **kwargs)

    def configure_pipeline(self, builder: PipelineBuilder, options: ControllerOptions) -> PipelineBuilder:
        interface = f"I{service_name(options.name)}AppService"
        return (
            builder
            .then(LoadConfigStage())
            .then(DiscoverProjectStage())
            .then(FindFileStage(f"**/{interface}.cs"))
            .then(ScanTypesStage())
            .then(ParseTypeStage(SOURCE_FILE_VARIABLE, interface, SERVICE_INFO_VARIABLE))
            .then(SetVariable(
                NAMES_VARIABLE,
                FromVariable(SERVICE_INFO_VARIABLE, transform=partial(build_controller_names, options=options)),
            ))
            .then(RenderTemplatesStage(
                "controller",
                {
                    "project": PROJECT_INFO_VARIABLE,
                    "service": SERVICE_INFO_VARIABLE,
                    "option": OPTION_VARIABLE,
                    "names": NAMES_VARIABLE,
                },
                types=TYPE_REGISTRY_VARIABLE,
            ))
            .then(WriteFilesStage(dry_run=options.dry_run))
        )
