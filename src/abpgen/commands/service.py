"""``abpgen generate service`` -- an empty application service and its interface."""

from __future__ import annotations

from functools import partial
from typing import Any

from abpgen.commands.base import CommandWithOptions
from abpgen.commands.options import ServiceOptions
from abpgen.exceptions import InvalidUsageError
from abpgen.generation.conventions import remove_postfix
from abpgen.generation.stages import (
    NAMES_VARIABLE,
    PROJECT_INFO_VARIABLE,
    DiscoverProjectStage,
    LoadConfigStage,
    RenderTemplatesStage,
    WriteFilesStage,
)
from abpgen.models import ProjectInfo
from abpgen.workflow import OPTION_VARIABLE, FromVariable, PipelineBuilder, SetVariable


def build_service_names(project: ProjectInfo, options: ServiceOptions) -> dict[str, Any]:
    """Derive the service name, folder and namespace.

    ``BookAppService`` and ``Book`` both name the ``Book`` service. The
    folder doubles as the namespace suffix.
    """
    service = remove_postfix(options.name, "AppService")
    if not service:
        raise InvalidUsageError(f"'{options.name}' is not a valid service name")

    folder = options.folder.replace("\\", "/").strip("/")
    namespace = project.full_name
    if folder:
        namespace += "." + folder.replace("/", ".")
    return {"service": service, "folder": folder, "namespace": namespace}


class ServiceCommand(CommandWithOptions):
    options_type = ServiceOptions

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("help", "Generate an empty application service and its interface.")
        super().__init__("service", **kwargs)

    def configure_pipeline(self, builder: PipelineBuilder, options: ServiceOptions) -> PipelineBuilder:
        return (
            builder
            .then(LoadConfigStage())
            .then(DiscoverProjectStage())
            .then(SetVariable(
                NAMES_VARIABLE,
                FromVariable(PROJECT_INFO_VARIABLE, transform=partial(build_service_names, options=options)),
            ))
            .then(RenderTemplatesStage("service", {
                "project": PROJECT_INFO_VARIABLE,
                "option": OPTION_VARIABLE,
                "names": NAMES_VARIABLE,
            }))
            .then(WriteFilesStage(dry_run=options.dry_run))
        )
