"""``abpgen generate crud`` -- DTOs and a CRUD application service for an entity."""

from __future__ import annotations

import re
from functools import partial
from typing import Any

from abpgen.commands.base import CommandWithOptions
from abpgen.commands.options import CrudOptions
from abpgen.exceptions import InvalidUsageError
from abpgen.generation.stages import (
    ENTITY_INFO_VARIABLE,
    NAMES_VARIABLE,
    PROJECT_INFO_VARIABLE,
    SOURCE_FILE_VARIABLE,
    DiscoverProjectStage,
    FindFileStage,
    LoadConfigStage,
    ParseTypeStage,
    RenderTemplatesStage,
    WriteFilesStage,
)
from abpgen.models import TypeInfo
from abpgen.workflow import OPTION_VARIABLE, FromVariable, PipelineBuilder, SetVariable

_ENTITY_DTO_BASES = (
    ("FullAudited", "FullAuditedEntityDto"),
    ("CreationAudited", "CreationAuditedEntityDto"),
    ("Audited", "AuditedEntityDto"),
)


def dto_base_type(entity: TypeInfo, key: str) -> str:
    """Pick the ABP DTO base class matching the entity's auditing base."""
    base = re.sub(r"<.*$", "", entity.base_type or "")
    for prefix, dto_base in _ENTITY_DTO_BASES:
        if base.startswith(prefix):
            return f"{dto_base}<{key}>"
    return f"EntityDto<{key}>"


def build_crud_names(entity: TypeInfo, options: CrudOptions) -> dict[str, Any]:
    """Derive the DTO and service type names for *entity*.

    Raises:
        InvalidUsageError: If the entity has no single generic key.
    """
    key = entity.primary_key
    if key is None:
        raise InvalidUsageError(
            f"Entity '{entity.name}' has no single primary key; "
            "composite keys are not supported by 'generate crud'"
        )

    name = entity.name
    if options.entity_prefix_dto:
        create_update, create, update = (
            f"{name}CreateUpdateDto", f"{name}CreateDto", f"{name}UpdateDto",
        )
        get_list_input = f"{name}GetListInput"
    else:
        create_update, create, update = (
            f"CreateUpdate{name}Dto", f"Create{name}Dto", f"Update{name}Dto",
        )
        get_list_input = f"Get{name}ListInput"

    if not options.separate_dto:
        create = update = create_update
    if options.skip_get_list_input_dto:
        get_list_input = "PagedAndSortedResultRequestDto"

    return {
        "key": key,
        "dto": f"{name}Dto",
        "dto_base": dto_base_type(entity, key),
        "create_dto": create,
        "update_dto": update,
        "get_list_input": get_list_input,
    }


class CrudCommand(CommandWithOptions):
    options_type = CrudOptions

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("help", "Generate DTOs and a CRUD application service for an entity.")
        super().__init__("crud", **kwargs)

    def configure_pipeline(self, builder: PipelineBuilder, options: CrudOptions) -> PipelineBuilder:
        return (
            builder
            .then(LoadConfigStage())
            .then(DiscoverProjectStage())
            .then(FindFileStage(f"**/{options.entity}.cs"))
            .then(ParseTypeStage(SOURCE_FILE_VARIABLE, options.entity, ENTITY_INFO_VARIABLE))
            .then(SetVariable(
                NAMES_VARIABLE,
                FromVariable(ENTITY_INFO_VARIABLE, transform=partial(build_crud_names, options=options)),
            ))
            .then(RenderTemplatesStage("crud", {
                "project": PROJECT_INFO_VARIABLE,
                "entity": ENTITY_INFO_VARIABLE,
                "option": OPTION_VARIABLE,
                "names": NAMES_VARIABLE,
            }))
            .then(WriteFilesStage(dry_run=options.dry_run))
        )
