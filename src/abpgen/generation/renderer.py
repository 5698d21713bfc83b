"""Render template groups into :class:`~abpgen.models.GeneratedFile` objects.

A *template group* is a directory holding Jinja2 templates plus a
``manifest.yaml`` listing which template produces which file::

    description: DTOs and application service for an entity
    files:
      - template: Dto.cs.j2
        target: "{{ project.layer_dir('Application.Contracts') }}/{{ names.folder }}/Dtos/{{ names.dto }}.cs"
      - template: CreateDto.cs.j2
        target: "..."
        when: "option.separate_dto"

Groups ship inside the package under ``generation/templates/``. A
``templates_dir`` from configuration is searched first, so a user can
override single templates of a group (or a whole manifest) without copying
the rest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import jinja2
import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from abpgen.exceptions import TemplateError
from abpgen.generation.functions import register_template_functions
from abpgen.generation.source_parser import TypeRegistry
from abpgen.models import GeneratedFile, TemplateManifest
from abpgen.output import debug

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Packaged template groups (``generation/templates/<group>/``)."""

MANIFEST_NAME = "manifest.yaml"


def create_environment(
    templates_dir: Optional[str | Path] = None,
    types: Optional[TypeRegistry] = None,
) -> Environment:
    """Create the Jinja2 environment used for C# generation.

    Autoescape is off: the output is source code, not HTML. Undefined
    variables raise instead of rendering as empty strings.
    """
    search_path = [str(TEMPLATE_DIR)]
    if templates_dir:
        search_path.insert(0, str(templates_dir))
    env = Environment(
        loader=FileSystemLoader(search_path),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    register_template_functions(env, types)
    return env


class TemplateRenderer:
    """Renders the files of one template group against a context dict."""

    def __init__(
        self,
        templates_dir: Optional[str | Path] = None,
        types: Optional[TypeRegistry] = None,
    ) -> None:
        self.env = create_environment(templates_dir, types)

    def load_manifest(self, group: str) -> TemplateManifest:
        """Load and validate ``<group>/manifest.yaml``.

        Raises:
            TemplateError: If the manifest is missing or malformed.
        """
        name = f"{group}/{MANIFEST_NAME}"
        try:
            source, filename, _ = self.env.loader.get_source(self.env, name)
        except jinja2.TemplateNotFound:
            raise TemplateError(f"Template group '{group}' has no {MANIFEST_NAME}") from None
        try:
            data = yaml.safe_load(source) or {}
            return TemplateManifest.model_validate(data)
        except (yaml.YAMLError, ValueError) as exc:
            raise TemplateError(f"Invalid manifest {filename}: {exc}") from exc

    def render_group(self, group: str, context: dict[str, Any]) -> list[GeneratedFile]:
        """Render every file of *group* whose ``when`` condition holds.

        Raises:
            TemplateError: If a template is missing or fails to render.
        """
        manifest = self.load_manifest(group)
        files: list[GeneratedFile] = []

        for entry in manifest.files:
            template_name = f"{group}/{entry.template}"
            try:
                if entry.when and not self.env.compile_expression(entry.when)(**context):
                    debug(f"Skipping {template_name}: condition '{entry.when}' is false")
                    continue
                target = self.env.from_string(entry.target).render(**context).strip()
                content = self.env.get_template(template_name).render(**context)
            except jinja2.TemplateNotFound as exc:
                raise TemplateError(f"Template '{exc.name}' not found") from exc
            except jinja2.TemplateError as exc:
                raise TemplateError(f"Failed to render {template_name}: {exc}") from exc

            files.append(GeneratedFile(
                path=str(Path(target)),
                content=content,
                template=template_name,
            ))

        debug(f"Rendered {len(files)} file(s) from template group '{group}'")
        return files
