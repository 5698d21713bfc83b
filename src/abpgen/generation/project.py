"""Discover the ABP solution layout below a base directory.

An ABP solution is recognised by its domain project, ``<Root>.Domain.csproj``.
The part before ``.Domain`` is the solution's root namespace; every other
layer project is looked up by the same prefix.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from abpgen.exceptions import ProjectNotFoundError
from abpgen.generation.file_finder import find_files
from abpgen.models import ProjectInfo
from abpgen.output import debug

LAYERS = (
    "Domain",
    "Domain.Shared",
    "Application.Contracts",
    "Application",
    "HttpApi",
    "EntityFrameworkCore",
)

_DOMAIN_SUFFIX = ".Domain"


def discover_project(
    base_directory: str | Path,
    exclude_patterns: Optional[list[str]] = None,
) -> ProjectInfo:
    """Locate the ABP solution under *base_directory*.

    Raises:
        ProjectNotFoundError: If no ``*.Domain.csproj`` exists below the
            directory.
    """
    projects = find_files(base_directory, ["*.csproj"], exclude_patterns)
    by_stem = {}
    for path in sorted(projects, key=lambda p: (len(p.parts), str(p))):
        by_stem.setdefault(path.stem, path.parent)

    domain_stems = sorted(
        (stem for stem in by_stem if stem.endswith(_DOMAIN_SUFFIX)),
        key=lambda s: (len(by_stem[s].parts), s),
    )
    if not domain_stems:
        raise ProjectNotFoundError(
            f"Cannot find an ABP domain project (*.Domain.csproj) under '{base_directory}'"
        )

    full_name = domain_stems[0][: -len(_DOMAIN_SUFFIX)]
    layers = {}
    for layer in LAYERS:
        directory = by_stem.get(f"{full_name}.{layer}")
        if directory is not None:
            layers[layer] = str(directory)

    debug(f"Found ABP solution '{full_name}' with layers: {', '.join(layers)}")
    return ProjectInfo(
        full_name=full_name,
        name=full_name.rsplit(".", 1)[-1],
        base_directory=str(Path(base_directory).resolve()),
        layers=layers,
    )
