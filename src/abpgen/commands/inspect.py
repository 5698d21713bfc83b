"""Inspect commands -- show what abpgen derives from existing C# sources.

``abpgen inspect routes <file>`` lists the HTTP verb and route a generated
controller would use for each method of the types declared in a file. It
is handy for checking the verb conventions before generating anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from abpgen.output import get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("routes")
def inspect_routes(
    file: Path = typer.Argument(help="C# file declaring an application service."),
    directory: Optional[Path] = typer.Option(
        None, "--directory", "-d",
        help="Solution directory scanned to recognise enums and composite keys.",
    ),
) -> None:
    """List the HTTP verb and route of every method in FILE.

    Example::

        abpgen inspect routes src/Acme.BookStore.Application.Contracts/Books/IBookAppService.cs
        abpgen inspect routes IBookAppService.cs -d . --json
    """
    from abpgen.exceptions import AbpGenError
    from abpgen.generation.functions import derive_route, http_verb_label
    from abpgen.generation.source_parser import TypeRegistry, parse_file, scan_types

    try:
        types = parse_file(file)
        registry = scan_types(directory) if directory else TypeRegistry()
    except AbpGenError as exc:
        from abpgen.output import error

        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for type_info in types:
        registry.add(type_info)

    rows: list[list[str]] = []
    for type_info in types:
        for method in type_info.methods:
            rows.append([
                type_info.name,
                method.name,
                http_verb_label(method.name),
                derive_route(method, registry) or "-",
            ])

    if not rows:
        info(f"No public methods found in {file}")
        return

    get_output().print_table(
        ["Type", "Method", "Verb", "Route"], rows, title=f"Routes ({len(rows)})",
    )
