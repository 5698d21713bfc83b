"""Write generated files to disk."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from abpgen.config import atomic_write
from abpgen.models import GeneratedFile
from abpgen.output import info, print_data, success, suggest, warning


@dataclass
class WriteReport:
    """Paths handled by :func:`write_files`."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def write_files(
    files: list[GeneratedFile],
    overwrite: bool = True,
    dry_run: bool = False,
) -> WriteReport:
    """Write *files*, leaving existing ones alone unless *overwrite* is set.

    With *dry_run* nothing is written; the target paths are printed to
    stdout instead, one per line.
    """
    report = WriteReport()
    for generated in files:
        path = Path(generated.path)
        exists = path.exists()

        if exists and not overwrite:
            warning(f"File '{path}' already exists, skipped.")
            report.skipped.append(str(path))
            continue

        if dry_run:
            print_data(str(path))
        else:
            atomic_write(path, generated.content)
            if exists:
                info(f"Overwrote {path}")
            else:
                success(f"Created {path}")
        report.written.append(str(path))

    if report.skipped:
        suggest("Run without --no-overwrite to replace existing files.")
    return report
