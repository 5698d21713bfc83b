"""Typed variable handles and the per-run variable store.

A :class:`Variable` is a named, typed slot. Stages write their output into
a slot and later stages read it back through the same handle object, so a
reference between stages is visible in code (and in tests) instead of
being buried inside an expression string.

The four well-known variables are set by the base pipeline of every
command (see :meth:`abpgen.commands.base.CommandWithOptions.build_base_pipeline`)
and may be read, but never redefined, by appended stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from abpgen.exceptions import WorkflowError

T = TypeVar("T")


@dataclass(frozen=True)
class Variable(Generic[T]):
    """A named slot in a :class:`WorkflowContext`.

    Attributes:
        name: Name unique within one pipeline (``"BaseDirectory"``).
        type: Runtime type checked on assignment. ``object`` disables the check.
        description: Short human-readable purpose, shown in debug output.
    """

    name: str
    type: type = object
    description: str = ""

    def __str__(self) -> str:
        return self.name


OPTION_VARIABLE: Variable[dict] = Variable(
    "Option", dict, "Command options serialised to a JSON object"
)
BASE_DIRECTORY_VARIABLE: Variable[str] = Variable(
    "BaseDirectory", str, "Resolved base directory of the ABP solution"
)
EXCLUDE_DIRECTORIES_VARIABLE: Variable[list] = Variable(
    "ExcludeDirectories", list, "Patterns excluded from file searches"
)
OVERWRITE_VARIABLE: Variable[bool] = Variable(
    "Overwrite", bool, "Whether existing files may be overwritten"
)

WELL_KNOWN_VARIABLES: tuple[Variable[Any], ...] = (
    OPTION_VARIABLE,
    BASE_DIRECTORY_VARIABLE,
    EXCLUDE_DIRECTORIES_VARIABLE,
    OVERWRITE_VARIABLE,
)


class WorkflowContext:
    """Variable bindings scoped to a single pipeline run."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, variable: Variable[T], value: T) -> None:
        """Bind *value* to *variable*, checking it against ``variable.type``.

        Raises:
            WorkflowError: If *value* has the wrong type.
        """
        if variable.type is not object and not isinstance(value, variable.type):
            raise WorkflowError(
                f"Variable '{variable.name}' expects {variable.type.__name__}, "
                f"got {type(value).__name__}"
            )
        self._values[variable.name] = value

    def get(self, variable: Variable[T]) -> T:
        """Return the value bound to *variable*.

        Raises:
            WorkflowError: If no earlier stage has set the variable.
        """
        try:
            return self._values[variable.name]
        except KeyError:
            raise WorkflowError(f"Variable '{variable.name}' has not been set") from None

    def has(self, variable: Variable[Any]) -> bool:
        return variable.name in self._values

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of every binding, keyed by variable name."""
        return dict(self._values)
