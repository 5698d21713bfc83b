"""Pipeline stages and the value sources they assign.

A :class:`Stage` is one step of a pipeline. The only general-purpose stage
is :class:`SetVariable`, which evaluates a :class:`ValueSource` and binds
the result to a :class:`~abpgen.workflow.variables.Variable`:

* :class:`Literal` -- a constant captured when the pipeline is built.
* :class:`Serialized` -- a Pydantic model frozen into a JSON blob at build
  time and decoded into a dict at run time.
* :class:`FromVariable` -- derived from a variable set by an earlier
  stage, optionally picking one field and applying a transform.

Generation stages (project discovery, parsing, rendering, writing) live in
:mod:`abpgen.generation.stages` and subclass :class:`Stage` directly.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import BaseModel

from abpgen.exceptions import WorkflowError
from abpgen.workflow.variables import Variable, WorkflowContext


# ---------------------------------------------------------------------------
# Value sources
# ---------------------------------------------------------------------------


class ValueSource(ABC):
    """Something a :class:`SetVariable` stage can evaluate."""

    @property
    def references(self) -> tuple[Variable[Any], ...]:
        """Variables this source reads; empty for constants."""
        return ()

    @abstractmethod
    def resolve(self, context: WorkflowContext) -> Any:
        """Compute the value against *context*."""

    @abstractmethod
    def describe(self) -> str:
        """Short description for debug output."""


class Literal(ValueSource):
    """A constant value."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def resolve(self, context: WorkflowContext) -> Any:
        return self.value

    def describe(self) -> str:
        return repr(self.value)


class Serialized(ValueSource):
    """A Pydantic model serialised to a JSON blob.

    The blob is produced once, when the source is created, so later changes
    to the model object do not leak into the pipeline.
    """

    def __init__(self, model: BaseModel) -> None:
        self.blob: str = model.model_dump_json()

    def resolve(self, context: WorkflowContext) -> dict[str, Any]:
        return json.loads(self.blob)

    def describe(self) -> str:
        return self.blob


class FromVariable(ValueSource):
    """A value derived from a variable set by an earlier stage.

    Args:
        source: Handle of the variable to read.
        field: Optional key to pick out of the variable's value (a dict key
            or an attribute name).
        transform: Optional callable applied to the picked value.
    """

    def __init__(
        self,
        source: Variable[Any],
        field: Optional[str] = None,
        transform: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        self.source = source
        self.field = field
        self.transform = transform

    @property
    def references(self) -> tuple[Variable[Any], ...]:
        return (self.source,)

    def resolve(self, context: WorkflowContext) -> Any:
        value = context.get(self.source)
        if self.field is not None:
            if isinstance(value, dict):
                if self.field not in value:
                    raise WorkflowError(
                        f"Variable '{self.source.name}' has no field '{self.field}'"
                    )
                value = value[self.field]
            else:
                value = getattr(value, self.field)
        if self.transform is not None:
            value = self.transform(value)
        return value

    def describe(self) -> str:
        expr = self.source.name
        if self.field is not None:
            expr += f".{self.field}"
        if self.transform is not None:
            name = getattr(self.transform, "__name__", "transform")
            expr = f"{name}({expr})"
        return expr


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


class Stage(ABC):
    """One step of a pipeline.

    Subclasses set :attr:`target` when they publish a variable and override
    :attr:`reads` to declare the variables they consume; the builder
    checks both before the pipeline runs.
    """

    target: Optional[Variable[Any]] = None

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return ()

    @property
    def name(self) -> str:
        return type(self).__name__

    def describe(self) -> str:
        if self.target is not None:
            return f"{self.name} -> {self.target.name}"
        return self.name

    @abstractmethod
    def execute(self, context: WorkflowContext) -> None:
        """Run the stage. Raising any exception faults the pipeline."""


class SetVariable(Stage):
    """Assign the value of a :class:`ValueSource` to a variable."""

    def __init__(self, target: Variable[Any], value: ValueSource) -> None:
        self.target = target
        self.value = value

    @property
    def reads(self) -> tuple[Variable[Any], ...]:
        return self.value.references

    def describe(self) -> str:
        return f"{self.target.name} := {self.value.describe()}"

    def execute(self, context: WorkflowContext) -> None:
        context.set(self.target, self.value.resolve(context))
