"""Workflow engine -- typed variables, stages and a sequential pipeline.

Every ``abpgen generate`` command builds exactly one :class:`Pipeline` and
runs it once. Stages communicate only through :class:`Variable` slots held
in a :class:`WorkflowContext`; a stage that needs an earlier result holds
the earlier stage's variable *handle* rather than a copy of its value.

Typical usage::

    from abpgen.workflow import Literal, PipelineBuilder, SetVariable, Variable

    greeting = Variable("Greeting", str)
    pipeline = PipelineBuilder().start_with(SetVariable(greeting, Literal("hi"))).build()
    result = pipeline.run()
    assert result.context.get(greeting) == "hi"

Sub-modules:

* :mod:`~abpgen.workflow.variables` -- :class:`Variable` handles, the four
  well-known variables, and :class:`WorkflowContext`.
* :mod:`~abpgen.workflow.stages` -- :class:`Stage`, :class:`SetVariable` and
  the value sources (:class:`Literal`, :class:`Serialized`,
  :class:`FromVariable`).
* :mod:`~abpgen.workflow.pipeline` -- :class:`PipelineBuilder`,
  :class:`Pipeline`, :class:`PipelineResult`, :class:`WorkflowStatus`.
"""

from abpgen.workflow.pipeline import (
    Pipeline,
    PipelineBuilder,
    PipelineBuilderFactory,
    PipelineResult,
    WorkflowStatus,
)
from abpgen.workflow.stages import FromVariable, Literal, Serialized, SetVariable, Stage, ValueSource
from abpgen.workflow.variables import (
    BASE_DIRECTORY_VARIABLE,
    EXCLUDE_DIRECTORIES_VARIABLE,
    OPTION_VARIABLE,
    OVERWRITE_VARIABLE,
    WELL_KNOWN_VARIABLES,
    Variable,
    WorkflowContext,
)

__all__ = [
    "BASE_DIRECTORY_VARIABLE",
    "EXCLUDE_DIRECTORIES_VARIABLE",
    "OPTION_VARIABLE",
    "OVERWRITE_VARIABLE",
    "WELL_KNOWN_VARIABLES",
    "FromVariable",
    "Literal",
    "Pipeline",
    "PipelineBuilder",
    "PipelineBuilderFactory",
    "PipelineResult",
    "Serialized",
    "SetVariable",
    "Stage",
    "ValueSource",
    "Variable",
    "WorkflowContext",
    "WorkflowStatus",
]
