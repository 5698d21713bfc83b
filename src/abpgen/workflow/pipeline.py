"""Pipeline builder and sequential executor.

A :class:`PipelineBuilder` collects stages in order and validates the
variable wiring when each stage is added:

* a stage's target name must be unique within the pipeline, which also
  prevents appended stages from redefining the well-known variables;
* every variable a stage reads must be the target of an earlier stage.

:meth:`Pipeline.run` executes the stages one after another in a fresh
:class:`~abpgen.workflow.variables.WorkflowContext`. The first stage that
raises stops the run: later stages are skipped and the result reports
:attr:`WorkflowStatus.FAULTED` together with the failing stage and the
exception. A pipeline runs at most once.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional

from abpgen.exceptions import ConfigError, WorkflowError
from abpgen.output import debug
from abpgen.workflow.stages import Stage
from abpgen.workflow.variables import Variable, WorkflowContext


class WorkflowStatus(str, enum.Enum):
    """Lifecycle status of a pipeline run."""

    IDLE = "Idle"
    RUNNING = "Running"
    FINISHED = "Finished"
    FAULTED = "Faulted"


@dataclass
class PipelineResult:
    """Outcome of :meth:`Pipeline.run`.

    Attributes:
        status: ``FINISHED`` when every stage ran, ``FAULTED`` otherwise.
        context: The variable bindings at the point the run stopped.
        error: The exception raised by the failing stage, if any.
        failed_stage: Description of the failing stage, if any.
    """

    status: WorkflowStatus
    context: WorkflowContext
    error: Optional[BaseException] = None
    failed_stage: Optional[str] = None


class Pipeline:
    """An ordered, immutable sequence of stages that runs once."""

    def __init__(self, stages: list[Stage]) -> None:
        self._stages = tuple(stages)
        self._status = WorkflowStatus.IDLE

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    @property
    def status(self) -> WorkflowStatus:
        return self._status

    def __len__(self) -> int:
        return len(self._stages)

    def run(self, context: Optional[WorkflowContext] = None) -> PipelineResult:
        """Execute every stage in order.

        Args:
            context: Optional pre-populated context; a fresh one is created
                when omitted.

        Returns:
            A :class:`PipelineResult` with the terminal status.

        Raises:
            WorkflowError: If the pipeline has already been run.
        """
        if self._status != WorkflowStatus.IDLE:
            raise WorkflowError("A pipeline can only be run once")

        ctx = context if context is not None else WorkflowContext()
        self._status = WorkflowStatus.RUNNING

        for index, stage in enumerate(self._stages, start=1):
            debug(f"Stage {index}/{len(self._stages)}: {stage.describe()}")
            try:
                stage.execute(ctx)
            except Exception as exc:
                self._status = WorkflowStatus.FAULTED
                return PipelineResult(
                    status=self._status,
                    context=ctx,
                    error=exc,
                    failed_stage=stage.describe(),
                )

        self._status = WorkflowStatus.FINISHED
        return PipelineResult(status=self._status, context=ctx)


class PipelineBuilder:
    """Fluent builder for :class:`Pipeline`.

    Example::

        pipeline = (
            PipelineBuilder()
            .start_with(SetVariable(OPTION_VARIABLE, Serialized(options)))
            .then(SetVariable(BASE_DIRECTORY_VARIABLE, Literal(options.directory)))
            .build()
        )
    """

    def __init__(self) -> None:
        self._stages: list[Stage] = []
        self._targets: dict[str, Variable[Any]] = {}

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    def start_with(self, stage: Stage) -> PipelineBuilder:
        """Add the first stage.

        Raises:
            ConfigError: If the builder already holds stages.
        """
        if self._stages:
            raise ConfigError("start_with() must be the first stage of a pipeline")
        return self.then(stage)

    def then(self, stage: Stage) -> PipelineBuilder:
        """Append *stage* after validating its variable wiring.

        Raises:
            ConfigError: If the stage reads a variable no earlier stage sets,
                or its target name is already defined.
        """
        for variable in stage.reads:
            if variable.name not in self._targets:
                raise ConfigError(
                    f"Stage '{stage.describe()}' reads '{variable.name}' "
                    "before any stage sets it"
                )
        if stage.target is not None:
            if stage.target.name in self._targets:
                raise ConfigError(
                    f"Variable '{stage.target.name}' is already defined in this pipeline"
                )
            self._targets[stage.target.name] = stage.target
        self._stages.append(stage)
        return self

    def build(self) -> Pipeline:
        return Pipeline(self._stages)


PipelineBuilderFactory = Callable[[], PipelineBuilder]
"""Zero-argument callable returning a fresh :class:`PipelineBuilder`."""
