"""Base class of every generation command.

A :class:`CommandWithOptions` owns one options model type. Registering it
on a Typer app binds the model's fields to CLI parameters; invoking the
command then:

1. validates the parsed values into a frozen options object;
2. resolves the base directory (current working directory when empty);
3. builds one pipeline -- the four base stages from
   :meth:`~CommandWithOptions.build_base_pipeline` followed by whatever
   :meth:`~CommandWithOptions.configure_pipeline` appends;
4. runs it, logging start and successful completion. A pipeline that ends
   in any other status is reported and raised as
   :class:`~abpgen.exceptions.WorkflowError`.

Subclasses usually only set :attr:`options_type` and override
:meth:`configure_pipeline`.
"""

from __future__ import annotations

import operator
import os
from pathlib import Path
from typing import Any, Callable, ClassVar, Optional

import typer
from pydantic import ValidationError

from abpgen.commands.binder import bind_options, build_command_function
from abpgen.commands.options import CommandOptions
from abpgen.exceptions import AbpGenError, DirectoryNotFoundError, WorkflowError
from abpgen.exit_codes import EXIT_INVALID_USAGE
from abpgen.output import error, info, success
from abpgen.workflow import (
    BASE_DIRECTORY_VARIABLE,
    EXCLUDE_DIRECTORIES_VARIABLE,
    OPTION_VARIABLE,
    OVERWRITE_VARIABLE,
    FromVariable,
    Literal,
    Pipeline,
    PipelineBuilder,
    PipelineBuilderFactory,
    PipelineResult,
    Serialized,
    SetVariable,
    WorkflowStatus,
)


class CommandWithOptions:
    """A CLI command that runs a single pipeline built from its options.

    Args:
        name: Sub-command name (``"crud"``).
        help: Help text shown by ``--help``.
        builder_factory: Returns a fresh :class:`PipelineBuilder` for each
            run. Tests pass a factory that records the builder.

    Raises:
        ConfigError: At construction, if the options model's CLI markers
            are inconsistent (see :func:`~abpgen.commands.binder.bind_options`).
    """

    options_type: ClassVar[type[CommandOptions]] = CommandOptions

    def __init__(
        self,
        name: str,
        help: Optional[str] = None,
        builder_factory: PipelineBuilderFactory = PipelineBuilder,
    ) -> None:
        self.name = name
        self.help = help
        self._builder_factory = builder_factory
        self.parameters = bind_options(self.options_type)

    # -- CLI wiring --------------------------------------------------------

    def register(self, app: typer.Typer) -> None:
        """Add this command to *app*."""
        fn = build_command_function(
            self.parameters,
            self.invoke,
            f"_cmd_{self.name}",
            doc=self.help,
        )
        app.command(name=self.name, help=self.help)(fn)

    def invoke(self, values: dict[str, Any], root_obj: Any = None) -> PipelineResult:
        """Entry point of the generated Typer function.

        *root_obj* is the root command's ``ctx.obj``; its ``dry_run`` flag
        overrides the options. Errors are logged where they are raised; here
        they only become the process exit code.
        """
        if isinstance(root_obj, dict) and root_obj.get("dry_run"):
            values = {**values, "dry_run": True}

        try:
            options = self.options_type.model_validate(values)
        except ValidationError as exc:
            error(f"Invalid options for '{self.name}': {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

        try:
            return self.run_command(options)
        except AbpGenError as exc:
            raise typer.Exit(code=exc.exit_code) from None

    # -- Pipeline ----------------------------------------------------------

    def run_command(self, options: CommandOptions) -> PipelineResult:
        """Resolve the base directory, then build and run the pipeline."""
        resolved = self.resolve_base_directory(options.directory)
        options = options.model_copy(update={"directory": resolved})
        return self.run_pipeline(lambda builder: self.create_pipeline(builder, options))

    def resolve_base_directory(self, directory: str) -> str:
        """Return *directory*, or the current working directory when empty.

        Raises:
            DirectoryNotFoundError: If a non-empty *directory* is not an existing
                directory.
        """
        if not directory:
            return os.getcwd()
        if not Path(directory).is_dir():
            error(f"Directory '{directory}' does not exist.")
            raise DirectoryNotFoundError(f"Directory '{directory}' does not exist.")
        info(f"Use directory: `{directory}`")
        return directory

    def build_base_pipeline(self, builder: PipelineBuilder, options: CommandOptions) -> PipelineBuilder:
        """Append the four stages every command starts with.

        The exclude list and overwrite flag are read back from the
        serialised options, so they always agree with the Option variable.
        """
        return (
            builder
            .start_with(SetVariable(OPTION_VARIABLE, Serialized(options)))
            .then(SetVariable(BASE_DIRECTORY_VARIABLE, Literal(options.directory)))
            .then(SetVariable(
                EXCLUDE_DIRECTORIES_VARIABLE,
                FromVariable(OPTION_VARIABLE, "exclude_directories"),
            ))
            .then(SetVariable(
                OVERWRITE_VARIABLE,
                FromVariable(OPTION_VARIABLE, "no_overwrite", transform=operator.not_),
            ))
        )

    def configure_pipeline(self, builder: PipelineBuilder, options: Any) -> PipelineBuilder:
        """Append command-specific stages. The base command adds none."""
        return builder

    def create_pipeline(self, builder: PipelineBuilder, options: CommandOptions) -> Pipeline:
        builder = self.build_base_pipeline(builder, options)
        return self.configure_pipeline(builder, options).build()

    def run_pipeline(self, build: Callable[[PipelineBuilder], Pipeline]) -> PipelineResult:
        """Build a pipeline with a fresh builder and run it to completion.

        Raises:
            WorkflowError: If the pipeline does not finish. The exit code is
                taken from the failing stage's error when it carries one.
        """
        pipeline = build(self._builder_factory())

        info(f"Command '{self.name}' started.")
        result = pipeline.run()

        if result.status == WorkflowStatus.FINISHED:
            success(f"Command '{self.name}' finished successfully.")
            return result

        cause = result.error
        error(f"Command '{self.name}' failed at {result.failed_stage}: {cause}")
        exit_code = cause.exit_code if isinstance(cause, AbpGenError) else None
        raise WorkflowError(
            f"Command '{self.name}' ended with status {result.status.value}",
            exit_code=exit_code,
        ) from cause
