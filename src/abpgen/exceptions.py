"""Exception hierarchy for abpgen.

All exceptions inherit from :class:`AbpGenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`abpgen.exit_codes`.
Generated commands translate ``AbpGenError`` into ``typer.Exit`` with that
code, while :func:`abpgen.app.main` writes a crash log for anything else.

Subclass hierarchy::

    AbpGenError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- DirectoryNotFoundError   (exit 3)
    +-- ProjectNotFoundError     (exit 4)
    +-- SourceParseError         (exit 5)
    +-- TemplateError            (exit 6)
    +-- WorkflowError            (exit 7)
    +-- ConfigError              (exit 1)
"""

from abpgen.exit_codes import (
    EXIT_DIRECTORY_NOT_FOUND,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROJECT_NOT_FOUND,
    EXIT_SOURCE_PARSE_ERROR,
    EXIT_TEMPLATE_ERROR,
    EXIT_WORKFLOW_FAULTED,
)


class AbpGenError(Exception):
    """Base exception for all abpgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`abpgen.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AbpGenError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class DirectoryNotFoundError(AbpGenError):
    """Raised when an explicitly supplied base directory does not exist."""

    exit_code = EXIT_DIRECTORY_NOT_FOUND


class ProjectNotFoundError(AbpGenError):
    """Raised when the ABP solution or a requested source file cannot be located."""

    exit_code = EXIT_PROJECT_NOT_FOUND


class SourceParseError(AbpGenError):
    """Raised when a C# source file contains no recognisable type declaration."""

    exit_code = EXIT_SOURCE_PARSE_ERROR


class TemplateError(AbpGenError):
    """Raised when a template manifest is invalid or a template fails to render."""

    exit_code = EXIT_TEMPLATE_ERROR


class WorkflowError(AbpGenError):
    """Raised when a pipeline ends in any status other than ``Finished``."""

    exit_code = EXIT_WORKFLOW_FAULTED


class ConfigError(AbpGenError):
    """Raised for configuration problems (malformed option declarations, invalid config files)."""

    exit_code = EXIT_GENERIC_FAILURE
