"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~abpgen.exceptions.AbpGenError` subclass. Shell
scripts wrapping ``abpgen`` can inspect the exit code to tell a missing
directory apart from a template failure without parsing stderr.

Example::

    $ abpgen generate crud Book -d ./missing
    $ echo $?
    3   # EXIT_DIRECTORY_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_DIRECTORY_NOT_FOUND = 3
"""The directory passed with ``--directory`` does not exist."""

EXIT_PROJECT_NOT_FOUND = 4
"""No ABP solution (or no requested source file) was found under the base directory."""

EXIT_SOURCE_PARSE_ERROR = 5
"""A C# source file could not be parsed."""

EXIT_TEMPLATE_ERROR = 6
"""A template could not be loaded or rendered."""

EXIT_WORKFLOW_FAULTED = 7
"""A pipeline stage failed and the remaining stages were skipped."""
