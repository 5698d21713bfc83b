"""abpgen -- Scaffold ABP framework application code from the command line.

This package reads an ABP solution on disk, discovers entity and service
metadata from its C# sources, and renders DTOs, application services and
HTTP API controllers through Jinja2 templates.

Typical workflow::

    abpgen generate crud Book -d ./Acme.BookStore
    abpgen generate controller Book
    abpgen inspect routes src/Acme.BookStore.Application.Contracts/Books/IBookAppService.cs

Every ``generate`` command builds a short linear pipeline of stages (see
:mod:`abpgen.workflow`) and executes it once per invocation.

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware global configuration and project-local overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
