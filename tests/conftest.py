"""Shared test fixtures for abpgen.

Provides a synthetic ABP solution on disk, isolated config directories,
output-state management and a CLI runner. These fixtures are discovered by
pytest automatically and available to every test module.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from abpgen.output import OutputFormat, OutputManager, reset_output, set_output

from tests.samples import BOOK_APP_SERVICE_CS, BOOK_CS, BOOK_KEY_CS, BOOK_TYPE_CS


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Synthetic ABP solution
# ---------------------------------------------------------------------------

_LAYERS = (
    "Domain",
    "Domain.Shared",
    "Application.Contracts",
    "Application",
    "HttpApi",
)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def abp_solution(tmp_path: Path) -> Path:
    """A minimal ``Acme.BookStore`` solution under ``tmp_path/Acme.BookStore``.

    Layout::

        src/Acme.BookStore.<Layer>/Acme.BookStore.<Layer>.csproj
        src/Acme.BookStore.Domain/Books/{Book,BookType,BookKey}.cs
        src/Acme.BookStore.Application.Contracts/Books/IBookAppService.cs
        src/Acme.BookStore.Domain/obj/Book.cs   (build output, always ignored)
        test/Acme.BookStore.Domain.Tests/Books/Deep/Book.cs   (decoy)
    """
    root = tmp_path / "Acme.BookStore"
    for layer in _LAYERS:
        name = f"Acme.BookStore.{layer}"
        _write(root / "src" / name / f"{name}.csproj", "<Project Sdk=\"Microsoft.NET.Sdk\" />\n")

    domain = root / "src" / "Acme.BookStore.Domain"
    _write(domain / "Books" / "Book.cs", BOOK_CS)
    _write(domain / "Books" / "BookType.cs", BOOK_TYPE_CS)
    _write(domain / "Books" / "BookKey.cs", BOOK_KEY_CS)
    _write(domain / "obj" / "Book.cs", "garbage {")

    contracts = root / "src" / "Acme.BookStore.Application.Contracts"
    _write(contracts / "Books" / "IBookAppService.cs", BOOK_APP_SERVICE_CS)

    _write(
        root / "test" / "Acme.BookStore.Domain.Tests" / "Books" / "Deep" / "Book.cs",
        BOOK_CS,
    )
    return root


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears
    ``ABPGEN_TEMPLATES_DIR`` and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("ABPGEN_TEMPLATES_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format, colourless OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
