"""End-to-end tests of ``abpgen generate`` against a synthetic ABP solution."""

from __future__ import annotations

from pathlib import Path

import pytest

from abpgen.app import app
from abpgen.exit_codes import EXIT_DIRECTORY_NOT_FOUND, EXIT_PROJECT_NOT_FOUND

CONTRACTS = "src/Acme.BookStore.Application.Contracts"
APPLICATION = "src/Acme.BookStore.Application"
HTTP_API = "src/Acme.BookStore.HttpApi"


def _invoke(cli_runner, *args: str):
    return cli_runner.invoke(app, ["--no-color", *args])


# ---------------------------------------------------------------------------
# generate crud
# ---------------------------------------------------------------------------


class TestGenerateCrud:

    def test_default_files(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(cli_runner, "generate", "crud", "Book", "-d", str(abp_solution))
        assert result.exit_code == 0, result.output

        dtos = abp_solution / CONTRACTS / "Books" / "Dtos"
        assert sorted(p.name for p in dtos.iterdir()) == [
            "BookDto.cs",
            "CreateUpdateBookDto.cs",
            "GetBookListInput.cs",
        ]
        assert (abp_solution / APPLICATION / "Books" / "BookAppService.cs").is_file()

        assert f"Use directory: `{abp_solution}`" in result.output
        assert "Command 'crud' started." in result.output
        assert "Command 'crud' finished successfully." in result.output

    def test_dto_content(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        _invoke(cli_runner, "generate", "crud", "Book", "-d", str(abp_solution))
        dto = (abp_solution / CONTRACTS / "Books" / "Dtos" / "BookDto.cs").read_text(encoding="utf-8")

        assert "namespace Acme.BookStore.Books.Dtos" in dto
        assert "public class BookDto : FullAuditedEntityDto<Guid>" in dto
        assert "public string Name { get; set; }" in dto
        assert "public BookType Type { get; set; }" in dto
        assert "TenantId" not in dto
        assert "Counter" not in dto

    def test_app_service_content(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        _invoke(cli_runner, "generate", "crud", "Book", "-d", str(abp_solution))
        service = (abp_solution / APPLICATION / "Books" / "BookAppService.cs").read_text(encoding="utf-8")
        assert (
            "CrudAppService<Book, BookDto, Guid, GetBookListInput, "
            "CreateUpdateBookDto, CreateUpdateBookDto>"
        ) in service
        assert "IRepository<Book, Guid> repository" in service

    def test_separate_prefixed_dtos(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(
            cli_runner, "generate", "crud", "Book", "-d", str(abp_solution),
            "--separate-dto", "--entity-prefix-dto", "--skip-get-list-input-dto",
        )
        assert result.exit_code == 0, result.output
        dtos = abp_solution / CONTRACTS / "Books" / "Dtos"
        assert sorted(p.name for p in dtos.iterdir()) == [
            "BookCreateDto.cs",
            "BookDto.cs",
            "BookUpdateDto.cs",
        ]

    def test_dry_run_writes_nothing(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(cli_runner, "--dry-run", "generate", "crud", "Book", "-d", str(abp_solution))
        assert result.exit_code == 0, result.output
        assert not (abp_solution / CONTRACTS / "Books" / "Dtos").exists()
        assert "BookDto.cs" in result.stdout
        assert "BookAppService.cs" in result.stdout
        assert not (abp_solution / APPLICATION / "Books" / "BookAppService.cs").exists()
        assert "Command 'crud' finished successfully." in result.output

    def test_no_overwrite_keeps_existing(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        existing = abp_solution / CONTRACTS / "Books" / "IBookAppService.cs"
        before = existing.read_text(encoding="utf-8")

        result = _invoke(
            cli_runner, "generate", "crud", "Book", "-d", str(abp_solution), "--no-overwrite",
        )
        assert result.exit_code == 0, result.output
        assert existing.read_text(encoding="utf-8") == before
        assert "already exists, skipped" in result.output
        assert (abp_solution / CONTRACTS / "Books" / "Dtos" / "BookDto.cs").is_file()

    def test_overwrite_by_default(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        existing = abp_solution / CONTRACTS / "Books" / "IBookAppService.cs"
        result = _invoke(cli_runner, "generate", "crud", "Book", "-d", str(abp_solution))
        assert result.exit_code == 0, result.output
        assert "ICrudAppService<" in existing.read_text(encoding="utf-8")

    def test_missing_directory(self, cli_runner, isolated_config: Path, tmp_path: Path) -> None:
        missing = tmp_path / "nowhere"
        result = _invoke(cli_runner, "generate", "crud", "Book", "-d", str(missing))
        assert result.exit_code == EXIT_DIRECTORY_NOT_FOUND
        assert f"Directory '{missing}' does not exist." in result.output
        assert "started" not in result.output

    def test_file_as_directory(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        project_file = abp_solution / CONTRACTS / "Acme.BookStore.Application.Contracts.csproj"
        project_file.parent.mkdir(parents=True, exist_ok=True)
        project_file.touch()
        result = _invoke(cli_runner, "generate", "crud", "Book", "-d", str(project_file))
        assert result.exit_code == EXIT_DIRECTORY_NOT_FOUND
        assert f"Directory '{project_file}' does not exist." in result.output
        assert "Use directory" not in result.output

    def test_unknown_entity(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(cli_runner, "generate", "crud", "Author", "-d", str(abp_solution))
        assert result.exit_code == EXIT_PROJECT_NOT_FOUND
        assert "Command 'crud' failed" in result.output
        assert "Author.cs" in result.output

    def test_excluded_entity_directory(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(
            cli_runner, "generate", "crud", "Book", "-d", str(abp_solution), "--exclude", "**/Books",
        )
        assert result.exit_code == EXIT_PROJECT_NOT_FOUND
        assert not (abp_solution / CONTRACTS / "Books" / "Dtos").exists()

    def test_project_config_excludes(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        (abp_solution / "abpgen.yaml").write_text("exclude_directories:\n  - '**/Books'\n", encoding="utf-8")
        result = _invoke(cli_runner, "generate", "crud", "Book", "-d", str(abp_solution))
        assert result.exit_code == EXIT_PROJECT_NOT_FOUND

    def test_defaults_to_current_directory(
        self, cli_runner, isolated_config: Path, abp_solution: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(abp_solution)
        result = _invoke(cli_runner, "generate", "crud", "Book")
        assert result.exit_code == 0, result.output
        assert "Use directory" not in result.output
        assert (abp_solution / CONTRACTS / "Books" / "Dtos" / "BookDto.cs").is_file()


# ---------------------------------------------------------------------------
# generate service
# ---------------------------------------------------------------------------


class TestGenerateService:

    def test_files_in_folder(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(
            cli_runner, "generate", "service", "AuthorAppService", "-d", str(abp_solution),
            "-f", "Authors/Admin",
        )
        assert result.exit_code == 0, result.output

        interface = abp_solution / CONTRACTS / "Authors" / "Admin" / "IAuthorAppService.cs"
        implementation = abp_solution / APPLICATION / "Authors" / "Admin" / "AuthorAppService.cs"
        assert "namespace Acme.BookStore.Authors.Admin" in interface.read_text(encoding="utf-8")
        assert "public interface IAuthorAppService : IApplicationService" in interface.read_text(encoding="utf-8")
        assert "BookStoreAppService, IAuthorAppService" in implementation.read_text(encoding="utf-8")

    def test_without_folder(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(cli_runner, "generate", "service", "Author", "-d", str(abp_solution))
        assert result.exit_code == 0, result.output
        assert (abp_solution / CONTRACTS / "IAuthorAppService.cs").is_file()
        assert (abp_solution / APPLICATION / "AuthorAppService.cs").is_file()

    def test_no_project(self, cli_runner, isolated_config: Path, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        result = _invoke(cli_runner, "generate", "service", "Author", "-d", str(empty))
        assert result.exit_code == EXIT_PROJECT_NOT_FOUND
        assert "Cannot find an ABP domain project" in result.output


# ---------------------------------------------------------------------------
# generate controller
# ---------------------------------------------------------------------------


class TestGenerateController:

    @pytest.fixture
    def controller(self, cli_runner, isolated_config: Path, abp_solution: Path) -> str:
        result = _invoke(cli_runner, "generate", "controller", "Book", "-d", str(abp_solution))
        assert result.exit_code == 0, result.output
        path = abp_solution / HTTP_API / "Books" / "BookController.cs"
        return path.read_text(encoding="utf-8")

    def test_class_header(self, controller: str) -> None:
        assert "using Acme.BookStore.Books.Dtos;" in controller
        assert "namespace Acme.BookStore.Books" in controller
        assert '[RemoteService(Name = "BookStore")]' in controller
        assert '[Area("app")]' in controller
        assert '[Route("api/app/book")]' in controller
        assert "public class BookController : BookStoreController, IBookAppService" in controller

    @pytest.mark.parametrize("verb,route,signature", [
        ("HttpGet", "{id}", "Task<BookDto> GetAsync(Guid id)"),
        ("HttpGet", "list", "Task<PagedResultDto<BookDto>> GetListAsync(GetBookListDto input)"),
        ("HttpPut", "{id}", "Task<BookDto> UpdateAsync(Guid id, UpdateBookDto input)"),
        ("HttpDelete", "{id}", "Task DeleteAsync(Guid id)"),
        ("HttpGet", "{id}/authors/{authorId}", "Task<ListResultDto<AuthorDto>> GetAuthorsAsync(Guid id, Guid authorId)"),
        ("HttpPost", "{id}/findByType", "Task<BookDto> FindByTypeAsync(BookType id)"),
        ("HttpPost", "{BookId}/{Edition}/publish", "Task PublishAsync(BookKey id, bool notify = false)"),
    ])
    def test_routed_method(self, controller: str, verb: str, route: str, signature: str) -> None:
        expected = f'[{verb}]\n        [Route("{route}")]\n        public virtual {signature}\n'
        assert expected in controller

    def test_create_has_no_route(self, controller: str) -> None:
        assert (
            "[HttpPost]\n        public virtual Task<BookDto> CreateAsync(CreateBookDto input)"
        ) in controller

    def test_forwards_calls(self, controller: str) -> None:
        assert "return _service.GetAuthorsAsync(id, authorId);" in controller
        assert "return _service.PublishAsync(id, notify);" in controller

    def test_unknown_service(self, cli_runner, isolated_config: Path, abp_solution: Path) -> None:
        result = _invoke(cli_runner, "generate", "controller", "Author", "-d", str(abp_solution))
        assert result.exit_code == EXIT_PROJECT_NOT_FOUND
        assert "IAuthorAppService.cs" in result.output
