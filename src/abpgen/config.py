"""Where abpgen keeps its settings, and how they are combined.

Three sources feed the effective :class:`~abpgen.models.GlobalConfig` of a
run, highest precedence first:

1. the ``ABPGEN_TEMPLATES_DIR`` environment variable;
2. a project file next to the solution -- ``abpgen.json``, ``abpgen.yaml``
   or ``abpgen.yml`` (first one found wins);
3. the user file ``config.json`` in :func:`get_config_dir`.

Exclude patterns are the exception: they accumulate across sources
instead of overriding each other.

The per-user directories follow the XDG Base Directory layout on Linux and
BSD and live under ``~/.abpgen/`` elsewhere. Every file abpgen writes, user
config and generated C# alike, goes through :func:`atomic_write`.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from abpgen.exceptions import ConfigError
from abpgen.models import GlobalConfig

_APP_NAME = "abpgen"
_USER_CONFIG_FILE = "config.json"
_PROJECT_CONFIG_FILES = ("abpgen.json", "abpgen.yaml", "abpgen.yml")
_TEMPLATES_DIR_ENV = "ABPGEN_TEMPLATES_DIR"

# kind -> (XDG variable, default under $HOME, subdirectory of ~/.abpgen elsewhere)
_APP_DIRS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("logs",)),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _APP_DIRS[kind]
    if _is_xdg_platform():
        root = os.environ.get(env_var) or Path.home().joinpath(*xdg_default)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/abpgen`` (``~/.config/abpgen``), or ``~/.abpgen``.

    The directory is created on first use.
    """
    return _app_dir("config")


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/abpgen`` (``~/.local/share/abpgen``), or ``~/.abpgen/logs``.

    Crash logs are written below it.
    """
    return _app_dir("data")


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The text goes to a hidden temp file beside *path* first, so readers
    never see a half-written file. Line endings are written exactly as
    given. Parent directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def _user_config_path() -> Path:
    return get_config_dir() / _USER_CONFIG_FILE


def load_global_config() -> GlobalConfig:
    """Read the user config; a missing file means defaults.

    Raises:
        ConfigError: If the file is not valid JSON or has invalid values.
    """
    path = _user_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    atomic_write(_user_config_path(), config.model_dump_json(indent=2) + "\n")


def find_project_config(directory: str | Path) -> Optional[Path]:
    """Return the project config file in *directory*, or ``None``."""
    candidates = (Path(directory) / name for name in _PROJECT_CONFIG_FILES)
    return next((path for path in candidates if path.is_file()), None)


def load_project_config(directory: str | Path) -> Optional[dict[str, Any]]:
    """Parse the project config in *directory* into a plain mapping.

    ``.json`` files are read with :mod:`json`, ``.yaml``/``.yml`` with
    :func:`yaml.safe_load`; an empty YAML file is an empty mapping.

    Returns:
        The mapping, or ``None`` when the directory has no project config.

    Raises:
        ConfigError: If the file cannot be read or parsed, or its top level
            is not a mapping.
    """
    path = find_project_config(directory)
    if path is None:
        return None

    parse = json.loads if path.suffix == ".json" else yaml.safe_load
    try:
        data = parse(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a mapping (got {type(data).__name__})")
    return data


def _project_config(base_directory: str | Path) -> Optional[GlobalConfig]:
    raw = load_project_config(base_directory)
    if raw is None:
        return None
    try:
        config = GlobalConfig.model_validate(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid project config in {base_directory}: {exc}") from exc

    if config.templates_dir and not Path(config.templates_dir).is_absolute():
        config = config.model_copy(update={"templates_dir": str(Path(base_directory) / config.templates_dir)})
    return config


def resolve_config(base_directory: Optional[str | Path] = None) -> GlobalConfig:
    """Combine environment, project and user config for one run.

    A relative ``templates_dir`` in the project file is taken relative to
    *base_directory*. Exclude patterns are concatenated user-first, with
    duplicates dropped.

    Raises:
        ConfigError: If any of the files is invalid.
    """
    layers = [load_global_config()]
    if base_directory is not None:
        project = _project_config(base_directory)
        if project is not None:
            layers.append(project)

    excludes: list[str] = []
    templates_dir: Optional[str] = None
    for layer in layers:
        for pattern in layer.exclude_directories:
            if pattern not in excludes:
                excludes.append(pattern)
        templates_dir = layer.templates_dir or templates_dir

    templates_dir = os.environ.get(_TEMPLATES_DIR_ENV) or templates_dir
    return GlobalConfig(exclude_directories=excludes, templates_dir=templates_dir)
