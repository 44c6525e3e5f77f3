"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for openapi-import:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-import/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Global config** -- A single :class:`~openapi_import.models.GlobalConfig`
  JSON file storing defaults (output format, sampling depth, export
  folder policy).
* **Project config** -- ``./openapi-import.json`` next to the documents a
  repository imports, using the same shape as the global file.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`), which the export host reuses for request documents.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from openapi_import.exceptions import ConfigError
from openapi_import.models import GlobalConfig

_APP_NAME = "openapi-import"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "openapi-import.json"

ENV_FORMAT = "OPENAPI_IMPORT_FORMAT"
ENV_MAX_DEPTH = "OPENAPI_IMPORT_MAX_DEPTH"
ENV_ROOT_FOLDER = "OPENAPI_IMPORT_ROOT_FOLDER"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/openapi-import/`` (default
    ``~/.config/openapi-import/``). On macOS/Windows: ``~/.openapi-import/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-import/`` (default
    ``~/.local/share/openapi-import/``). On macOS/Windows:
    ``~/.openapi-import/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~openapi_import.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./openapi-import.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_update(out[key], value)
        else:
            out[key] = value
    return out


# --- Precedence resolution ---


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_format``; ``--max-depth`` and ``--root-name``
           are applied by the commands that take them)
        2. Environment variables (``OPENAPI_IMPORT_FORMAT``,
           ``OPENAPI_IMPORT_MAX_DEPTH``, ``OPENAPI_IMPORT_ROOT_FOLDER``)
        3. Project config (``./openapi-import.json``)
        4. User config (``~/.config/openapi-import/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file or environment value is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        try:
            config = GlobalConfig.model_validate(
                _deep_update(config.model_dump(mode="json"), project)
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_format = os.environ.get(ENV_FORMAT)
    if env_format:
        config.output.format = env_format

    env_depth = os.environ.get(ENV_MAX_DEPTH)
    if env_depth:
        try:
            config.sampling.max_depth = int(env_depth)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_MAX_DEPTH} must be an integer (got {env_depth!r})"
            ) from exc

    env_root = os.environ.get(ENV_ROOT_FOLDER)
    if env_root:
        config.export.root_folder_name = env_root

    if cli_format is not None:
        config.output.format = cli_format

    # Attribute assignment is not validated; re-check the merged result.
    try:
        return GlobalConfig.model_validate(config.model_dump())
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
