"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for climcp:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.climcp/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~climcp.models.GlobalConfig`
  JSON file storing serve defaults and output preferences.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project-local config, and global config into the
  effective :class:`~climcp.models.ServeSettings`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from climcp.exceptions import ConfigError
from climcp.models import GlobalConfig, ServeSettings

_APP_NAME = "climcp"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "climcp.json"

_ENV_OVERRIDES: dict[str, str] = {
    "CLIMCP_TOOL_PREFIX": "tool_prefix",
    "CLIMCP_TIMEOUT": "timeout",
    "CLIMCP_DEFAULT_LIMIT": "default_limit",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/climcp/`` (default ``~/.config/climcp/``).
    On macOS/Windows: ``~/.climcp/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/climcp/`` (default ``~/.local/share/climcp/``).
    On macOS/Windows: ``~/.climcp/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
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
        fd = None  # prevent double-close below
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
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~climcp.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./climcp.json``.

    The file holds a ``serve`` object with the same keys as
    :class:`~climcp.models.ServeSettings`, letting a repository pin the tool
    prefix or timeout for the CLI it ships.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Precedence resolution ---


def resolve_settings(**cli_overrides: Any) -> ServeSettings:
    """Resolve serve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_overrides``; ``None`` values are ignored)
        2. Environment variables (``CLIMCP_TOOL_PREFIX``, ``CLIMCP_TIMEOUT``,
           ``CLIMCP_DEFAULT_LIMIT``)
        3. Project config (``./climcp.json``)
        4. User config (``~/.config/climcp/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a layer holds a value that fails validation.
    """
    data = load_global_config().serve.model_dump()

    project = load_project_config()
    if project is not None:
        serve_section = project.get("serve", {})
        if not isinstance(serve_section, dict):
            raise ConfigError("Project config 'serve' must be a JSON object")
        data.update(serve_section)

    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field] = value

    data.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        return ServeSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid serve settings: {exc}") from exc
