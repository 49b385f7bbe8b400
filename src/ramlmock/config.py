"""Configuration: XDG data directory, project config, and option precedence.

* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ramlmock/`` on macOS and Windows. Holds crash logs written by
  :func:`~ramlmock.app.main`. See :func:`get_data_dir`.
* **Project config** -- an optional ``ramlmock.json`` in the working
  directory naming the RAML sources of a repository, loaded by
  :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_options` merges CLI flags,
  environment variables, and the project config into one
  :class:`~ramlmock.models.GenerateOptions`.

Example ``ramlmock.json``::

    {"files": ["api/*.raml"], "use_api_version": true}
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ramlmock.exceptions import ConfigError
from ramlmock.models import GenerateOptions

_APP_NAME = "ramlmock"
_PROJECT_CONFIG_FILENAME = "ramlmock.json"

ENV_PATH = "RAMLMOCK_PATH"
ENV_FILES = "RAMLMOCK_FILES"
ENV_USE_API_VERSION = "RAMLMOCK_USE_API_VERSION"

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off", ""])


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ramlmock/`` (default
    ``~/.local/share/ramlmock/``). On macOS/Windows: ``~/.ramlmock/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./ramlmock.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Environment ---


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (got {value!r})")


def _env_sources() -> dict[str, Any]:
    env_path = os.environ.get(ENV_PATH)
    env_files = os.environ.get(ENV_FILES)
    if env_path and env_files:
        raise ConfigError(f"Set only one of {ENV_PATH} and {ENV_FILES}")
    if env_path:
        return {"path": env_path}
    if env_files:
        return {"files": [f for f in env_files.split(os.pathsep) if f]}
    return {}


# --- Precedence resolution ---


def resolve_options(
    cli_path: Optional[str] = None,
    cli_files: Optional[list[str]] = None,
    cli_use_api_version: Optional[bool] = None,
    formats: Optional[dict[str, Callable[..., Any]]] = None,
) -> GenerateOptions:
    """Resolve collection options with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_path``, ``cli_files``, ``cli_use_api_version``)
        2. Environment variables (``RAMLMOCK_PATH`` or ``RAMLMOCK_FILES``,
           ``RAMLMOCK_USE_API_VERSION``)
        3. Project config (``./ramlmock.json``)
        4. Defaults

    Sources (``path``/``files``) are taken as a unit from the highest layer
    that sets either of them, so a CLI file list replaces a project path.

    Raises:
        ConfigError: If a layer is malformed or the merged options are
            invalid.
    """
    project = load_project_config() or {}

    sources: dict[str, Any] = {
        key: project[key] for key in ("path", "files") if project.get(key) is not None
    }
    use_api_version: Any = project.get("use_api_version", project.get("useApiVersion", False))

    env_sources = _env_sources()
    if env_sources:
        sources = env_sources
    env_use_api_version = _env_bool(ENV_USE_API_VERSION)
    if env_use_api_version is not None:
        use_api_version = env_use_api_version

    if cli_path is not None:
        sources = {"path": cli_path}
    elif cli_files:
        sources = {"files": list(cli_files)}
    if cli_use_api_version is not None:
        use_api_version = cli_use_api_version

    try:
        return GenerateOptions(
            **sources, use_api_version=use_api_version, formats=formats or {}
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc
