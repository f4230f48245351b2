"""Project settings loaded from pyproject.toml [tool.build-status] section.

Settings:
  progress   force (true) or disable (false) the interactive status line
  verbosity  highest log level shown above the status line (default info)
  columns    terminal width override when the size query is unreliable
  log-dir    directory for CLI log files

All settings support environment variable overrides (BUILD_STATUS_* prefix).
"""

import importlib.resources
import os
from functools import cache
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

from buildstatus.errors import SettingsError
from buildstatus.models import Verbosity


@cache
def _load_pyproject_settings() -> dict:
    """Load settings from pyproject.toml [tool.build-status] section.

    Returns:
        Dictionary of settings from pyproject.toml, empty dict if not found.
    """
    try:
        files = importlib.resources.files("buildstatus")
        pyproject_path = files.joinpath("..", "pyproject.toml")

        if not pyproject_path.is_file():  # type: ignore[union-attr]
            # Walk up to find pyproject.toml (for development)
            current = Path(__file__).resolve().parent
            while current != current.parent:
                candidate = current / "pyproject.toml"
                if candidate.exists():
                    pyproject_path = candidate
                    break
                current = current.parent
            else:
                return {}

        content = pyproject_path.read_text()  # type: ignore[union-attr]
        data = tomllib.loads(content)
        return data.get("tool", {}).get("build-status", {})
    except Exception:
        return {}


def _parse_bool(value: str | bool) -> bool:
    """Parse a boolean value from string or bool."""
    if isinstance(value, bool):
        return value
    return value.strip().lower() in ("true", "1", "yes")


def get_progress_override() -> bool | None:
    """Explicit progress bar switch, or None to auto-detect.

    Priority: BUILD_STATUS_PROGRESS env → [tool.build-status].progress → None.
    """
    env = os.environ.get("BUILD_STATUS_PROGRESS", "").strip().lower()
    if env in ("0", "false", "no"):
        return False
    if env in ("1", "true", "yes"):
        return True
    val = _load_pyproject_settings().get("progress")
    if val is not None:
        return _parse_bool(val)
    return None


def get_verbosity() -> Verbosity:
    """Highest level shown above the status line.

    Priority: BUILD_STATUS_VERBOSITY env → [tool.build-status].verbosity → info.

    Raises:
        SettingsError: If the configured value is not a verbosity level.
    """
    if env := os.getenv("BUILD_STATUS_VERBOSITY"):
        source, val = "BUILD_STATUS_VERBOSITY", env
    else:
        source, val = "verbosity", _load_pyproject_settings().get("verbosity")
    if val is None:
        return Verbosity.INFO
    try:
        return Verbosity.parse(val)
    except ValueError as e:
        raise SettingsError(f"{source}: {e}") from None


def get_columns() -> int | None:
    """Terminal width override.

    Priority: BUILD_STATUS_COLUMNS env → [tool.build-status].columns → None
    (query the terminal).

    Raises:
        SettingsError: If the configured value is not an integer.
    """
    if env := os.getenv("BUILD_STATUS_COLUMNS"):
        source, val = "BUILD_STATUS_COLUMNS", env
    else:
        source, val = "columns", _load_pyproject_settings().get("columns")
    if val is None:
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        raise SettingsError(
            f"{source} must be a whole number of columns, got {val!r}"
        ) from None


def get_log_dir() -> Path:
    """Directory for CLI log files.

    Priority: BUILD_STATUS_LOG_DIR env → [tool.build-status].log-dir
              → ~/.local/share/build-status/logs.
    """
    if env := os.getenv("BUILD_STATUS_LOG_DIR"):
        return Path(env).expanduser()
    if val := _load_pyproject_settings().get("log-dir"):
        return Path(val).expanduser()
    return Path.home() / ".local" / "share" / "build-status" / "logs"
