"""Configuration management for stagedit."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_DIR = Path("~/.config/stagedit").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

DEFAULT_EDITOR_VARIABLE = "STAGEDIT_EDITOR"
DEFAULT_FALLBACK_EDITORS: tuple[str, ...] = ("editor", "nano", "vim", "vi")
DEFAULT_MARKER_START = (
    "### Anything between here and the comment below will become the contents "
    "of the file"
)
DEFAULT_MARKER_END = "### Edits below this comment will be discarded"


class ConfigError(RuntimeError):
    """Base error for configuration related issues."""


class MissingConfigError(ConfigError):
    """Raised when the configuration file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file not found at {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """Raised when the configuration file holds malformed values."""


@dataclass(slots=True)
class StageditConfig:
    """In-memory representation of the stagedit configuration file."""

    editor_variable: str = DEFAULT_EDITOR_VARIABLE
    fallback_editors: tuple[str, ...] = DEFAULT_FALLBACK_EDITORS
    marker_start: str = DEFAULT_MARKER_START
    marker_end: str = DEFAULT_MARKER_END
    remove_empty_parent: bool = False
    skip_install_on_editor_failure: bool = False
    source_path: Path | None = field(default=None)


def load_config(path: Path | None = None) -> StageditConfig:
    """Load configuration from ``path`` or the default location.

    Parameters
    ----------
    path:
        Optional location of the configuration file. When ``None`` the default
        path (``~/.config/stagedit/config.toml``) is used, and a missing file
        simply yields the built-in defaults.

    Raises
    ------
    MissingConfigError
        If an explicitly requested file cannot be found.
    InvalidConfigError
        If a setting is present but malformed.
    """

    if path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.exists():
            return StageditConfig()
    else:
        config_path = path.expanduser()
        if not config_path.exists():
            raise MissingConfigError(config_path)

    try:
        with config_path.open("rb") as fh:
            raw = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    section = raw.get("stagedit", {})
    if not isinstance(section, dict):
        raise InvalidConfigError("'stagedit' section must be a table")

    editor_variable = _optional_str(section, "editor_variable", DEFAULT_EDITOR_VARIABLE)
    if not editor_variable.strip():
        raise InvalidConfigError("'editor_variable' must be a non-empty string")

    fallback_raw = section.get("fallback_editors")
    if fallback_raw is None:
        fallback_editors = DEFAULT_FALLBACK_EDITORS
    elif isinstance(fallback_raw, list) and all(
        isinstance(item, str) and item.strip() for item in fallback_raw
    ):
        fallback_editors = tuple(item.strip() for item in fallback_raw)
    else:
        raise InvalidConfigError(
            "'fallback_editors' must be a list of non-empty strings when provided"
        )

    # Markers only make sense as a pair.
    has_start = "marker_start" in section
    has_end = "marker_end" in section
    if has_start != has_end:
        raise InvalidConfigError("'marker_start' and 'marker_end' must be set together")
    marker_start = _optional_str(section, "marker_start", DEFAULT_MARKER_START)
    marker_end = _optional_str(section, "marker_end", DEFAULT_MARKER_END)
    if not marker_start or not marker_end:
        raise InvalidConfigError("Markers must be non-empty strings")
    if marker_start == marker_end:
        raise InvalidConfigError("'marker_start' and 'marker_end' must differ")

    return StageditConfig(
        editor_variable=editor_variable.strip(),
        fallback_editors=fallback_editors,
        marker_start=marker_start,
        marker_end=marker_end,
        remove_empty_parent=_optional_bool(section, "remove_empty_parent"),
        skip_install_on_editor_failure=_optional_bool(
            section, "skip_install_on_editor_failure"
        ),
        source_path=config_path,
    )


def _optional_str(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise InvalidConfigError(f"'{key}' must be a string when provided")
    return value


def _optional_bool(section: dict[str, Any], key: str) -> bool:
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise InvalidConfigError(f"'{key}' must be a boolean when provided")
    return value


def bootstrap_config_file(path: Path) -> bool:
    """Create a default config file if missing.

    Returns True when the file was created, False if it already existed.
    """

    if path.exists():
        return False

    config_dir = path.parent
    config_dir.mkdir(parents=True, exist_ok=True)
    default_content = (
        "[stagedit]\n"
        f'editor_variable = "{DEFAULT_EDITOR_VARIABLE}"\n'
        '# fallback_editors = ["editor", "nano", "vim", "vi"]\n'
        "remove_empty_parent = false\n"
        "skip_install_on_editor_failure = false\n"
    )
    path.write_text(default_content, encoding="utf-8")
    return True
