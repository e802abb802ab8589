"""Settings model, settings file loader and logging setup."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Final, Optional, TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML

from .exceptions import SettingsLoadError

logger = logging.getLogger(__name__)

_YAML_EXTS: Final[set[str]] = {".yaml", ".yml"}
_JSON_EXTS: Final[set[str]] = {".json"}

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2

_LOG_LEVELS: Final[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class MapperSettings(BaseModel):
    """Tunables shared by a registry and every definition it creates."""

    max_iterations: Optional[int] = Field(
        None,
        description=(
            "Upper bound on the iterations of a single repetition step. "
            "None leaves the loop to the caller's predicate."
        ),
    )
    warn_on_merge: bool = Field(
        False,
        description=(
            "Log a warning when a definition that already holds steps is "
            "defined again and the new steps are merged into it."
        ),
    )
    log_level: str = Field(
        "WARNING",
        description=(
            "Level for the typemapper logger. Applied by the command line "
            "or by calling apply_log_level; a registry does not change logging."
        ),
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    # ----- validators --------------------------------------------------------
    @field_validator("max_iterations")
    @classmethod
    def _positive_cap(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("max_iterations must be a positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Unknown log level '{v}'. "
                f"Supported: {', '.join(sorted(_LOG_LEVELS))}"
            )
        return level


def load_settings(path: str | Path) -> MapperSettings:
    """
    Read a ``.yaml``/``.yml``/``.json`` settings file into ``MapperSettings``.

    Raises:
        SettingsLoadError: If the file is missing, unsupported, malformed or
            holds values rejected by validation.
    """
    file_path = Path(path)

    # validation
    if not file_path.exists():
        logger.error("Settings file not found: %s", file_path)
        raise SettingsLoadError(f"File not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in _YAML_EXTS | _JSON_EXTS:
        raise SettingsLoadError(
            f"Unsupported extension '{file_path.suffix}'. "
            f"Supported: {', '.join(sorted(_YAML_EXTS | _JSON_EXTS))}"
        )

    raw_text = file_path.read_text(encoding="utf-8")

    # parse
    try:
        if suffix in _YAML_EXTS:
            data: Dict[str, Any] = _yaml_parser.load(raw_text)
        else:  # .json
            data = json.loads(raw_text)
    except Exception as exc:
        raise SettingsLoadError(f"Cannot parse {file_path.name}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsLoadError("Top-level object must be a mapping")

    try:
        settings = MapperSettings(**data)
    except ValidationError as exc:
        raise SettingsLoadError(f"Invalid settings in {file_path.name}: {exc}") from exc

    logger.debug("Settings loaded from %s (%d keys)", file_path, len(data))
    return settings


def configure_logging(
    debug: bool = False, verbose: bool = False, stream: Optional[TextIO] = None
) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable info-level logging with timestamps if True.
        stream: Where log records go; defaults to standard output.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.WARNING
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=stream if stream is not None else sys.stdout,
        force=True,  # Override existing configuration
    )
    logging.getLogger("typemapper").setLevel(level)


def apply_log_level(settings: MapperSettings) -> None:
    """
    Set the ``typemapper`` logger to the level named in ``settings``.

    Library code that builds a ``MappingRegistry`` from settings calls this
    itself when it wants ``log_level`` honoured.
    """
    logging.getLogger("typemapper").setLevel(settings.log_level)
