"""Configuration: sort criteria and file selection, loaded from a JSON file."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gomsort.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = (
    ".msort.json",
    "msort.json",
    ".config/msort.json",
)


class SortCriteria(BaseModel):
    """Which ordering keys are active. Everything is on by default."""

    model_config = ConfigDict(extra="ignore")

    group_by_receiver: bool = Field(default=True, description="Group methods by receiver type")
    exported_first: bool = Field(default=True, description="Exported methods before unexported")
    sort_by_depth: bool = Field(default=True, description="Entry points (low call depth) first")
    sort_by_in_degree: bool = Field(default=True, description="Widely shared helpers last")
    preserve_original_order: bool = Field(
        default=True, description="Fall back to declaration order on ties"
    )


class Config(BaseModel):
    """Everything gomsort reads from .msort.json."""

    model_config = ConfigDict(extra="ignore")

    sort_criteria: SortCriteria = Field(default_factory=SortCriteria)
    include: list[str] = Field(default_factory=lambda: ["*.go"])
    exclude: list[str] = Field(default_factory=list)
    self_names: list[str] = Field(
        default_factory=lambda: ["self"],
        description="Identifiers that always refer to the receiver",
    )
    initial_letter_match: bool = Field(
        default=True,
        description="Treat a one-letter identifier matching the receiver type's initial as the receiver",
    )

    @field_validator("self_names")
    @classmethod
    def validate_self_names(cls, v: list[str]) -> list[str]:
        """Self names must be plain identifiers."""
        for name in v:
            if not name.isidentifier():
                raise ValueError(f"self_names entry {name!r} is not an identifier")
        return v

    def save(self, path: str | Path):
        """Writes the configuration as indented JSON."""
        Path(path).write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")


def default_config() -> Config:
    return Config()


def find_config_file(cwd: Optional[Path] = None, home: Optional[Path] = None) -> Optional[Path]:
    """
    Looks for a config file in the working directory first, then in
    ~/.config/msort/config.json. Returns None when there is none.
    """
    base = cwd or Path.cwd()
    for candidate in CONFIG_CANDIDATES:
        path = base / candidate
        if path.is_file():
            return path

    try:
        home_dir = home or Path.home()
    except RuntimeError:
        return None
    home_config = home_dir / ".config" / "msort" / "config.json"
    if home_config.is_file():
        return home_config
    return None


def load_config(path: Optional[str | Path] = None) -> Config:
    """
    Loads the configuration. Without an explicit path the usual locations are
    searched; if nothing is found, or the file cannot be read, defaults apply.
    Invalid JSON or invalid values raise ConfigError.
    """
    config_path = Path(path) if path else find_config_file()
    if config_path is None:
        return default_config()

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Could not read config %s: %s; using defaults", config_path, e)
        return default_config()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path}: invalid JSON: {e}") from e

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{config_path}: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return config
