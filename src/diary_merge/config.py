"""Configuration management."""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

DEFAULT_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}(\.md)?$"
DEFAULT_OUTPUT_FILENAME = "writing-log.md"
DEFAULT_SEPARATOR = "\n---\n"


@dataclass(frozen=True)
class Config:
    """Merge configuration, built by the caller and passed to every stage."""

    directory: Path = field(default_factory=Path.cwd)
    date_pattern: str = DEFAULT_DATE_PATTERN
    output_filename: str = DEFAULT_OUTPUT_FILENAME
    separator: str = DEFAULT_SEPARATOR
    database_path: Path | None = None
    skip_merged: bool = False
    backup_existing: bool = False

    def __post_init__(self) -> None:
        # Normalize str paths from YAML or callers
        object.__setattr__(self, "directory", Path(self.directory).expanduser())
        if self.database_path is not None:
            object.__setattr__(
                self, "database_path", Path(self.database_path).expanduser()
            )

    @property
    def output_path(self) -> Path:
        """Location of the merged log (absolute output names are kept as is)."""
        return self.directory / self.output_filename

    def with_overrides(self, **values: Any) -> "Config":
        """Return a copy with the given fields replaced, ignoring None values."""
        changes = {key: value for key, value in values.items() if value is not None}
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigError(f"Unknown configuration keys {sorted(unknown)}")
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides: Any) -> "Config":
        """Load configuration from YAML file.

        Keys match the field names. Keyword overrides (typically CLI options)
        take precedence over YAML values; None overrides are ignored.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as exc:
            raise ConfigError("Cannot read config file", path) from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML ({exc})", path) from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping", path)

        return cls().with_overrides(**data).with_overrides(**overrides)
