"""Loader for the resolution lookup tables."""

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import ValidationError

from concert_catalog.configs.settings import get_settings
from concert_catalog.errors import ConfigError
from concert_catalog.resolution.tables import ResolutionTables


class Config:
    """Configuration for the concert catalog."""

    @classmethod
    def resolution_config_path(cls) -> Path:
        return get_settings().RESOLUTION_CONFIG_PATH

    @classmethod
    def load_resolution_tables(cls, path: Path | str | None = None) -> ResolutionTables:
        """
        Load the resolution tables from YAML.

        Keys missing from the file keep their built-in defaults. An empty
        file yields the defaults unchanged.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file is not valid YAML or fails validation
        """
        return _load_tables(Path(path) if path else cls.resolution_config_path())


@lru_cache
def _load_tables(path: Path) -> ResolutionTables:
    if not path.exists():
        raise FileNotFoundError(f"Missing config at {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(content, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")

    try:
        return ResolutionTables.model_validate(content.get("resolution", content))
    except ValidationError as e:
        raise ConfigError(f"Invalid resolution tables in {path}: {e}") from e
