"""Configuration system for the knowledge-base search backend.

This module handles loading settings from environment variables and an INI file,
providing sensible defaults, and computing derived paths inside the data directory.
"""

from configparser import ConfigParser
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
import os


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# Schema: section -> key -> (type, default, min, max, description)
CONFIG_SCHEMA: dict[str, dict[str, tuple[type, Any, Any, Any, str]]] = {
    "search": {
        "cache_ttl_seconds": (int, 300, 0, 86_400, "Lifetime of cached search results"),
        "default_limit": (int, 20, 1, 1000, "Default number of results to return"),
        "min_query_length": (int, 2, 1, 20, "Shortest query that triggers a search"),
        "min_score": (int, 10, 0, 1000, "Results scoring at or below this are dropped"),
        "suggestion_limit": (int, 5, 1, 100, "Default number of tag suggestions"),
        "page_size": (int, 10, 1, 100, "Default page size for paginated search"),
        "pagination_limit": (int, 100, 1, 1000, "Result ceiling for paginated search"),
        "debounce_ms": (int, 300, 0, 5000, "Keystroke debounce for interactive search"),
        "snippet_max_length": (int, 200, 50, 1000, "Max snippet length in results"),
    },
    "store": {
        "backend": (str, "sqlite", None, None, "Document store backend: sqlite or memory"),
        "db_file": (str, "content.db", None, None, "SQLite file name inside the data dir"),
    },
}

STORE_BACKENDS = ("sqlite", "memory")


@dataclass(frozen=True)
class SearchConfig:
    """Search configuration."""

    cache_ttl_seconds: int
    default_limit: int
    min_query_length: int
    min_score: int
    suggestion_limit: int
    page_size: int
    pagination_limit: int
    debounce_ms: int
    snippet_max_length: int


@dataclass(frozen=True)
class StoreConfig:
    """Document store configuration."""

    backend: str
    db_file: str


def _load_section(
    parser: ConfigParser, section: str, schema: dict[str, tuple[type, Any, Any, Any, str]]
) -> dict[str, Any]:
    """Load and validate a configuration section.

    Args:
        parser: ConfigParser instance with loaded config
        section: Section name to load
        schema: Schema definition for the section

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If validation fails
    """
    result = {}

    for key, (typ, default, min_val, max_val, _) in schema.items():
        if parser.has_option(section, key):
            raw_value = parser.get(section, key)
            value: bool | int | float | str
            try:
                if typ is bool:
                    value = raw_value.lower() in ("true", "1", "yes", "on")
                elif typ is int:
                    value = int(raw_value)
                elif typ is float:
                    value = float(raw_value)
                else:
                    value = raw_value
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for [{section}].{key}: {raw_value!r} (expected {typ.__name__})"
                ) from e
        else:
            value = default

        # Validate range for numeric types
        if typ in (int, float) and value is not None:
            if min_val is not None and value < min_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but minimum is {min_val}"
                )
            if max_val is not None and value > max_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but maximum is {max_val}"
                )

        result[key] = value

    return result


def _defaults(section: str) -> dict[str, Any]:
    return {key: default for key, (_, default, _, _, _) in CONFIG_SCHEMA[section].items()}


def _validate_backend(backend: str) -> str:
    if backend not in STORE_BACKENDS:
        raise ConfigError(
            f"Value for [store].backend is {backend!r}, expected one of {', '.join(STORE_BACKENDS)}"
        )
    return backend


def _load_config(config_path: Optional[Path] = None) -> "Config":
    """Load configuration from an INI file (internal use only).

    Args:
        config_path: Path to config file. If None, uses defaults from schema.

    Returns:
        Config object with all sections populated (data_dir is a placeholder)

    Raises:
        ConfigError: If validation fails
    """
    parser = ConfigParser()

    if config_path and config_path.exists():
        parser.read(config_path)

    search = SearchConfig(**_load_section(parser, "search", CONFIG_SCHEMA["search"]))
    store_values = _load_section(parser, "store", CONFIG_SCHEMA["store"])
    _validate_backend(store_values["backend"])
    store = StoreConfig(**store_values)

    return Config(data_dir=Path("."), search=search, store=store)


@dataclass(frozen=True)
class Config:
    """Complete application configuration."""

    data_dir: Path = None  # type: ignore[assignment]  # Set in __post_init__ if None
    seed_file: Optional[Path] = None

    search: SearchConfig = None  # type: ignore[assignment]
    store: StoreConfig = None  # type: ignore[assignment]

    def __post_init__(self):
        """Initialize section configs with defaults if not provided."""
        # Since frozen=True, we need to use object.__setattr__
        if self.data_dir is None:
            object.__setattr__(self, "data_dir", Path.home() / ".kbsearch")
        if self.search is None:
            object.__setattr__(self, "search", SearchConfig(**_defaults("search")))
        if self.store is None:
            object.__setattr__(self, "store", StoreConfig(**_defaults("store")))

    @property
    def config_path(self) -> Path:
        """Path to the optional config.ini file."""
        return self.data_dir / "config.ini"

    @property
    def db_path(self) -> Path:
        """Path to the SQLite content database."""
        return self.data_dir / self.store.db_file

    @property
    def cache_ttl(self) -> float:
        """Search cache lifetime in seconds."""
        return float(self.search.cache_ttl_seconds)

    @property
    def debounce_seconds(self) -> float:
        """Interactive search debounce delay in seconds."""
        return self.search.debounce_ms / 1000


@lru_cache(maxsize=1)
def load_settings() -> Config:
    """Load settings from environment variables and config file.

    Settings are cached for the lifetime of the application.
    Use load_settings.cache_clear() to reload settings.

    Returns:
        Config object populated from environment variables and config file.

    Raises:
        ConfigError: If the config file or an override is invalid.
    """
    data_dir_str = os.getenv("KB_DATA_DIR")
    data_dir = Path(data_dir_str) if data_dir_str else Path.home() / ".kbsearch"

    config_file = data_dir / "config.ini"
    try:
        config_exists = config_file.exists()
    except PermissionError:
        config_exists = False
    base_config = _load_config(config_file if config_exists else None)

    store = base_config.store
    backend_env = os.getenv("KB_STORE_BACKEND")
    if backend_env:
        store = StoreConfig(backend=_validate_backend(backend_env), db_file=store.db_file)

    seed_env = os.getenv("KB_SEED_FILE")

    return Config(
        data_dir=data_dir,
        seed_file=Path(seed_env) if seed_env else None,
        search=base_config.search,
        store=store,
    )
