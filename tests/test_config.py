"""Configuration tests.

Tests verify behavior (types, ranges, loading) not specific values.
"""

import tempfile
from pathlib import Path

import pytest

from kbsearch.config import (
    CONFIG_SCHEMA,
    Config,
    ConfigError,
    _load_config,
    load_settings,
)


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        data_dir = Path(tmpdir) / "data"
        data_dir.mkdir()
        yield data_dir


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Clear the load_settings cache and KB_* overrides around each test."""
    for name in ("KB_DATA_DIR", "KB_STORE_BACKEND", "KB_SEED_FILE"):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def write_config(data_dir: Path, content: str) -> Path:
    """Write a config.ini file to the data directory and return the path."""
    config_path = data_dir / "config.ini"
    config_path.write_text(content)
    return config_path


# =============================================================================
# Type Validation Tests
# =============================================================================


def test_all_settings_have_correct_types():
    """Every setting matches its declared type from schema."""
    config = _load_config(None)

    for section_name, keys in CONFIG_SCHEMA.items():
        section = getattr(config, section_name)
        for key, (expected_type, *_) in keys.items():
            value = getattr(section, key)
            assert isinstance(value, expected_type), (
                f"{section_name}.{key}: expected {expected_type.__name__}, "
                f"got {type(value).__name__}"
            )


def test_invalid_type_raises_clear_error(temp_data_dir: Path):
    """Non-numeric value for int setting gives helpful message."""
    config_path = write_config(temp_data_dir, "[search]\ncache_ttl_seconds = forever")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "search" in str(exc_info.value)
    assert "cache_ttl_seconds" in str(exc_info.value)
    assert "int" in str(exc_info.value)


def test_unknown_backend_raises_error(temp_data_dir: Path):
    """Only the known store backends are accepted."""
    config_path = write_config(temp_data_dir, "[store]\nbackend = firestore")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "backend" in str(exc_info.value)
    assert "firestore" in str(exc_info.value)


# =============================================================================
# Range Validation Tests
# =============================================================================


def test_defaults_are_in_valid_ranges():
    """Default values are within their declared ranges."""
    config = _load_config(None)

    for section_name, keys in CONFIG_SCHEMA.items():
        section = getattr(config, section_name)
        for key, (typ, _, min_val, max_val, _) in keys.items():
            value = getattr(section, key)
            if min_val is not None:
                assert value >= min_val, f"{section_name}.{key}"
            if max_val is not None:
                assert value <= max_val, f"{section_name}.{key}"


def test_value_below_minimum_raises_error(temp_data_dir: Path):
    """Value below declared minimum raises ConfigError."""
    config_path = write_config(temp_data_dir, "[search]\ndefault_limit = 0")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "default_limit" in str(exc_info.value)
    assert "minimum" in str(exc_info.value)


def test_value_above_maximum_raises_error(temp_data_dir: Path):
    """Value above declared maximum raises ConfigError."""
    config_path = write_config(temp_data_dir, "[search]\npage_size = 5000")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "page_size" in str(exc_info.value)
    assert "maximum" in str(exc_info.value)


# =============================================================================
# Loading Behavior Tests
# =============================================================================


def test_missing_config_uses_defaults():
    """No config.ini file? All defaults load successfully."""
    config = _load_config(None)

    assert config.search.cache_ttl_seconds == 300
    assert config.search.min_query_length == 2
    assert config.store.backend == "sqlite"


def test_partial_config_merges_with_defaults(temp_data_dir: Path):
    """Config with only [search] still has [store] defaults."""
    config_path = write_config(temp_data_dir, "[search]\ncache_ttl_seconds = 60")

    config = _load_config(config_path)

    assert config.search.cache_ttl_seconds == 60
    assert config.search.default_limit > 0
    assert config.store.db_file == "content.db"


def test_empty_config_file_uses_defaults(temp_data_dir: Path):
    """Empty config.ini file loads all defaults."""
    config_path = write_config(temp_data_dir, "")

    config = _load_config(config_path)

    assert config.search.page_size == 10


def test_derived_values(temp_data_dir: Path):
    """Derived paths and durations follow the section values."""
    config = _load_config(
        write_config(temp_data_dir, "[search]\ndebounce_ms = 150\n[store]\ndb_file = kb.db")
    )
    config = Config(data_dir=temp_data_dir, search=config.search, store=config.store)

    assert config.db_path == temp_data_dir / "kb.db"
    assert config.config_path == temp_data_dir / "config.ini"
    assert config.debounce_seconds == 0.15
    assert config.cache_ttl == 300.0


# =============================================================================
# Integration Tests (load_settings)
# =============================================================================


def test_data_dir_default():
    """KB_DATA_DIR defaults to ~/.kbsearch when not set."""
    settings = load_settings()

    assert settings.data_dir == Path.home() / ".kbsearch"
    assert settings.seed_file is None


def test_data_dir_config_file_is_read(monkeypatch, temp_data_dir):
    """config.ini inside KB_DATA_DIR is picked up."""
    write_config(temp_data_dir, "[search]\nmin_score = 25")
    monkeypatch.setenv("KB_DATA_DIR", str(temp_data_dir))

    settings = load_settings()

    assert settings.data_dir == temp_data_dir
    assert settings.search.min_score == 25


def test_backend_override_from_env(monkeypatch, temp_data_dir):
    """KB_STORE_BACKEND replaces the configured backend."""
    monkeypatch.setenv("KB_DATA_DIR", str(temp_data_dir))
    monkeypatch.setenv("KB_STORE_BACKEND", "memory")
    monkeypatch.setenv("KB_SEED_FILE", str(temp_data_dir / "seed.yaml"))

    settings = load_settings()

    assert settings.store.backend == "memory"
    assert settings.seed_file == temp_data_dir / "seed.yaml"


def test_invalid_backend_override_raises(monkeypatch, temp_data_dir):
    monkeypatch.setenv("KB_DATA_DIR", str(temp_data_dir))
    monkeypatch.setenv("KB_STORE_BACKEND", "mongo")

    with pytest.raises(ConfigError):
        load_settings()
