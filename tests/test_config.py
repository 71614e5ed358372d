"""
Tests for config loading and StoreSpec validation.
"""

import pytest

from vecbox import config as config_mod
from vecbox.config import ConfigError, StoreSpec


@pytest.fixture(autouse=True)
def fresh_config():
    config_mod.reset_config()
    yield
    config_mod.reset_config()


def _cfg(**store):
    base = {
        "database_name": "docs",
        "dsn": "postgresql://localhost/docs",
        "vector_dimensions": 3,
    }
    base.update(store)
    return {"store": base, "embedding": {"model": "nomic-embed-text"}}


def test_load_config_resolves_env_vars(tmp_path, monkeypatch):
    monkeypatch.setenv("VECBOX_TEST_DSN", "postgresql://db/vec")
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  dsn: ${VECBOX_TEST_DSN}\n  tags: ['${VECBOX_TEST_DSN}']\n")

    cfg = config_mod.load_config(path)
    assert cfg["store"]["dsn"] == "postgresql://db/vec"
    assert cfg["store"]["tags"] == ["postgresql://db/vec"]


def test_load_config_missing_env_var_is_empty(tmp_path, monkeypatch):
    monkeypatch.delenv("VECBOX_UNSET_VAR", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  dsn: ${VECBOX_UNSET_VAR}\n")
    assert config_mod.load_config(path)["store"]["dsn"] == ""


def test_load_config_is_cached(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("a: 1\n")
    first = config_mod.load_config(path)
    path.write_text("a: 2\n")
    assert config_mod.get_config() is first


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        config_mod.load_config(tmp_path / "nope.yaml")


def test_spec_from_config_defaults():
    spec = StoreSpec.from_config(_cfg())
    assert spec.database_name == "docs"
    assert spec.vector_dimensions == 3
    assert spec.embedding_model == "nomic-embed-text"
    assert spec.distance_strategy == "cosine"
    assert spec.overwrite_existing_tables is False
    assert spec.text_key is None


def test_spec_from_config_reads_options():
    spec = StoreSpec.from_config(_cfg(
        overwrite_existing_tables=True, text_key="body", distance_strategy="euclidean",
        vector_dimensions="768",
    ))
    assert spec.overwrite_existing_tables is True
    assert spec.text_key == "body"
    assert spec.distance_strategy == "euclidean"
    assert spec.vector_dimensions == 768


@pytest.mark.parametrize("raw,expected", [
    ("false", False), ("False", False), ("0", False), ("", False), (None, False),
    ("true", True), ("TRUE", True), ("1", True), (False, False), (True, True),
])
def test_spec_overwrite_flag_from_env_strings(raw, expected):
    spec = StoreSpec.from_config(_cfg(overwrite_existing_tables=raw))
    assert spec.overwrite_existing_tables is expected


def test_spec_overwrite_flag_via_env_var(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n"
        "  dsn: postgresql://localhost/docs\n"
        "  vector_dimensions: 3\n"
        "  overwrite_existing_tables: ${VECBOX_TEST_OVERWRITE}\n"
        "embedding:\n"
        "  model: m\n"
    )
    monkeypatch.setenv("VECBOX_TEST_OVERWRITE", "false")
    spec = StoreSpec.from_config(config_mod.load_config(path))
    assert spec.overwrite_existing_tables is False


@pytest.mark.parametrize("raw", ["maybe", "2", "nope!"])
def test_spec_rejects_unparseable_overwrite_flag(raw):
    with pytest.raises(ConfigError, match="overwrite_existing_tables"):
        StoreSpec.from_config(_cfg(overwrite_existing_tables=raw))


@pytest.mark.parametrize("dims", [0, -5, "many"])
def test_spec_rejects_bad_dimensions(dims):
    with pytest.raises(ConfigError):
        StoreSpec.from_config(_cfg(vector_dimensions=dims))


@pytest.mark.parametrize("name", ["", "1docs", "docs; DROP TABLE x", "a-b"])
def test_spec_rejects_unsafe_table_namespace(name):
    with pytest.raises(ConfigError, match="identifier"):
        StoreSpec.from_config(_cfg(database_name=name))


def test_spec_requires_dsn():
    with pytest.raises(ConfigError, match="dsn"):
        StoreSpec.from_config(_cfg(dsn=""))


def test_spec_requires_embedding_model():
    cfg = _cfg()
    cfg["embedding"] = {}
    with pytest.raises(ConfigError, match="embedding.model"):
        StoreSpec.from_config(cfg)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
