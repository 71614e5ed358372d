"""
Config loader for vecbox.
Reads config.yaml once at startup. All other modules import from here.
${ENV_VAR} references are resolved at load time, and a local .env is read
first so DSNs and API keys can stay out of the YAML.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

load_dotenv()

_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

_config: dict | None = None

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,47}$")


class ConfigError(ValueError):
    """Raised when config.yaml describes a store that cannot be built."""


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off", ""}


def _as_bool(name: str, value) -> bool:
    """YAML booleans pass through; ${ENV} values arrive as strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be true or false, got {value!r}")


def _resolve_env_vars(value: str) -> str:
    """Replace ${ENV_VAR} patterns with actual environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _walk_and_resolve(obj):
    """Recursively resolve env vars in all string values."""
    if isinstance(obj, dict):
        return {k: _walk_and_resolve(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_walk_and_resolve(v) for v in obj]
    elif isinstance(obj, str):
        return _resolve_env_vars(obj)
    return obj


def load_config(path: Path | None = None) -> dict:
    """Load and cache config from YAML file."""
    global _config
    if _config is not None:
        return _config

    config_path = path or _CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    _config = _walk_and_resolve(raw)
    return _config


def get_config() -> dict:
    """Return cached base config, loading if necessary."""
    if _config is None:
        return load_config()
    return _config


def reset_config():
    """Drop the cached config so the next get_config() re-reads the file."""
    global _config
    _config = None


@dataclass(frozen=True)
class StoreSpec:
    """Validated settings for one PGVectorStore instance."""
    database_name: str
    dsn: str
    vector_dimensions: int
    embedding_model: str
    distance_strategy: str = "cosine"
    overwrite_existing_tables: bool = False
    text_key: str | None = None
    connect_timeout: int = 10

    def __post_init__(self):
        if not _IDENTIFIER.match(self.database_name or ""):
            raise ConfigError(
                f"database_name must be a plain SQL identifier, got {self.database_name!r}"
            )
        if not self.dsn:
            raise ConfigError("store.dsn is empty (is the env var referenced in config.yaml set?)")
        if (
            isinstance(self.vector_dimensions, bool)
            or not isinstance(self.vector_dimensions, int)
            or self.vector_dimensions <= 0
        ):
            raise ConfigError(
                f"vector_dimensions must be a positive integer, got {self.vector_dimensions!r}"
            )
        if not self.embedding_model:
            raise ConfigError("embedding.model must be set")

    @classmethod
    def from_config(cls, cfg: dict) -> "StoreSpec":
        """Build a spec from the `store` and `embedding` blocks of config.yaml."""
        store_cfg = cfg.get("store") or {}
        embed_cfg = cfg.get("embedding") or {}
        try:
            dimensions = int(store_cfg.get("vector_dimensions", 0))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"vector_dimensions is not a number: {e}") from e
        return cls(
            database_name=store_cfg.get("database_name", "vecbox"),
            dsn=store_cfg.get("dsn", ""),
            vector_dimensions=dimensions,
            embedding_model=embed_cfg.get("model", ""),
            distance_strategy=store_cfg.get("distance_strategy", "cosine"),
            overwrite_existing_tables=_as_bool(
                "overwrite_existing_tables", store_cfg.get("overwrite_existing_tables")
            ),
            text_key=store_cfg.get("text_key") or None,
            connect_timeout=int(store_cfg.get("connect_timeout", 10)),
        )
