"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static defaults checked into the repo
#   2. .env file           - Local overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# _deep_merge does recursive dict merging:
#   base = {"chunking": {"max_tokens": 400}}
#   overrides = {"chunking": {"overlap_ratio": 0.2}}
#   result = {"chunking": {"max_tokens": 400, "overlap_ratio": 0.2}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from weave_chunker.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "embedding": {
            "model": settings.embedding_model,
            "openai_base_url": settings.openai_base_url,
            "ollama_base_url": settings.ollama_base_url,
            "ollama_native": settings.ollama_native,
            "batch_size": settings.embed_batch_size,
        },
        "chunking": {
            "max_tokens": settings.chunk_max_tokens,
            "overlap_ratio": settings.chunk_overlap_ratio,
        },
        "store": {
            "db_path": settings.vector_db_path,
        },
        "search": {
            "default_k": settings.search_default_k,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
