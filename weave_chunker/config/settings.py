"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** - e.g. OPENAI_BASE_URL=http://host:11434/v1
#   2. **.env file** - key=value lines in the project root .env file
#
# Field `embedding_model` maps to env var `EMBEDDING_MODEL`.  Defaults are
# used when neither an env var nor a .env entry exists for that field.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """weave-chunker settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Embedding Routes ===
    # The OpenAI-compatible endpoint defaults to a local Ollama server, so
    # the API key is a placeholder unless a hosted provider is configured.
    openai_api_key: str = "ollama"
    openai_base_url: str = "http://localhost:11434/v1"
    # Empty = derived from openai_base_url with the trailing /v1 removed.
    ollama_base_url: str = ""
    # True = native Ollama /api/embeddings first, OpenAI-compatible second.
    ollama_native: bool = True
    embedding_model: str = "nomic-embed-text"
    embedding_timeout: float = 60.0

    # === Storage ===
    vector_db_path: str = "./db/vec.db"
    lore_dir: str = "./data"

    # === Chunking ===
    chunk_max_tokens: int = Field(default=400, ge=300, le=500)
    chunk_overlap_ratio: float = Field(default=0.15, ge=0.10, le=0.20)
    embed_batch_size: int = Field(default=16, ge=1)

    # === Search ===
    search_default_k: int = Field(default=5, ge=1)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _derive_ollama_base_url(self) -> "Settings":
        if not self.ollama_base_url:
            base = self.openai_base_url.rstrip("/")
            if base.endswith("/v1"):
                base = base[: -len("/v1")]
            self.ollama_base_url = base
        return self
