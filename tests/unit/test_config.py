"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from weave_chunker.config.loader import _deep_merge, load_config
from weave_chunker.config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("EMBEDDING_MODEL", "OPENAI_BASE_URL", "OLLAMA_BASE_URL", "VECTOR_DB_PATH"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)

        assert settings.embedding_model == "nomic-embed-text"
        assert settings.ollama_base_url == "http://localhost:11434"
        assert settings.ollama_native is True
        assert settings.chunk_max_tokens == 400
        assert settings.chunk_overlap_ratio == 0.15
        assert settings.embed_batch_size == 16
        assert settings.vector_db_path == "./db/vec.db"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_MODEL", "mxbai-embed-large")
        monkeypatch.setenv("OLLAMA_NATIVE", "false")
        settings = Settings(_env_file=None)
        assert settings.embedding_model == "mxbai-embed-large"
        assert settings.ollama_native is False

    def test_explicit_ollama_url_kept(self) -> None:
        settings = Settings(_env_file=None, ollama_base_url="http://gpu-box:11434")
        assert settings.ollama_base_url == "http://gpu-box:11434"

    def test_url_without_v1_suffix(self) -> None:
        settings = Settings(_env_file=None, openai_base_url="http://host:8080/", ollama_base_url="")
        assert settings.ollama_base_url == "http://host:8080"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"chunk_max_tokens": 600},
            {"chunk_max_tokens": 200},
            {"chunk_overlap_ratio": 0.3},
            {"embed_batch_size": 0},
        ],
    )
    def test_out_of_range_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)


class TestLoadConfig:
    def test_yaml_merged_with_settings(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "app:\n  name: weave-chunker\n"
            "search:\n  default_k: 9\n  preview_chars: 120\n",
            encoding="utf-8",
        )
        settings = Settings(_env_file=None, search_default_k=3, embedding_model="all-minilm")

        config = load_config(str(config_file), settings=settings)

        assert config["app"]["name"] == "weave-chunker"
        assert config["search"]["preview_chars"] == 120
        assert config["search"]["default_k"] == 3
        assert config["embedding"]["model"] == "all-minilm"

    def test_missing_file_uses_settings_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings(_env_file=None))
        assert config["chunking"] == {"max_tokens": 400, "overlap_ratio": 0.15}
        assert "preview_chars" not in config["search"]

    def test_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")
        config = load_config(str(config_file), settings=Settings(_env_file=None))
        assert config["store"]["db_path"] == "./db/vec.db"

    def test_shipped_yaml_only_holds_keys_without_env_vars(self) -> None:
        shipped = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(shipped), settings=Settings(_env_file=None, chunk_max_tokens=300))

        assert config["search"]["preview_chars"] == 200
        assert config["chunking"]["max_tokens"] == 300


class TestDeepMerge:
    def test_recursive(self) -> None:
        base = {"chunking": {"max_tokens": 400}, "keep": 1}
        _deep_merge(base, {"chunking": {"overlap_ratio": 0.2}})
        assert base == {"chunking": {"max_tokens": 400, "overlap_ratio": 0.2}, "keep": 1}

    def test_scalar_replaces_dict(self) -> None:
        base = {"store": {"db_path": "a"}}
        _deep_merge(base, {"store": "flat"})
        assert base == {"store": "flat"}
