"""Configuration module - exports Settings and load_config."""

from weave_chunker.config.loader import load_config
from weave_chunker.config.settings import Settings

__all__ = ["Settings", "load_config"]
