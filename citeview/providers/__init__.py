"""Service providers."""
from .base import BaseProvider
from .file_search import (
    BaseFileSearchProvider,
    ChunkingConfig,
    DocumentInfo,
    StoreInfo,
    GeminiFileSearchProvider,
)

__all__ = [
    "BaseProvider",
    "BaseFileSearchProvider",
    "ChunkingConfig",
    "DocumentInfo",
    "StoreInfo",
    "GeminiFileSearchProvider",
]
