"""File search service providers."""
from .base import BaseFileSearchProvider, ChunkingConfig, DocumentInfo, StoreInfo
from .gemini import GeminiFileSearchProvider

__all__ = [
    "BaseFileSearchProvider",
    "ChunkingConfig",
    "DocumentInfo",
    "StoreInfo",
    "GeminiFileSearchProvider",
]
