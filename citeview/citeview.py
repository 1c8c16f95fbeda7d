"""Main CiteView class - entry point for the library."""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import Config
from .core.models import RenderedResult, SearchResult
from .exceptions import ValidationError
from .providers.file_search import (
    BaseFileSearchProvider,
    ChunkingConfig,
    DocumentInfo,
    GeminiFileSearchProvider,
    StoreInfo,
)
from .rendering.renderer import CitationRenderer
from .utils.logging import level_from_name, setup_logging

logger = logging.getLogger(__name__)


class CiteView:
    """File search stores, grounded answers and citation rendering.

    Example:
        >>> from citeview import CiteView
        >>> app = CiteView(gemini_api_key="your-key")
        >>> store = app.create_store("Handbooks")
        >>> app.upload_file("handbook.pdf", store.name)
        >>> result, rendered = app.search_and_render("What is the leave policy?", [store.name])
    """

    def __init__(
        self,
        gemini_api_key: Optional[str] = None,
        config: Optional[Config] = None,
        provider: Optional[BaseFileSearchProvider] = None,
        log_level: Optional[int] = None,
    ):
        """Initialize CiteView.

        Args:
            gemini_api_key: API key for the Google file search service
            config: Optional Config object (loaded from the environment if omitted)
            provider: File search provider (defaults to Gemini)
            log_level: Logging level (default: from config)
        """
        if config is None:
            config = Config.from_env()
        if gemini_api_key:
            config.gemini_api_key = gemini_api_key

        setup_logging(level=log_level if log_level is not None else level_from_name(config.log_level))

        self.config = config
        self.provider = provider or GeminiFileSearchProvider(config)
        self.renderer = CitationRenderer(config)

        logger.info(f"CiteView initialized with {type(self.provider).__name__}")

    # ==================== Stores ====================

    def create_store(self, display_name: str) -> StoreInfo:
        if not display_name or not display_name.strip():
            raise ValidationError("displayName is required")
        return self.provider.create_store(display_name.strip())

    def list_stores(self) -> List[StoreInfo]:
        return self.provider.list_stores()

    def get_store(self, name: str) -> StoreInfo:
        return self.provider.get_store(name)

    def delete_store(self, name: str, force: bool = True) -> None:
        self.provider.delete_store(name, force=force)

    # ==================== Documents ====================

    def upload_file(
        self,
        file_path: str,
        store_name: str,
        display_name: Optional[str] = None,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return self.provider.upload_file(
            file_path,
            store_name,
            display_name=display_name,
            chunking=chunking,
            custom_metadata=custom_metadata,
        )

    def import_file(
        self,
        file_name: str,
        store_name: str,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not file_name:
            raise ValidationError("fileName is required")
        return self.provider.import_file(
            file_name,
            store_name,
            chunking=chunking,
            custom_metadata=custom_metadata,
        )

    def list_documents(self, store_name: str) -> List[DocumentInfo]:
        return self.provider.list_documents(store_name)

    def delete_document(self, name: str, force: bool = True) -> None:
        self.provider.delete_document(name, force=force)

    # ==================== Search ====================

    def search(
        self,
        query: str,
        store_names: Sequence[str],
        model: Optional[str] = None,
        metadata_filter: Optional[str] = None,
    ) -> SearchResult:
        """Ask the file search service a question.

        Args:
            query: Natural-language question
            store_names: Stores to search (at least one)
            model: Optional model name (defaults to config.default_model)
            metadata_filter: Optional service-side metadata filter expression

        Returns:
            SearchResult

        Raises:
            ValidationError: If the query or store list is empty
            OracleError: If the service call fails
        """
        if not query or not query.strip():
            raise ValidationError("query is required")
        if not store_names:
            raise ValidationError("storeNames array is required")

        metadata_filter = metadata_filter.strip() if metadata_filter else None
        return self.provider.search(
            query.strip(),
            list(store_names),
            model=model,
            metadata_filter=metadata_filter or None,
        )

    def render(self, result: SearchResult) -> RenderedResult:
        return self.renderer.render(result)

    def search_and_render(
        self,
        query: str,
        store_names: Sequence[str],
        model: Optional[str] = None,
        metadata_filter: Optional[str] = None,
    ) -> Tuple[SearchResult, RenderedResult]:
        result = self.search(query, store_names, model=model, metadata_filter=metadata_filter)
        return result, self.render(result)
