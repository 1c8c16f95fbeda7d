"""Google Gemini file search provider implementation."""
import os
import time
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

try:
    from google import genai
    from google.genai import errors, types
    GENAI_AVAILABLE = True
except ImportError:
    GENAI_AVAILABLE = False

from .base import BaseFileSearchProvider, ChunkingConfig, DocumentInfo, StoreInfo
from ...core.models import SearchResult
from ...exceptions import ConfigurationError, OracleError, RateLimitError
from ...utils.rate_limiter import rate_limit_api

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def metadata_entries(custom_metadata: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Convert ``{"key": value}`` into the service's custom metadata list."""
    entries = []
    for key, value in custom_metadata.items():
        if isinstance(value, bool):
            entries.append({"key": key, "string_value": str(value).lower()})
        elif isinstance(value, (int, float)):
            entries.append({"key": key, "numeric_value": value})
        elif isinstance(value, (list, tuple)):
            entries.append({"key": key, "string_list_value": {"values": [str(v) for v in value]}})
        else:
            entries.append({"key": key, "string_value": str(value)})
    return entries


class GeminiFileSearchProvider(BaseFileSearchProvider):
    """File search stores and grounded answers through the google-genai SDK.

    Store and document operations are thin pass-throughs. Uploads and
    imports are long-running operations that are polled until done.
    """

    def __init__(self, config, client: Optional[Any] = None):
        """Initialize the provider.

        Args:
            config: Configuration object with gemini_api_key
            client: Pre-built ``genai.Client`` (tests inject a fake here)

        Raises:
            ConfigurationError: If google-genai is not installed or the API
                key is missing
        """
        super().__init__(config)

        if client is not None:
            self.client = client
            return

        if not GENAI_AVAILABLE:
            raise ConfigurationError(
                "google-genai library not installed. "
                "Install it with: pip install google-genai"
            )

        if not self.config.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")

        try:
            self.client = genai.Client(api_key=self.config.gemini_api_key)
            logger.info("Google GenAI client configured successfully")
        except Exception as e:
            raise ConfigurationError(f"Failed to configure Gemini client: {e}")

    # ==================== Stores ====================

    def create_store(self, display_name: str) -> StoreInfo:
        logger.info(f"Creating file search store: {display_name}")
        store = self._call(
            "create store",
            lambda: self.client.file_search_stores.create(config={"display_name": display_name}),
        )
        return StoreInfo.from_sdk(store)

    def list_stores(self, page_size: int = DEFAULT_PAGE_SIZE) -> List[StoreInfo]:
        stores = self._call(
            "list stores",
            lambda: list(self.client.file_search_stores.list(config={"page_size": page_size})),
        )
        logger.info(f"Found {len(stores)} file search stores")
        return [StoreInfo.from_sdk(s) for s in stores]

    def get_store(self, name: str) -> StoreInfo:
        store = self._call("get store", lambda: self.client.file_search_stores.get(name=name))
        return StoreInfo.from_sdk(store)

    def delete_store(self, name: str, force: bool = True) -> None:
        logger.info(f"Deleting file search store: {name} (force={force})")
        self._call(
            "delete store",
            lambda: self.client.file_search_stores.delete(name=name, config={"force": force}),
        )

    # ==================== Documents ====================

    def upload_file(
        self,
        file_path: str,
        store_name: str,
        display_name: Optional[str] = None,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        config: Dict[str, Any] = {"display_name": display_name or os.path.basename(file_path)}
        if chunking:
            config["chunking_config"] = chunking.to_sdk()
        if custom_metadata:
            config["custom_metadata"] = metadata_entries(custom_metadata)

        logger.info(f"Uploading {file_path} to {store_name} as '{config['display_name']}'")
        operation = self._call(
            "upload file",
            lambda: self.client.file_search_stores.upload_to_file_search_store(
                file=file_path,
                file_search_store_name=store_name,
                config=config,
            ),
        )
        return self._operation_summary(self._wait(operation))

    def import_file(
        self,
        file_name: str,
        store_name: str,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        if chunking:
            config["chunking_config"] = chunking.to_sdk()
        if custom_metadata:
            config["custom_metadata"] = metadata_entries(custom_metadata)

        logger.info(f"Importing {file_name} into {store_name}")
        operation = self._call(
            "import file",
            lambda: self.client.file_search_stores.import_file(
                file_search_store_name=store_name,
                file_name=file_name,
                config=config or None,
            ),
        )
        return self._operation_summary(self._wait(operation))

    def list_documents(self, store_name: str, page_size: int = DEFAULT_PAGE_SIZE) -> List[DocumentInfo]:
        logger.info(f"Listing documents for store: {store_name}")
        documents = self._call(
            "list documents",
            lambda: list(self.client.file_search_stores.documents.list(
                parent=store_name,
                config={"page_size": page_size},
            )),
        )
        logger.info(f"Found {len(documents)} documents")
        return [DocumentInfo.from_sdk(d) for d in documents]

    def delete_document(self, name: str, force: bool = True) -> None:
        logger.info(f"Deleting document: {name}")
        self._call(
            "delete document",
            lambda: self.client.file_search_stores.documents.delete(
                name=name,
                config={"force": force},
            ),
        )

    # ==================== Search ====================

    def search(
        self,
        query: str,
        store_names: Sequence[str],
        model: Optional[str] = None,
        metadata_filter: Optional[str] = None,
    ) -> SearchResult:
        if not model:
            model = self.config.default_model

        logger.info(f"Searching {len(store_names)} store(s) with model: {model}")

        if self.config.enable_rate_limiting:
            rate_limit_api("gemini-search", self.config.search_calls_per_minute, 60)

        file_search = types.FileSearch(
            file_search_store_names=list(store_names),
            metadata_filter=metadata_filter or None,
        )
        response = self._call(
            "search",
            lambda: self.client.models.generate_content(
                model=model,
                contents=query,
                config=types.GenerateContentConfig(tools=[types.Tool(file_search=file_search)]),
            ),
        )

        candidates = getattr(response, "candidates", None) or []
        metadata = getattr(candidates[0], "grounding_metadata", None) if candidates else None
        return SearchResult.from_dict({
            "text": getattr(response, "text", None) or "",
            "grounding_metadata": metadata.model_dump(mode="json", exclude_none=True)
            if metadata is not None else None,
        })

    # ==================== Helpers ====================

    def _call(self, action: str, fn: Callable[[], Any]) -> Any:
        """Run an SDK call, translating failures into OracleError."""
        try:
            return fn()
        except Exception as e:
            logger.error(f"Gemini {action} error: {e}")
            if GENAI_AVAILABLE and isinstance(e, errors.APIError) and e.code == 429:
                raise RateLimitError(f"Gemini {action} rate limited: {e}")
            raise OracleError(f"Gemini {action} failed: {e}")

    def _wait(self, operation: Any) -> Any:
        """Poll a long-running operation until it is done."""
        deadline = time.monotonic() + self.config.operation_timeout
        while not operation.done:
            if time.monotonic() > deadline:
                raise OracleError(
                    f"Operation {operation.name} did not finish within "
                    f"{self.config.operation_timeout:.0f}s"
                )
            time.sleep(self.config.operation_poll_interval)
            operation = self._call("poll operation", lambda: self.client.operations.get(operation))

        error = getattr(operation, "error", None)
        if error:
            raise OracleError(f"Operation {operation.name} failed: {error}")
        return operation

    @staticmethod
    def _operation_summary(operation: Any) -> Dict[str, Any]:
        response = getattr(operation, "response", None)
        return {
            "operationName": getattr(operation, "name", None),
            "documentName": getattr(response, "document_name", None),
        }
