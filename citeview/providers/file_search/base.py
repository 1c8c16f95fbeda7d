"""Base file search provider interface."""
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..base import BaseProvider
from ...core.models import SearchResult


@dataclass
class ChunkingConfig:
    """How the service splits an uploaded document.

    Attributes:
        max_tokens_per_chunk: Chunk size limit
        max_overlap_tokens: Overlap between consecutive chunks
    """
    max_tokens_per_chunk: int
    max_overlap_tokens: Optional[int] = None

    def to_sdk(self) -> Dict[str, Any]:
        white_space: Dict[str, Any] = {"max_tokens_per_chunk": self.max_tokens_per_chunk}
        if self.max_overlap_tokens is not None:
            white_space["max_overlap_tokens"] = self.max_overlap_tokens
        return {"white_space_config": white_space}


@dataclass
class StoreInfo:
    """A named collection of indexed documents."""
    name: str
    display_name: Optional[str] = None
    create_time: Optional[str] = None
    active_documents_count: Optional[int] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_sdk(cls, store: Any) -> "StoreInfo":
        return cls(
            name=store.name,
            display_name=getattr(store, "display_name", None),
            create_time=_isoformat(getattr(store, "create_time", None)),
            active_documents_count=_as_int(getattr(store, "active_documents_count", None)),
            size_bytes=_as_int(getattr(store, "size_bytes", None)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "createTime": self.create_time,
            "activeDocumentsCount": self.active_documents_count,
            "sizeBytes": self.size_bytes,
        }


@dataclass
class DocumentInfo:
    """A document inside a store."""
    name: str
    display_name: Optional[str] = None
    state: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    create_time: Optional[str] = None

    @classmethod
    def from_sdk(cls, document: Any) -> "DocumentInfo":
        state = getattr(document, "state", None)
        return cls(
            name=document.name,
            display_name=getattr(document, "display_name", None),
            state=getattr(state, "value", state),
            mime_type=getattr(document, "mime_type", None),
            size_bytes=_as_int(getattr(document, "size_bytes", None)),
            create_time=_isoformat(getattr(document, "create_time", None)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "state": self.state,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "createTime": self.create_time,
        }


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _isoformat(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class BaseFileSearchProvider(BaseProvider):
    """Abstract base class for file search (retrieval) services."""

    @abstractmethod
    def create_store(self, display_name: str) -> StoreInfo:
        """Create a store."""
        pass

    @abstractmethod
    def list_stores(self) -> List[StoreInfo]:
        """List all stores, following pagination."""
        pass

    @abstractmethod
    def get_store(self, name: str) -> StoreInfo:
        """Fetch one store by resource name."""
        pass

    @abstractmethod
    def delete_store(self, name: str, force: bool = True) -> None:
        """Delete a store (and, with ``force``, its documents)."""
        pass

    @abstractmethod
    def upload_file(
        self,
        file_path: str,
        store_name: str,
        display_name: Optional[str] = None,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Upload a local file into a store and wait until it is indexed.

        Returns:
            Summary with the operation and document names

        Raises:
            OracleError: If the upload fails or times out
            FileNotFoundError: If the file doesn't exist
        """
        pass

    @abstractmethod
    def import_file(
        self,
        file_name: str,
        store_name: str,
        chunking: Optional[ChunkingConfig] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Import an already uploaded file into a store and wait for indexing."""
        pass

    @abstractmethod
    def list_documents(self, store_name: str) -> List[DocumentInfo]:
        """List documents in a store, following pagination."""
        pass

    @abstractmethod
    def delete_document(self, name: str, force: bool = True) -> None:
        """Delete a document."""
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        store_names: Sequence[str],
        model: Optional[str] = None,
        metadata_filter: Optional[str] = None,
    ) -> SearchResult:
        """Answer ``query`` from the given stores.

        Returns:
            SearchResult with answer text and grounding metadata

        Raises:
            OracleError: If the service call fails
        """
        pass
