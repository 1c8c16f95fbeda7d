"""Data models for search results and their rendered form."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

DOCUMENT_CHUNK = "document"
WEB_CHUNK = "web"


def _get(data: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Read a key in either wire (camelCase) or SDK (snake_case) spelling."""
    if camel in data and data[camel] is not None:
        return data[camel]
    if snake in data and data[snake] is not None:
        return data[snake]
    return default


@dataclass(frozen=True)
class Chunk:
    """One retrieved snippet or web reference the service may cite.

    Attributes:
        original_index: Position in the grounding chunk sequence
        kind: 'document' or 'web'
        title: Source title (may be empty)
        text: Retrieved excerpt, for document chunks
        uri: Link target, for web chunks
    """
    original_index: int
    kind: str = DOCUMENT_CHUNK
    title: str = ""
    text: Optional[str] = None
    uri: Optional[str] = None

    @property
    def is_web(self) -> bool:
        return self.kind == WEB_CHUNK

    @property
    def display_title(self) -> str:
        """Title shown in the sidebar."""
        if self.title:
            return self.title
        if self.is_web and self.uri:
            return self.uri
        return "Document chunk"

    @classmethod
    def from_dict(cls, original_index: int, data: Dict[str, Any]) -> "Chunk":
        web = data.get("web")
        if web:
            return cls(
                original_index=original_index,
                kind=WEB_CHUNK,
                title=web.get("title") or "",
                uri=web.get("uri"),
            )
        context = _get(data, "retrievedContext", "retrieved_context", {})
        return cls(
            original_index=original_index,
            kind=DOCUMENT_CHUNK,
            title=context.get("title") or "",
            text=context.get("text"),
            uri=context.get("uri"),
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.is_web:
            return {"web": {"title": self.title, "uri": self.uri}}
        context: Dict[str, Any] = {"title": self.title, "text": self.text}
        if self.uri:
            context["uri"] = self.uri
        return {"retrievedContext": context}


@dataclass(frozen=True)
class Segment:
    """Answer excerpt a support claims is grounded.

    ``text`` is not guaranteed to be a verbatim substring of the answer.
    """
    text: str = ""
    start_index: Optional[int] = None
    end_index: Optional[int] = None


@dataclass(frozen=True)
class Support:
    """One citation event: a segment of the answer and the chunks it cites."""
    index: int
    segment: Segment
    chunk_indices: Tuple[int, ...] = ()

    @property
    def is_usable(self) -> bool:
        """Supports with no chunks or blank text produce no citation."""
        return bool(self.chunk_indices) and bool(self.segment.text.strip())

    @classmethod
    def from_dict(cls, index: int, data: Dict[str, Any]) -> "Support":
        segment = data.get("segment") or {}
        indices = _get(data, "groundingChunkIndices", "grounding_chunk_indices", [])
        return cls(
            index=index,
            segment=Segment(
                text=segment.get("text") or "",
                start_index=_get(segment, "startIndex", "start_index"),
                end_index=_get(segment, "endIndex", "end_index"),
            ),
            chunk_indices=tuple(int(i) for i in indices),
        )

    def to_dict(self) -> Dict[str, Any]:
        segment: Dict[str, Any] = {"text": self.segment.text}
        if self.segment.start_index is not None:
            segment["startIndex"] = self.segment.start_index
        if self.segment.end_index is not None:
            segment["endIndex"] = self.segment.end_index
        return {"segment": segment, "groundingChunkIndices": list(self.chunk_indices)}


@dataclass(frozen=True)
class GroundingMetadata:
    """Chunks and supports attached to an answer."""
    chunks: Tuple[Chunk, ...] = ()
    supports: Tuple[Support, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroundingMetadata":
        chunks = _get(data, "groundingChunks", "grounding_chunks", [])
        supports = _get(data, "groundingSupports", "grounding_supports", [])
        return cls(
            chunks=tuple(Chunk.from_dict(i, c or {}) for i, c in enumerate(chunks)),
            supports=tuple(Support.from_dict(i, s or {}) for i, s in enumerate(supports)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groundingChunks": [c.to_dict() for c in self.chunks],
            "groundingSupports": [s.to_dict() for s in self.supports],
        }


@dataclass(frozen=True)
class SearchResult:
    """Answer returned by the file search service.

    Attributes:
        text: Answer text (markdown)
        grounding_metadata: Citations, absent when the answer is ungrounded
    """
    text: str = ""
    grounding_metadata: Optional[GroundingMetadata] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_citations(self) -> bool:
        return self.grounding_metadata is not None and any(
            s.is_usable for s in self.grounding_metadata.supports
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SearchResult":
        """Create a result from the JSON/SDK dictionary form.

        Missing or malformed input yields an empty result instead of raising.
        """
        if not isinstance(data, dict):
            return cls()
        metadata = _get(data, "groundingMetadata", "grounding_metadata")
        return cls(
            text=data.get("text") or "",
            grounding_metadata=GroundingMetadata.from_dict(metadata)
            if isinstance(metadata, dict) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"text": self.text}
        if self.grounding_metadata is not None:
            data["groundingMetadata"] = self.grounding_metadata.to_dict()
        return data


@dataclass(frozen=True)
class Modification:
    """A located citation span, in offsets of the unmodified answer text.

    Attributes:
        start_pos: First character of the cited span
        end_pos: End (exclusive) of the cited span
        marker_pos: Word boundary at or after ``end_pos`` where markers go
        citation_idx: Index of the support in ``groundingSupports``
        display_indices: Compact indices of the cited chunks
    """
    start_pos: int
    end_pos: int
    marker_pos: int
    citation_idx: int
    display_indices: Tuple[int, ...]


@dataclass(frozen=True)
class SidebarEntry:
    """One cited source in the citations sidebar."""
    display_index: int
    original_index: int
    title: str
    uri: Optional[str] = None
    excerpt: Optional[str] = None
    preview_length: int = 200

    @property
    def label(self) -> str:
        return str(self.display_index + 1)

    @property
    def is_web(self) -> bool:
        return self.uri is not None and self.excerpt is None

    @property
    def is_truncated(self) -> bool:
        return self.excerpt is not None and len(self.excerpt) > self.preview_length

    @property
    def preview(self) -> str:
        """Excerpt cut to the preview length, with an ellipsis if shortened."""
        if self.excerpt is None:
            return ""
        if not self.is_truncated:
            return self.excerpt
        return self.excerpt[:self.preview_length].rstrip() + "..."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayIndex": self.display_index,
            "originalIndex": self.original_index,
            "label": self.label,
            "title": self.title,
            "uri": self.uri,
            "excerpt": self.excerpt,
            "preview": self.preview,
        }


@dataclass
class RenderedResult:
    """Output of the rendering pipeline.

    Attributes:
        answer_html: Sanitized answer markup with citation markers
        sidebar_entries: Cited sources, in display order
        citation_index: Maps shared with the interaction controller
        has_grounding: Whether the result carried grounding metadata at all
    """
    answer_html: str
    sidebar_entries: List[SidebarEntry] = field(default_factory=list)
    citation_index: Any = None  # Type: citeview.core.citation_index.CitationIndex
    has_grounding: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.answer_html

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answerHtml": self.answer_html,
            "sidebar": [e.to_dict() for e in self.sidebar_entries],
            "hasGrounding": self.has_grounding,
        }
