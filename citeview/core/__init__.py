"""Citation alignment core: locating, indexing and annotating citations."""
from .models import (
    Chunk,
    Segment,
    Support,
    GroundingMetadata,
    SearchResult,
    Modification,
    SidebarEntry,
    RenderedResult,
)
from .locator import Match, locate, strip_markdown, extend_to_boundary
from .citation_index import CitationIndex, build_citation_index
from .annotator import annotate, collect_modifications

__all__ = [
    "Chunk",
    "Segment",
    "Support",
    "GroundingMetadata",
    "SearchResult",
    "Modification",
    "SidebarEntry",
    "RenderedResult",
    "Match",
    "locate",
    "strip_markdown",
    "extend_to_boundary",
    "CitationIndex",
    "build_citation_index",
    "annotate",
    "collect_modifications",
]
