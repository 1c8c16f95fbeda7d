"""Bidirectional maps between supports (citations) and grounding chunks.

The index is built once per search result and handed to both the renderer
and the interaction controller. It is immutable, so state from one result
can never leak into the next.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

from .models import Chunk, Support

logger = logging.getLogger(__name__)


def _freeze(mapping: Dict[int, List[int]]) -> Mapping[int, Tuple[int, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in mapping.items()})


@dataclass(frozen=True)
class CitationIndex:
    """Citation/chunk maps for one search result.

    Attributes:
        display_index: original chunk index -> compact display index, defined
            only for chunks cited by at least one support
        chunk_to_citations: original chunk index -> support indices citing it
        citation_to_chunks: support index -> original chunk indices it cites
        citation_to_display: support index -> distinct display indices
    """
    display_index: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    chunk_to_citations: Mapping[int, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    citation_to_chunks: Mapping[int, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    citation_to_display: Mapping[int, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.display_index)

    def display_order(self) -> List[int]:
        """Original indices of cited chunks, sorted by display index."""
        return sorted(self.display_index, key=self.display_index.__getitem__)

    def is_cited(self, original_index: int) -> bool:
        return original_index in self.display_index

    def citations_for_chunk(self, original_index: int) -> Tuple[int, ...]:
        return self.chunk_to_citations.get(original_index, ())

    def display_indices_for(self, citation_idx: int) -> Tuple[int, ...]:
        return self.citation_to_display.get(citation_idx, ())


def build_citation_index(
    chunks: Sequence[Chunk],
    supports: Sequence[Support],
) -> CitationIndex:
    """Build the citation maps for a result.

    Supports with no chunk indices or blank segment text are left out of
    every map. Chunk indices that do not name an existing chunk are ignored.
    Display indices are assigned by scanning ``chunks`` front to back, so
    they follow source order rather than citation order.

    Args:
        chunks: Grounding chunks, in service order
        supports: Grounding supports, in service order

    Returns:
        CitationIndex
    """
    known = {chunk.original_index for chunk in chunks}
    citation_to_chunks: Dict[int, List[int]] = {}
    chunk_to_citations: Dict[int, List[int]] = {}

    for support in supports:
        if not support.is_usable:
            logger.debug(f"Skipping support {support.index}: no chunks or empty segment")
            continue
        cited = []
        for chunk_idx in support.chunk_indices:
            if chunk_idx not in known:
                logger.debug(f"Support {support.index} cites unknown chunk {chunk_idx}")
                continue
            if chunk_idx not in cited:
                cited.append(chunk_idx)
        if not cited:
            continue
        citation_to_chunks[support.index] = cited
        for chunk_idx in cited:
            chunk_to_citations.setdefault(chunk_idx, []).append(support.index)

    display_index: Dict[int, int] = {}
    for chunk in chunks:
        if chunk.original_index in chunk_to_citations:
            display_index[chunk.original_index] = len(display_index)

    citation_to_display = {
        citation: [display_index[c] for c in cited]
        for citation, cited in citation_to_chunks.items()
    }

    return CitationIndex(
        display_index=MappingProxyType(display_index),
        chunk_to_citations=_freeze(chunk_to_citations),
        citation_to_chunks=_freeze(citation_to_chunks),
        citation_to_display=_freeze(citation_to_display),
    )
