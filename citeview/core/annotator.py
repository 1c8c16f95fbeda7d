"""Insert citation markup into answer text ahead of markdown rendering.

Each located support becomes a ``<span class="cited-text">`` around the cited
words plus one ``<sup class="citation-marker">`` per cited source. Inline
HTML tags pass through Python-Markdown untouched, so the markers survive the
markdown step and are then checked by the sanitizer. Markdown escapes tags
inside code, so spans are widened to whole inline code spans and never
placed in fenced blocks.
"""
import logging
import re
from typing import List, Optional, Sequence, Tuple

from .citation_index import CitationIndex
from .locator import extend_to_boundary, locate
from .models import Modification, Support

logger = logging.getLogger(__name__)

CITED_TEXT_CLASS = "cited-text"
MARKER_CLASS = "citation-marker"
CITATION_ATTR = "data-citation-idx"
DISPLAY_ATTR = "data-display-idx"
SOURCE_ATTR = "data-source-idx"

_BLOCK_PREFIX_RE = re.compile(r"(?:#{1,6}|[-*+]|\d+[.)]|>)[ \t]+")
_BLOCK_BREAK_RE = re.compile(r"\n(?:[ \t]*\n|(?=[ \t]*(?:#{1,6}|[-*+]|\d+[.)]|>)[ \t]))")
_HEADING_RE = re.compile(r"[ \t]{0,3}#{1,6}[ \t]")

# Same fence rules as the fenced_code extension: no indent, closing fence
# identical to the opening one.
_FENCE_RE = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[^\n]*\n.*?^(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
_CODE_SPAN_RE = re.compile(
    r"(?<![\\`])(`+)(?!`)((?:(?!\n[ \t]*\n).)+?)(?<!`)\1(?!`)",
    re.DOTALL,
)

Region = Tuple[int, int]


def code_regions(text: str) -> Tuple[List[Region], List[Region]]:
    """Find fenced code blocks and inline code spans in ``text``.

    Returns:
        ``(fenced, inline)`` lists of ``(start, end)`` offsets, backticks
        and fences included
    """
    fenced = [m.span() for m in _FENCE_RE.finditer(text)]
    masked = text
    for start, end in fenced:
        masked = masked[:start] + " " * (end - start) + masked[end:]
    inline = [m.span() for m in _CODE_SPAN_RE.finditer(masked)]
    return fenced, inline


def _enclosing(regions: Sequence[Region], pos: int) -> Optional[Region]:
    for start, end in regions:
        if start < pos < end:
            return start, end
    return None


def _skip_block_prefix(text: str, start: int, end: int) -> int:
    """Keep heading/list/quote markers outside the cited span.

    A span opening before ``## `` or ``- `` at line start would stop
    markdown from seeing the block syntax.
    """
    if start > 0 and text[start - 1] != "\n":
        return start
    prefix = _BLOCK_PREFIX_RE.match(text, start, end)
    if prefix is None or prefix.end() >= end:
        return start
    return prefix.end()


def _clip_to_block(text: str, start: int, end: int) -> int:
    """End a span at the first block break after ``start``."""
    line_start = text.rfind("\n", 0, start) + 1
    if _HEADING_RE.match(text, line_start):
        newline = text.find("\n", start, end)
        if newline != -1:
            end = newline
    block_break = _BLOCK_BREAK_RE.search(text, start, end)
    if block_break is not None:
        end = block_break.start()
    return start + len(text[start:end].rstrip())


def _fit_span(
    text: str,
    start: int,
    end: int,
    fenced: Sequence[Region],
    inline: Sequence[Region],
) -> Optional[Tuple[int, int, int]]:
    """Place a located span where markdown keeps its tags intact.

    Returns:
        ``(start_pos, end_pos, marker_pos)``, or None when the span
        cannot be marked
    """
    end = _clip_to_block(text, start, end)
    if end <= start:
        return None

    code = _enclosing(inline, start)
    if code is not None:
        start = code[0]
    code = _enclosing(inline, end)
    if code is not None:
        end = code[1]
    marker = extend_to_boundary(text, end)
    code = _enclosing(inline, marker)
    if code is not None:
        marker = code[1]

    if any(s < marker and start < e for s, e in fenced):
        return None
    return _skip_block_prefix(text, start, end), end, marker


def collect_modifications(
    text: str,
    supports: Sequence[Support],
    index: CitationIndex,
) -> List[Modification]:
    """Locate every citable support in ``text``.

    Supports that cannot be located, that fall in a fenced code block, or
    that cite no displayable chunk are dropped without error. Spans are
    clipped to their first markdown block and widened to whole inline code
    spans. The result is sorted by descending ``start_pos`` and free of
    overlaps: when two spans collide the one starting later is kept.

    Args:
        text: Unmodified answer text
        supports: Grounding supports, in service order
        index: Citation index for the same result

    Returns:
        Modifications in application order
    """
    fenced, inline = code_regions(text)
    found: List[Modification] = []
    for support in supports:
        display_indices = index.display_indices_for(support.index)
        if not display_indices:
            continue
        match = locate(text, support.segment.text)
        if match is None:
            logger.debug(f"Citation {support.index} not found in answer text")
            continue
        placed = _fit_span(text, match.position, match.end, fenced, inline)
        if placed is None:
            logger.debug(f"Citation {support.index} has no span outside code; not marked")
            continue
        start_pos, end_pos, marker_pos = placed
        found.append(Modification(
            start_pos=start_pos,
            end_pos=end_pos,
            marker_pos=marker_pos,
            citation_idx=support.index,
            display_indices=display_indices,
        ))

    found.sort(key=lambda m: (m.start_pos, m.citation_idx), reverse=True)

    modifications: List[Modification] = []
    for modification in found:
        if modifications and modification.marker_pos > modifications[-1].start_pos:
            logger.debug(
                f"Citation {modification.citation_idx} overlaps citation "
                f"{modifications[-1].citation_idx}; not marked"
            )
            continue
        modifications.append(modification)
    return modifications


def cited_span(citation_idx: int, content: str) -> str:
    return f'<span class="{CITED_TEXT_CLASS}" {CITATION_ATTR}="{citation_idx}">{content}</span>'


def marker_badge(citation_idx: int, display_idx: int) -> str:
    return (
        f'<sup class="{MARKER_CLASS}" {CITATION_ATTR}="{citation_idx}" '
        f'{DISPLAY_ATTR}="{display_idx}">{display_idx + 1}</sup>'
    )


def apply_modification(text: str, modification: Modification) -> str:
    """Wrap one span and append its markers.

    Everything before ``start_pos`` is left untouched, so offsets of spans
    that start earlier stay valid.
    """
    start, end, marker = modification.start_pos, modification.end_pos, modification.marker_pos
    badges = "".join(marker_badge(modification.citation_idx, d) for d in modification.display_indices)
    return (
        text[:start]
        + cited_span(modification.citation_idx, text[start:end])
        + text[end:marker]
        + badges
        + text[marker:]
    )


def annotate(text: str, supports: Sequence[Support], index: CitationIndex) -> str:
    """Return ``text`` with citation spans and markers inserted.

    Args:
        text: Answer text (markdown)
        supports: Grounding supports, in service order
        index: Citation index for the same result

    Returns:
        Markdown with inline citation markup
    """
    annotated = text
    for modification in collect_modifications(text, supports, index):
        annotated = apply_modification(annotated, modification)
    return annotated
