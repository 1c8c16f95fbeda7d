"""Turn a search result into sanitized answer HTML and sidebar entries."""
import logging
from typing import Dict, List, Optional

import markdown
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import Config
from ..core.annotator import annotate, DISPLAY_ATTR, SOURCE_ATTR
from ..core.citation_index import CitationIndex, build_citation_index
from ..core.models import Chunk, GroundingMetadata, RenderedResult, SearchResult, SidebarEntry
from .sanitizer import DEFAULT_POLICY, SanitizerPolicy, sanitize_html

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "sane_lists"]

CITATION_ITEM_CLASS = "citation-item"
NO_CITATIONS_MESSAGE = "No citations for this answer"
NO_RESULTS_MESSAGE = "No results found"


class CitationRenderer:
    """Render answers with inline citation markers and a sources sidebar.

    Example:
        >>> renderer = CitationRenderer()
        >>> rendered = renderer.render(SearchResult.from_dict(payload))
        >>> rendered.answer_html, rendered.sidebar_entries
    """

    def __init__(self, config: Optional[Config] = None, policy: SanitizerPolicy = DEFAULT_POLICY):
        self.config = config or Config()
        self.policy = policy

    def render(self, result: Optional[SearchResult]) -> RenderedResult:
        """Render a search result.

        A result without text renders as empty; nothing is raised.

        Args:
            result: Search result from the file search service

        Returns:
            RenderedResult
        """
        if result is None or not result.has_text:
            logger.info("Search result has no answer text")
            return RenderedResult(answer_html="", citation_index=CitationIndex())

        metadata = result.grounding_metadata
        if metadata is None:
            index = CitationIndex()
            annotated = result.text
        else:
            index = build_citation_index(metadata.chunks, metadata.supports)
            annotated = annotate(result.text, metadata.supports, index)

        answer_html = self.render_markdown(annotated)
        entries = self.sidebar_entries(metadata, index)

        logger.info(
            f"Rendered answer ({len(result.text)} chars) with "
            f"{len(index.citation_to_chunks)} citations over {len(entries)} sources"
        )
        return RenderedResult(
            answer_html=answer_html,
            sidebar_entries=entries,
            citation_index=index,
            has_grounding=metadata is not None,
        )

    def render_markdown(self, text: str) -> str:
        """Markdown to sanitized HTML."""
        html = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
        return sanitize_html(html, self.policy)

    def sidebar_entries(
        self,
        metadata: Optional[GroundingMetadata],
        index: CitationIndex,
    ) -> List[SidebarEntry]:
        """One entry per cited chunk, in display order."""
        if metadata is None:
            return []
        chunks: Dict[int, Chunk] = {c.original_index: c for c in metadata.chunks}
        return [
            SidebarEntry(
                display_index=index.display_index[original],
                original_index=original,
                title=chunks[original].display_title,
                uri=chunks[original].uri,
                excerpt=None if chunks[original].is_web else chunks[original].text,
                preview_length=self.config.excerpt_preview_length,
            )
            for original in index.display_order()
        ]


def build_sidebar_list(
    soup: BeautifulSoup,
    entries: List[SidebarEntry],
    policy: SanitizerPolicy = DEFAULT_POLICY,
) -> Tag:
    """Build the ``<ol>`` of cited sources inside ``soup``.

    Titles and excerpts are set as text nodes, so source content is always
    escaped. Items are addressed by ``data-source-idx`` (original chunk index).
    """
    sources = soup.new_tag("ol", attrs={"class": "citation-sources"})
    for entry in entries:
        item = soup.new_tag("li", attrs={
            "class": CITATION_ITEM_CLASS,
            SOURCE_ATTR: str(entry.original_index),
            DISPLAY_ATTR: str(entry.display_index),
        })
        number = soup.new_tag("span", attrs={"class": "citation-number"})
        number.string = f"[{entry.label}]"
        item.append(number)

        if entry.excerpt is not None:
            details = soup.new_tag("details", attrs={"class": "citation-excerpt"})
            summary = soup.new_tag("summary", attrs={"class": "citation-summary"})
            title = soup.new_tag("span", attrs={"class": "citation-title"})
            title.string = entry.title
            preview = soup.new_tag("span", attrs={"class": "citation-preview"})
            preview.string = entry.preview
            summary.append(title)
            summary.append(preview)
            full_text = soup.new_tag("p", attrs={"class": "citation-full-text"})
            full_text.string = entry.excerpt
            details.append(summary)
            details.append(full_text)
            item.append(details)
        elif entry.uri and policy.allows_url(entry.uri):
            link = soup.new_tag("a", attrs={
                "class": "citation-link",
                "href": entry.uri,
                "target": "_blank",
                "rel": "noopener noreferrer",
            })
            link.string = entry.title
            item.append(link)
        else:
            title = soup.new_tag("span", attrs={"class": "citation-title"})
            title.string = entry.title
            item.append(title)

        sources.append(item)
    return sources


def render_sidebar_html(entries: List[SidebarEntry]) -> str:
    """Sidebar list as an HTML string, or the no-citations placeholder."""
    soup = BeautifulSoup("", "html.parser")
    if not entries:
        placeholder = soup.new_tag("p", attrs={"class": "empty-state"})
        placeholder.string = NO_CITATIONS_MESSAGE
        return str(placeholder)
    return str(build_sidebar_list(soup, entries))
