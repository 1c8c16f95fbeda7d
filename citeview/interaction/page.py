"""Headless result page: answer pane, citations sidebar and notifications.

``ResultPage`` is what the rest of the application talks to. It owns the UI
tree, renders each search result into it, and hands a fresh
``CitationInteraction`` to every displayed result so sticky state from one
answer never carries over to the next.
"""
import logging
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..core.models import RenderedResult, SearchResult
from ..rendering.renderer import (
    NO_CITATIONS_MESSAGE,
    NO_RESULTS_MESSAGE,
    CitationRenderer,
    build_sidebar_list,
)
from .controller import CitationInteraction, StateListener, add_class, remove_class

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Search failed"
LOADING_MESSAGE = "Searching..."
CITATIONS_VIEW = "citations"
DOCUMENTS_VIEW = "documents"

PAGE_TEMPLATE = """
<div id="search-page">
  <div id="notifications"></div>
  <div id="search-status"></div>
  <div id="search-results"></div>
  <aside id="citations-sidebar" class="sidebar" data-view="documents">
    <div id="citations-list"></div>
  </aside>
</div>
"""


class ResultPage:
    """Display search results and route user interaction.

    Example:
        >>> page = ResultPage()
        >>> request_id = page.begin_search()
        >>> page.display_result(result, request_id)
        >>> page.interaction.click(page.tree.select_one("sup.citation-marker"))
    """

    def __init__(
        self,
        renderer: Optional[CitationRenderer] = None,
        listeners: Optional[Iterable[StateListener]] = None,
    ):
        self.renderer = renderer or CitationRenderer()
        self.tree = BeautifulSoup(PAGE_TEMPLATE, "html.parser")
        self._listeners: List[StateListener] = list(listeners or [])
        self.interaction = CitationInteraction(self.tree, listeners=self._listeners)
        self.current: Optional[RenderedResult] = None
        self._request_seq = 0

    @property
    def answer_container(self) -> Tag:
        return self.tree.select_one("#search-results")

    @property
    def status(self) -> Tag:
        return self.tree.select_one("#search-status")

    @property
    def sidebar(self) -> Tag:
        return self.tree.select_one("#citations-sidebar")

    @property
    def citations_list(self) -> Tag:
        return self.tree.select_one("#citations-list")

    @property
    def notifications(self) -> Tag:
        return self.tree.select_one("#notifications")

    @property
    def sidebar_open(self) -> bool:
        return "open" in (self.sidebar.get("class") or [])

    @property
    def sidebar_view(self) -> str:
        return self.sidebar.get("data-view", DOCUMENTS_VIEW)

    # ---- search lifecycle ----

    def begin_search(self) -> int:
        """Mark a new search as in flight.

        Returns:
            Request id; results for older ids are discarded
        """
        self._request_seq += 1
        self._set_text(self.status, LOADING_MESSAGE, "loading")
        return self._request_seq

    def is_current(self, request_id: Optional[int]) -> bool:
        return request_id is None or request_id == self._request_seq

    def display_result(
        self,
        result: Optional[SearchResult],
        request_id: Optional[int] = None,
    ) -> Optional[RenderedResult]:
        """Render ``result`` into the page.

        Args:
            result: Search result (None or text-less results show placeholders)
            request_id: Id from ``begin_search``; stale ids are ignored

        Returns:
            The rendered result, or None if the response was stale
        """
        if not self.is_current(request_id):
            logger.info(f"Discarding stale search response {request_id}")
            return None

        self.interaction.reset()
        rendered = self.renderer.render(result)
        self.interaction = CitationInteraction(
            self.tree, rendered.citation_index, listeners=self._listeners
        )
        self.current = rendered
        self.status.clear()

        if rendered.is_empty:
            self._set_text(self.answer_container, NO_RESULTS_MESSAGE, "empty-state")
            self._show_no_citations()
            return rendered

        content = self.tree.new_tag("div", attrs={"class": "search-result-content"})
        content.append(BeautifulSoup(rendered.answer_html, "html.parser"))
        self.answer_container.clear()
        self.answer_container.append(content)

        if rendered.sidebar_entries:
            self.citations_list.clear()
            self.citations_list.append(build_sidebar_list(self.tree, rendered.sidebar_entries))
            add_class(self.sidebar, "open")
            self.sidebar["data-view"] = CITATIONS_VIEW
        else:
            self._show_no_citations()
        return rendered

    def display_error(self, message: str, request_id: Optional[int] = None) -> bool:
        """Report a failed search.

        The previously displayed answer stays in place; only when nothing has
        been displayed yet does the answer pane show an error placeholder.

        Returns:
            False if the failure belonged to a stale request
        """
        if not self.is_current(request_id):
            logger.info(f"Discarding stale search error {request_id}")
            return False

        logger.warning(f"Search failed: {message}")
        self.status.clear()
        notice = self.tree.new_tag("div", attrs={"class": "notification error"})
        notice.string = f"Error: {message}"
        self.notifications.append(notice)

        if self.current is None:
            self._set_text(self.answer_container, SEARCH_FAILED_MESSAGE, "error-state")
        return True

    def dismiss_notifications(self) -> None:
        self.notifications.clear()

    def close_sidebar(self) -> None:
        remove_class(self.sidebar, "open")

    def html(self) -> str:
        return str(self.tree)

    # ---- helpers ----

    def _show_no_citations(self) -> None:
        self._set_text(self.citations_list, NO_CITATIONS_MESSAGE, "empty-state")

    def _set_text(self, container: Tag, text: str, css_class: str) -> None:
        element = self.tree.new_tag("p", attrs={"class": css_class})
        element.string = text
        container.clear()
        container.append(element)
