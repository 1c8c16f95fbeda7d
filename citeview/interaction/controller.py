"""Hover and sticky-click highlighting across markers, cited text and sources.

The controller works on a BeautifulSoup tree holding the rendered answer and
the citations sidebar. Elements are found through their data attributes
(``data-citation-idx`` on markers and cited text, ``data-source-idx`` on
sidebar items), never through handlers embedded in the markup.

Transitions:
    Idle --click marker c--> StickyMarker(c) --click marker c--> Idle
    Idle --click source o--> StickySource(o) --click source o--> Idle
    Sticky* --click marker/source elsewhere--> the new sticky state
    Sticky* --click outside any citation element--> Idle
Hover changes highlights only while Idle.
"""
import logging
from typing import Callable, Iterable, List, Optional

from bs4.element import Tag

from ..core.annotator import (
    CITATION_ATTR,
    CITED_TEXT_CLASS,
    DISPLAY_ATTR,
    MARKER_CLASS,
    SOURCE_ATTR,
)
from ..core.citation_index import CitationIndex
from ..rendering.renderer import CITATION_ITEM_CLASS
from .state import InteractionState

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "highlighted"

# Clicks on these keep their default behavior inside a sidebar item
DEFAULT_ACTION_TAGS = frozenset({"a", "summary"})

StateListener = Callable[[InteractionState, InteractionState], None]


def _classes(tag: Tag) -> List[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def has_class(tag: Tag, name: str) -> bool:
    return name in _classes(tag)


def add_class(tag: Tag, name: str) -> None:
    classes = _classes(tag)
    if name not in classes:
        tag["class"] = classes + [name]


def remove_class(tag: Tag, name: str) -> None:
    classes = [c for c in _classes(tag) if c != name]
    if classes:
        tag["class"] = classes
    elif "class" in tag.attrs:
        del tag["class"]


def _int_attr(tag: Tag, name: str) -> Optional[int]:
    value = tag.get(name)
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class CitationInteraction:
    """Interaction state machine for one displayed result.

    Args:
        tree: BeautifulSoup document (or container tag) holding the answer
            and the sidebar
        index: Citation index of the displayed result
        listeners: Callables invoked with ``(old, new)`` on each state change
    """

    def __init__(
        self,
        tree: Tag,
        index: Optional[CitationIndex] = None,
        listeners: Optional[Iterable[StateListener]] = None,
    ):
        self.tree = tree
        self.index = index or CitationIndex()
        self.state = InteractionState.idle()
        self.last_scrolled: Optional[Tag] = None
        self._listeners: List[StateListener] = list(listeners or [])

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    # ---- element lookup ----

    @staticmethod
    def _closest(element: Optional[Tag], name: str, css_class: str) -> Optional[Tag]:
        node = element
        while isinstance(node, Tag):
            if node.name == name and has_class(node, css_class):
                return node
            node = node.parent
        return None

    def marker_of(self, element: Tag) -> Optional[Tag]:
        return self._closest(element, "sup", MARKER_CLASS)

    def cited_text_of(self, element: Tag) -> Optional[Tag]:
        return self._closest(element, "span", CITED_TEXT_CLASS)

    def source_item_of(self, element: Tag) -> Optional[Tag]:
        return self._closest(element, "li", CITATION_ITEM_CLASS)

    def is_citation_element(self, element: Tag) -> bool:
        return any(found is not None for found in (
            self.marker_of(element),
            self.cited_text_of(element),
            self.source_item_of(element),
        ))

    def markers(self, citation_idx: int) -> List[Tag]:
        return self.tree.select(f'sup.{MARKER_CLASS}[{CITATION_ATTR}="{citation_idx}"]')

    def cited_spans(self, citation_idx: int) -> List[Tag]:
        return self.tree.select(f'span.{CITED_TEXT_CLASS}[{CITATION_ATTR}="{citation_idx}"]')

    def source_item(self, original_idx: int) -> Optional[Tag]:
        return self.tree.select_one(f'li.{CITATION_ITEM_CLASS}[{SOURCE_ATTR}="{original_idx}"]')

    def source_item_by_display(self, display_idx: int) -> Optional[Tag]:
        return self.tree.select_one(f'li.{CITATION_ITEM_CLASS}[{DISPLAY_ATTR}="{display_idx}"]')

    # ---- hover ----

    def hover_enter(self, element: Tag) -> bool:
        """Highlight the citation under ``element``; ignored while sticky.

        Returns:
            True if highlights changed
        """
        if self.state.is_sticky:
            return False

        marker = self.marker_of(element)
        if marker is not None:
            citation_idx = _int_attr(marker, CITATION_ATTR)
            if citation_idx is None:
                return False
            self.clear_highlights()
            self._highlight_citation(citation_idx)
            for item in self._source_items_for(citation_idx):
                add_class(item, HIGHLIGHT_CLASS)
            return True

        cited = self.cited_text_of(element)
        if cited is not None:
            citation_idx = _int_attr(cited, CITATION_ATTR)
            if citation_idx is None:
                return False
            self.clear_highlights()
            self._highlight_citation(citation_idx)
            return True

        item = self.source_item_of(element)
        if item is not None:
            original_idx = _int_attr(item, SOURCE_ATTR)
            if original_idx is None:
                return False
            self.clear_highlights()
            add_class(item, HIGHLIGHT_CLASS)
            for citation_idx in self.index.citations_for_chunk(original_idx):
                self._highlight_citation(citation_idx)
            return True

        return False

    def hover_leave(self, element: Optional[Tag] = None) -> bool:
        if self.state.is_sticky:
            return False
        self.clear_highlights()
        return True

    # ---- clicks ----

    def click(self, element: Tag) -> InteractionState:
        """Dispatch a click anywhere in the document."""
        marker = self.marker_of(element)
        if marker is not None:
            citation_idx = _int_attr(marker, CITATION_ATTR)
            if citation_idx is not None:
                return self.click_marker(citation_idx)
            return self.state

        item = self.source_item_of(element)
        if item is not None:
            original_idx = _int_attr(item, SOURCE_ATTR)
            if original_idx is None or self._is_default_action(element, item):
                return self.state
            return self.click_source(original_idx)

        self.click_outside(element)
        return self.state

    def click_marker(self, citation_idx: int) -> InteractionState:
        """Toggle the sticky highlight of a citation."""
        if self.state == InteractionState.marker(citation_idx):
            self.reset()
            return self.state

        self.collapse_excerpts()
        self.clear_highlights()
        self._set_state(InteractionState.marker(citation_idx))
        self._highlight_citation(citation_idx)

        for position, item in enumerate(self._source_items_for(citation_idx)):
            add_class(item, HIGHLIGHT_CLASS)
            self._expand(item)
            if position == 0:
                self._scroll_into_view(item)
        return self.state

    def click_source(self, original_idx: int) -> InteractionState:
        """Toggle the sticky highlight of a sidebar source."""
        if self.state == InteractionState.source(original_idx):
            self.reset()
            return self.state

        self.collapse_excerpts()
        self.clear_highlights()
        self._set_state(InteractionState.source(original_idx))

        item = self.source_item(original_idx)
        if item is not None:
            add_class(item, HIGHLIGHT_CLASS)
            self._expand(item)

        citations = set(self.index.citations_for_chunk(original_idx))
        for citation_idx in sorted(citations):
            self._highlight_citation(citation_idx)

        first_span = next(
            (
                span for span in self.tree.select(f"span.{CITED_TEXT_CLASS}")
                if _int_attr(span, CITATION_ATTR) in citations
            ),
            None,
        )
        if first_span is not None:
            self._scroll_into_view(first_span)
        return self.state

    def click_outside(self, target: Optional[Tag]) -> bool:
        """Leave sticky mode when the click misses every citation element.

        Returns:
            True if the state was cleared
        """
        if not self.state.is_sticky:
            return False
        if target is not None and self.is_citation_element(target):
            return False
        self.reset()
        return True

    def reset(self) -> None:
        """Back to Idle with no highlights and no expanded excerpts."""
        self._set_state(InteractionState.idle())
        self.clear_highlights()
        self.collapse_excerpts()

    # ---- visual state ----

    def clear_highlights(self) -> None:
        for tag in self.tree.select(f".{HIGHLIGHT_CLASS}"):
            remove_class(tag, HIGHLIGHT_CLASS)

    def collapse_excerpts(self) -> None:
        for details in self.tree.select(f"li.{CITATION_ITEM_CLASS} details[open]"):
            del details["open"]

    def _highlight_citation(self, citation_idx: int) -> None:
        for tag in self.markers(citation_idx) + self.cited_spans(citation_idx):
            add_class(tag, HIGHLIGHT_CLASS)

    def _source_items_for(self, citation_idx: int) -> List[Tag]:
        items = []
        for display_idx in self.index.display_indices_for(citation_idx):
            item = self.source_item_by_display(display_idx)
            if item is not None and item not in items:
                items.append(item)
        return items

    @staticmethod
    def _expand(item: Tag) -> None:
        details = item.find("details")
        if details is not None:
            details["open"] = ""

    def _scroll_into_view(self, element: Tag) -> None:
        self.last_scrolled = element
        logger.debug(f"Scrolled into view: <{element.name} {element.attrs}>")

    @staticmethod
    def _is_default_action(element: Tag, item: Tag) -> bool:
        node = element
        while isinstance(node, Tag) and node is not item:
            if node.name in DEFAULT_ACTION_TAGS:
                return True
            node = node.parent
        return False

    def _set_state(self, new_state: InteractionState) -> None:
        if new_state == self.state:
            return
        old_state, self.state = self.state, new_state
        logger.debug(f"Interaction state {old_state} -> {new_state}")
        for listener in self._listeners:
            listener(old_state, new_state)
