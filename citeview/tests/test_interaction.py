"""Tests for the highlighting state machine."""

import pytest

from citeview.core.models import SearchResult
from citeview.interaction.controller import HIGHLIGHT_CLASS, has_class
from citeview.interaction.page import ResultPage
from citeview.interaction.state import InteractionState, StickyMode

from conftest import ANSWER_TEXT, document_chunk, support, web_chunk


@pytest.fixture
def transitions():
    return []


@pytest.fixture
def page(transitions):
    """A page showing four citations over chunks 0, 3 and 4."""
    page = ResultPage(listeners=[lambda old, new: transitions.append((str(old), str(new)))])
    page.display_result(SearchResult.from_dict({
        "text": ANSWER_TEXT,
        "groundingMetadata": {
            "groundingChunks": [
                document_chunk("animals.pdf", "Foxes are quick."),
                document_chunk("unused.pdf", "Never cited."),
                web_chunk("Unused", "https://unused.example.com"),
                document_chunk("cats.pdf", "Cats sleep."),
                web_chunk("Bird facts", "https://birds.example.com"),
            ],
            "groundingSupports": [
                support("The quick fox jumps", 0),
                support("Cats sleep most of the day", 3, 0),
                support("Birds sing at dawn", 4),
                support("over the lazy dog", 3),
            ],
        },
    }))
    transitions.clear()
    return page


def marker(page, citation_idx):
    return page.tree.select_one(f'sup.citation-marker[data-citation-idx="{citation_idx}"]')


def cited(page, citation_idx):
    return page.tree.select_one(f'span.cited-text[data-citation-idx="{citation_idx}"]')


def item(page, original_idx):
    return page.tree.select_one(f'li.citation-item[data-source-idx="{original_idx}"]')


def highlighted(page):
    """(kind, index) pairs of every highlighted element."""
    found = set()
    for tag in page.tree.select(f".{HIGHLIGHT_CLASS}"):
        if tag.name == "li":
            found.add(("source", int(tag["data-source-idx"])))
        elif tag.name == "sup":
            found.add(("marker", int(tag["data-citation-idx"])))
        else:
            found.add(("text", int(tag["data-citation-idx"])))
    return found


def open_excerpts(page):
    return {
        int(details.find_parent("li")["data-source-idx"])
        for details in page.tree.select("li.citation-item details[open]")
    }


class TestInteractionState:
    """Test the state value object."""

    def test_idle(self):
        state = InteractionState.idle()
        assert state.mode is StickyMode.NONE
        assert not state.is_sticky
        assert str(state) == "Idle"

    def test_sticky_states(self):
        assert str(InteractionState.marker(2)) == "StickyMarker(2)"
        assert str(InteractionState.source(4)) == "StickySource(4)"
        assert InteractionState.marker(2) == InteractionState.marker(2)
        assert InteractionState.marker(2) != InteractionState.source(2)


class TestStickyMarker:
    """Test clicking citation markers."""

    def test_toggle(self, page):
        """Click marker 2 pins it, clicking it again returns to Idle."""
        interaction = page.interaction
        assert interaction.click(marker(page, 2)) == InteractionState.marker(2)
        assert interaction.click(marker(page, 2)) == InteractionState.idle()
        assert highlighted(page) == set()

    def test_switch_directly_between_markers(self, page, transitions):
        """StickyMarker(2) to StickyMarker(3) with no Idle in between."""
        page.interaction.click(marker(page, 2))
        page.interaction.click(marker(page, 3))
        assert page.interaction.state == InteractionState.marker(3)
        assert transitions == [("Idle", "StickyMarker(2)"), ("StickyMarker(2)", "StickyMarker(3)")]

    def test_highlights_citation_and_sources(self, page):
        page.interaction.click_marker(1)
        assert highlighted(page) == {("marker", 1), ("text", 1), ("source", 3), ("source", 0)}
        assert open_excerpts(page) == {0, 3}

    def test_scrolls_to_first_source(self, page):
        page.interaction.click_marker(1)
        # citation 1 cites chunk 3 first
        assert page.interaction.last_scrolled is item(page, 3)

    def test_switch_clears_previous_highlights(self, page):
        page.interaction.click_marker(1)
        page.interaction.click_marker(2)
        assert highlighted(page) == {("marker", 2), ("text", 2), ("source", 4)}
        assert open_excerpts(page) == set()


class TestStickySource:
    """Test clicking sidebar sources."""

    def test_toggle(self, page):
        interaction = page.interaction
        assert interaction.click(item(page, 0)) == InteractionState.source(0)
        assert interaction.click(item(page, 0)) == InteractionState.idle()

    def test_highlights_all_citing_spans(self, page):
        page.interaction.click_source(0)
        assert highlighted(page) == {
            ("source", 0),
            ("marker", 0), ("text", 0),
            ("marker", 1), ("text", 1),
        }
        assert open_excerpts(page) == {0}

    def test_scrolls_to_first_cited_span_in_document_order(self, page):
        page.interaction.click_source(3)
        # chunk 3 is cited by citations 1 and 3; citation 3 appears first in the text
        assert page.interaction.last_scrolled is cited(page, 3)

    def test_marker_then_source(self, page, transitions):
        page.interaction.click_marker(2)
        page.interaction.click_source(3)
        assert transitions == [("Idle", "StickyMarker(2)"), ("StickyMarker(2)", "StickySource(3)")]

    def test_summary_click_keeps_default_behavior(self, page):
        summary = item(page, 0).find("summary")
        assert page.interaction.click(summary) == InteractionState.idle()

    def test_link_click_keeps_default_behavior(self, page):
        link = item(page, 4).find("a")
        assert page.interaction.click(link) == InteractionState.idle()

    def test_number_click_pins_source(self, page):
        number = item(page, 4).select_one(".citation-number")
        assert page.interaction.click(number) == InteractionState.source(4)


class TestClickOutside:
    """Test leaving sticky mode."""

    def test_click_outside_resets(self, page):
        page.interaction.click_marker(1)
        page.interaction.click(page.status)
        assert page.interaction.state == InteractionState.idle()
        assert highlighted(page) == set()
        assert open_excerpts(page) == set()

    def test_click_on_cited_text_keeps_sticky(self, page):
        page.interaction.click_marker(1)
        page.interaction.click(cited(page, 0))
        assert page.interaction.state == InteractionState.marker(1)

    def test_click_outside_when_idle_is_noop(self, page, transitions):
        assert page.interaction.click_outside(page.status) is False
        assert transitions == []


class TestHover:
    """Test hover highlighting."""

    def test_hover_marker(self, page):
        assert page.interaction.hover_enter(marker(page, 1))
        assert highlighted(page) == {("marker", 1), ("text", 1), ("source", 3), ("source", 0)}
        assert open_excerpts(page) == set()

    def test_hover_cited_text_highlights_citation_only(self, page):
        page.interaction.hover_enter(cited(page, 1))
        assert highlighted(page) == {("marker", 1), ("text", 1)}

    def test_hover_source(self, page):
        page.interaction.hover_enter(item(page, 3))
        assert highlighted(page) == {
            ("source", 3),
            ("marker", 1), ("text", 1),
            ("marker", 3), ("text", 3),
        }

    def test_hover_leave_clears(self, page):
        page.interaction.hover_enter(marker(page, 0))
        page.interaction.hover_leave(marker(page, 0))
        assert highlighted(page) == set()

    def test_hover_elsewhere_changes_nothing(self, page):
        assert not page.interaction.hover_enter(page.status)
        assert highlighted(page) == set()

    def test_hover_suppressed_while_sticky(self, page):
        """Hovering an unrelated source under StickyMarker(2) changes nothing."""
        page.interaction.click_marker(2)
        before = page.html()

        assert not page.interaction.hover_enter(item(page, 3))
        assert not page.interaction.hover_leave(item(page, 3))

        assert page.html() == before
        assert highlighted(page) == {("marker", 2), ("text", 2), ("source", 4)}


class TestRobustness:
    """Clearing and lookups never fail on missing elements."""

    def test_clear_with_nothing_highlighted(self, page):
        page.interaction.clear_highlights()
        page.interaction.collapse_excerpts()
        assert highlighted(page) == set()

    def test_click_unknown_citation(self, page):
        assert page.interaction.click_marker(99) == InteractionState.marker(99)
        assert highlighted(page) == set()

    def test_click_unknown_source(self, page):
        assert page.interaction.click_source(99) == InteractionState.source(99)
        assert page.interaction.last_scrolled is None
