"""Result display and citation highlighting interaction."""
from .state import InteractionState, StickyMode
from .controller import CitationInteraction, HIGHLIGHT_CLASS
from .page import ResultPage

__all__ = [
    "InteractionState",
    "StickyMode",
    "CitationInteraction",
    "HIGHLIGHT_CLASS",
    "ResultPage",
]
