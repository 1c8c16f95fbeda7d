"""Sticky highlight state for one displayed result."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StickyMode(Enum):
    """What the user has pinned by clicking."""
    NONE = "none"
    MARKER = "marker"
    SOURCE = "source"


@dataclass(frozen=True)
class InteractionState:
    """Current sticky mode.

    Attributes:
        mode: Sticky mode
        citation_idx: Pinned citation, when mode is MARKER
        source_idx: Pinned source (original chunk index), when mode is SOURCE
    """
    mode: StickyMode = StickyMode.NONE
    citation_idx: Optional[int] = None
    source_idx: Optional[int] = None

    @classmethod
    def idle(cls) -> "InteractionState":
        return cls()

    @classmethod
    def marker(cls, citation_idx: int) -> "InteractionState":
        return cls(mode=StickyMode.MARKER, citation_idx=citation_idx)

    @classmethod
    def source(cls, source_idx: int) -> "InteractionState":
        return cls(mode=StickyMode.SOURCE, source_idx=source_idx)

    @property
    def is_sticky(self) -> bool:
        return self.mode is not StickyMode.NONE

    def __str__(self) -> str:
        if self.mode is StickyMode.MARKER:
            return f"StickyMarker({self.citation_idx})"
        if self.mode is StickyMode.SOURCE:
            return f"StickySource({self.source_idx})"
        return "Idle"
