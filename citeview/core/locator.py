"""Locate cited excerpts inside an answer and snap them to word boundaries.

The service's cited segment comes from model output and can differ from the
answer text in case or markdown decoration. ``locate`` tries progressively
looser matches and gives up quietly; a miss only means the citation is not
highlighted.
"""
import re
from typing import NamedTuple, Optional

_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_BOLD_RE = re.compile(r"(\*\*|__)(.+?)\1", re.DOTALL)
_ITALIC_RE = re.compile(r"\*(.+?)\*", re.DOTALL)
_HEADING_RE = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_CODE_RE = re.compile(r"`([^`]*)`")
_WORD_CHAR_RE = re.compile(r"\w")

# Characters after which a marker may be placed as-is
BOUNDARY_CHARS = frozenset(".,;:!?)]")


class Match(NamedTuple):
    """Position of a located excerpt and the number of characters it spans."""
    position: int
    length: int

    @property
    def end(self) -> int:
        return self.position + self.length


def strip_markdown(text: str) -> str:
    """Remove common inline markdown from ``text``.

    Links become their label; bold, italic and inline-code markers are
    dropped; heading prefixes are removed. Surrounding whitespace is trimmed.
    """
    cleaned = _LINK_RE.sub(r"\1", text)
    cleaned = _BOLD_RE.sub(r"\2", cleaned)
    cleaned = _ITALIC_RE.sub(r"\1", cleaned)
    cleaned = _HEADING_RE.sub("", cleaned)
    cleaned = _CODE_RE.sub(r"\1", cleaned)
    return cleaned.strip()


def locate(full_text: str, excerpt: str) -> Optional[Match]:
    """Find ``excerpt`` in ``full_text``.

    Tries an exact match, then an exact match of the markdown-stripped
    excerpt, then a case-insensitive match of the stripped excerpt. For the
    last two the returned length is that of the stripped excerpt, since that
    is what appears verbatim in the answer.

    Returns:
        Match, or None when the excerpt cannot be found
    """
    if not full_text or not excerpt or not excerpt.strip():
        return None

    position = full_text.find(excerpt)
    if position != -1:
        return Match(position, len(excerpt))

    cleaned = strip_markdown(excerpt)
    if not cleaned:
        return None

    position = full_text.find(cleaned)
    if position != -1:
        return Match(position, len(cleaned))

    # Offsets into the lowered text are only valid if lowering kept its length
    lowered = full_text.lower()
    position = lowered.find(cleaned.lower())
    if position != -1 and len(lowered) == len(full_text):
        return Match(position, len(cleaned))

    return None


def extend_to_boundary(text: str, pos: int) -> int:
    """Move ``pos`` forward to the end of the word it falls inside.

    A position at end-of-text, on whitespace, or on closing punctuation is
    already a boundary and is returned unchanged.
    """
    if pos >= len(text):
        return pos
    char = text[pos]
    if char.isspace() or char in BOUNDARY_CHARS:
        return pos
    while pos < len(text) and _WORD_CHAR_RE.match(text[pos]):
        pos += 1
    return pos
