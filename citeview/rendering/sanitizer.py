"""Allow-list HTML sanitizer for rendered answers.

The policy is plain data so callers and tests can see exactly what is
permitted. Anything outside it is downgraded, never reported as an error:
disallowed elements are unwrapped (their text stays), disallowed attributes
are dropped.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from ..core.annotator import CITATION_ATTR, DISPLAY_ATTR

logger = logging.getLogger(__name__)

ALLOWED_TAGS: FrozenSet[str] = frozenset({
    "p", "br",
    "strong", "b", "em", "i",
    "ul", "ol", "li",
    "code", "pre",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "a",
    # Citation markup: cited-text spans and marker badges
    "span", "sup",
})

ALLOWED_ATTRIBUTES: Mapping[str, FrozenSet[str]] = {
    "*": frozenset({"class"}),
    "a": frozenset({"href", "target", "rel"}),
    "span": frozenset({CITATION_ATTR}),
    "sup": frozenset({CITATION_ATTR, DISPLAY_ATTR}),
}

ALLOWED_URL_SCHEMES: FrozenSet[str] = frozenset({"http", "https", "mailto"})

URL_ATTRIBUTES: FrozenSet[str] = frozenset({"href"})

INTEGER_ATTRIBUTES: FrozenSet[str] = frozenset({CITATION_ATTR, DISPLAY_ATTR})

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_URL_NOISE_RE = re.compile(r"[\x00-\x20\x7f]+")
_NON_CONTENT_NODES = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


@dataclass(frozen=True)
class SanitizerPolicy:
    """What the sanitizer lets through.

    Attributes:
        tags: Element names that are kept
        attributes: Per-element attribute names; ``"*"`` applies to all
        url_schemes: Schemes accepted in URL attributes (relative URLs pass)
        url_attributes: Attributes holding URLs
        integer_attributes: Attributes whose value must be a non-negative integer
    """
    tags: FrozenSet[str] = ALLOWED_TAGS
    attributes: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: dict(ALLOWED_ATTRIBUTES))
    url_schemes: FrozenSet[str] = ALLOWED_URL_SCHEMES
    url_attributes: FrozenSet[str] = URL_ATTRIBUTES
    integer_attributes: FrozenSet[str] = INTEGER_ATTRIBUTES

    def allows_tag(self, name: str) -> bool:
        return name in self.tags

    def allows_attribute(self, tag: str, name: str, value) -> bool:
        allowed = self.attributes.get("*", frozenset()) | self.attributes.get(tag, frozenset())
        if name not in allowed:
            return False
        if name in self.integer_attributes:
            return isinstance(value, str) and value.isdigit()
        if name in self.url_attributes:
            return self.allows_url(value)
        return True

    def allows_url(self, value) -> bool:
        if not isinstance(value, str):
            return False
        match = _SCHEME_RE.match(_URL_NOISE_RE.sub("", value))
        return match is None or match.group(1).lower() in self.url_schemes


DEFAULT_POLICY = SanitizerPolicy()


def sanitize_html(html: str, policy: SanitizerPolicy = DEFAULT_POLICY) -> str:
    """Filter ``html`` through ``policy``.

    Args:
        html: Untrusted markup
        policy: Allow-lists to apply

    Returns:
        Sanitized markup
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, _NON_CONTENT_NODES)):
        node.extract()

    for tag in soup.find_all(True):
        if not policy.allows_tag(tag.name):
            logger.debug(f"Unwrapping disallowed <{tag.name}>")
            tag.unwrap()
            continue
        tag.attrs = {
            name: value
            for name, value in tag.attrs.items()
            if policy.allows_attribute(tag.name, name, value)
        }

    return str(soup)
