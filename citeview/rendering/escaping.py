"""HTML escaping that never double-encodes."""
import re

# An ampersand that does not already start a character reference
_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)")

_REPLACEMENTS = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)


def escape_html(text) -> str:
    """Escape ``text`` for use in HTML text or attribute values.

    Existing character references are kept as they are, so
    ``escape_html(escape_html(s)) == escape_html(s)``.
    """
    if text is None:
        return ""
    escaped = _BARE_AMPERSAND_RE.sub("&amp;", str(text))
    for char, entity in _REPLACEMENTS:
        escaped = escaped.replace(char, entity)
    return escaped
