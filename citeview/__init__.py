"""CiteView - grounded file search answers with inline citations.

A Python library and REST API for:
- Managing file search stores and their documents
- Asking questions answered from those documents
- Rendering answers with citation markers aligned to the cited text
- Interactive highlighting between markers, cited text and sources
"""

from .config import Config
from .exceptions import (
    CiteViewError,
    ConfigurationError,
    OracleError,
    RateLimitError,
    ConversionError,
    ValidationError,
)
from .core.models import SearchResult, RenderedResult, SidebarEntry
from .core.citation_index import CitationIndex, build_citation_index
from .rendering.renderer import CitationRenderer
from .interaction.page import ResultPage
from .citeview import CiteView

__version__ = "0.1.0"
__all__ = [
    "CiteView",
    "Config",
    "SearchResult",
    "RenderedResult",
    "SidebarEntry",
    "CitationIndex",
    "build_citation_index",
    "CitationRenderer",
    "ResultPage",
    "CiteViewError",
    "ConfigurationError",
    "OracleError",
    "RateLimitError",
    "ConversionError",
    "ValidationError",
]
