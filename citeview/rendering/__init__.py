"""Rendering pipeline: markdown, sanitizing and the sources sidebar."""
from .escaping import escape_html
from .sanitizer import (
    ALLOWED_TAGS,
    ALLOWED_ATTRIBUTES,
    ALLOWED_URL_SCHEMES,
    DEFAULT_POLICY,
    SanitizerPolicy,
    sanitize_html,
)
from .renderer import CitationRenderer, build_sidebar_list, render_sidebar_html

__all__ = [
    "escape_html",
    "ALLOWED_TAGS",
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_URL_SCHEMES",
    "DEFAULT_POLICY",
    "SanitizerPolicy",
    "sanitize_html",
    "CitationRenderer",
    "build_sidebar_list",
    "render_sidebar_html",
]
