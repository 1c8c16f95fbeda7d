"""Format converters."""
from .html_converter import HtmlConverter

__all__ = ["HtmlConverter"]
