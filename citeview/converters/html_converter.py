"""Standalone HTML export of a rendered answer."""
import logging
from typing import Optional

from ..core.models import RenderedResult
from ..exceptions import ConversionError
from ..rendering.escaping import escape_html
from ..rendering.renderer import NO_RESULTS_MESSAGE, render_sidebar_html

logger = logging.getLogger(__name__)


class HtmlConverter:
    """Write a rendered answer and its sources to an HTML file."""

    def convert(
        self,
        rendered: RenderedResult,
        output_path: str,
        query: Optional[str] = None,
        include_css: bool = True,
    ) -> str:
        """Export ``rendered`` to ``output_path``.

        Args:
            rendered: Output of the rendering pipeline
            output_path: Path to save HTML file
            query: Question shown above the answer (optional)
            include_css: Include citation highlighting CSS

        Returns:
            Path to created HTML file

        Raises:
            ConversionError: If writing fails
        """
        logger.info(f"Exporting answer to HTML: {output_path}")

        try:
            html_doc = self.to_html(rendered, query=query, include_css=include_css)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(html_doc)

            logger.info(f"✓ HTML saved: {output_path}")
            return output_path

        except OSError as e:
            logger.error(f"HTML export failed: {e}")
            raise ConversionError(f"Failed to export HTML: {e}")

    def to_html(self, rendered: RenderedResult, query: Optional[str] = None, include_css: bool = True) -> str:
        answer = rendered.answer_html or f'<p class="empty-state">{NO_RESULTS_MESSAGE}</p>'
        heading = f"<h2 class=\"query\">{escape_html(query)}</h2>" if query else ""
        style = f"<style>{self._get_citation_css()}</style>" if include_css else ""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(query) if query else "Search Answer"}</title>
    {style}
</head>
<body>
    <div class="layout">
        <main class="answer">
            {heading}
            <div class="answer-text">{answer}</div>
        </main>
        <aside class="sidebar open" data-view="citations">
            <h3>Sources</h3>
            {render_sidebar_html(rendered.sidebar_entries)}
        </aside>
    </div>
</body>
</html>"""

    def _get_citation_css(self) -> str:
        """CSS for answers, citation markers and the sources sidebar."""
        return """
        body {
            font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
            line-height: 1.6;
            color: #1f2933;
            margin: 0;
        }

        .layout {
            display: flex;
            gap: 2rem;
            max-width: 1200px;
            margin: 0 auto;
            padding: 2rem;
        }

        .answer {
            flex: 2;
        }

        .sidebar {
            flex: 1;
            border-left: 1px solid #d9e2ec;
            padding-left: 1.5rem;
        }

        .cited-text {
            border-bottom: 1px dotted #829ab1;
        }

        .cited-text.highlighted {
            background-color: #fff3bf;
        }

        .citation-marker {
            color: #2f6fed;
            font-size: 0.7em;
            margin-left: 1px;
            cursor: pointer;
        }

        .citation-marker.highlighted {
            font-weight: bold;
        }

        .citation-sources {
            padding-left: 0;
            list-style: none;
        }

        .citation-item {
            margin-bottom: 0.75rem;
            padding: 0.5rem;
            border-radius: 4px;
        }

        .citation-item.highlighted {
            background-color: #e6f0ff;
        }

        .citation-number {
            font-weight: bold;
            margin-right: 0.4rem;
        }

        .citation-preview {
            display: block;
            color: #627d98;
            font-size: 0.9em;
        }

        .citation-full-text {
            white-space: pre-wrap;
            font-size: 0.9em;
        }

        details[open] .citation-preview {
            display: none;
        }

        .empty-state {
            color: #829ab1;
            font-style: italic;
        }

        pre, code {
            font-family: "SFMono-Regular", Menlo, monospace;
            background-color: #f0f4f8;
            border-radius: 3px;
        }
        """
