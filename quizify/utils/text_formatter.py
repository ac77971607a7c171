import re
import html
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class TextFormatter:
    """
    Renders the lightweight markdown the model writes (notes and explanations)
    into a small, escaped HTML fragment.

    Supported: **bold** and *bold*, "- " / "* " bullet lists, "1. " numbered
    lists, and paragraphs separated by blank lines. Single line breaks inside a
    paragraph become <br />.
    """

    def __init__(self):
        self.bold_patterns = [
            re.compile(r'\*\*(.+?)\*\*'),
            re.compile(r'\*([^*\s][^*]*?)\*'),
        ]
        self.block_separator = re.compile(r'\n\s*\n')
        self.bullet_pattern = re.compile(r'^[-*]\s+')
        self.numbered_pattern = re.compile(r'^\d+\.\s+')
        self.divider_pattern = re.compile(r'^-{3,}$')

    def to_html(self, text: Optional[str]) -> str:
        """
        Convert text to HTML

        Args:
            text: Markdown-like text, may be None

        Returns:
            HTML fragment; empty string for empty input
        """
        if not text or not text.strip():
            return ""

        normalized = text.replace('\r\n', '\n').replace('\r', '\n')
        blocks = self.block_separator.split(normalized)

        output = []
        for block in blocks:
            lines = [line.strip() for line in block.split('\n') if line.strip()]
            if not lines:
                continue
            output.append(self._render_block(lines))

        return ''.join(output)

    def _render_block(self, lines: List[str]) -> str:
        if len(lines) == 1 and self.divider_pattern.match(lines[0]):
            return '<hr />'

        if all(self.bullet_pattern.match(line) for line in lines):
            items = [self._inline(self.bullet_pattern.sub('', line, count=1)) for line in lines]
            return '<ul>' + ''.join(f'<li>{item}</li>' for item in items) + '</ul>'

        if all(self.numbered_pattern.match(line) for line in lines):
            items = [self._inline(self.numbered_pattern.sub('', line, count=1)) for line in lines]
            return '<ol>' + ''.join(f'<li>{item}</li>' for item in items) + '</ol>'

        return '<p>' + '<br />'.join(self._inline(line) for line in lines) + '</p>'

    def _inline(self, text: str) -> str:
        escaped = html.escape(text, quote=False)
        for pattern in self.bold_patterns:
            escaped = pattern.sub(r'<strong>\1</strong>', escaped)
        return escaped


text_formatter = TextFormatter()
