import re
import logging
from dataclasses import dataclass
from typing import Optional

from quizify.config.settings import settings

logger = logging.getLogger(__name__)

# Front/back-matter headings that mark a page as structural rather than content
STRUCTURAL_MARKERS = (
    "table of contents",
    "contents",
    "index",
    "preface",
    "foreword",
    "appendix",
    "bibliography",
    "references",
    "glossary",
    "acknowledgments",
    "acknowledgements",
    "errata",
    "list of figures",
    "list of tables",
)

HEADING_PATTERN = re.compile(
    r"^(chapter|part|section)\s+(\d+|[ivxlcdm]+)\b",
    re.IGNORECASE
)

REASON_NO_TEXT = "no text content"
REASON_STRUCTURAL = "non-content/structural page"
REASON_HEADING = "chapter/section heading page"
REASON_TOO_SHORT = "too short"


@dataclass(frozen=True)
class ClassificationResult:
    skip: bool
    reason: Optional[str] = None


CONTENT = ClassificationResult(skip=False)


class ContentClassifier:
    """
    Heuristic filter deciding whether a page is worth quizzing.

    False positives and negatives are expected; callers must cope with a
    "content" page that still yields nothing.
    """

    def __init__(
        self,
        edge_page_window: int = None,
        structural_max_chars: int = None,
        marker_slack_chars: int = None,
        heading_max_chars: int = None,
        min_content_chars: int = None
    ):
        self.edge_page_window = settings.EDGE_PAGE_WINDOW if edge_page_window is None else edge_page_window
        self.structural_max_chars = settings.STRUCTURAL_PAGE_MAX_CHARS if structural_max_chars is None else structural_max_chars
        self.marker_slack_chars = settings.MARKER_PAGE_SLACK_CHARS if marker_slack_chars is None else marker_slack_chars
        self.heading_max_chars = settings.HEADING_PAGE_MAX_CHARS if heading_max_chars is None else heading_max_chars
        self.min_content_chars = settings.MIN_CONTENT_CHARS if min_content_chars is None else min_content_chars

    def classify(self, page_text: str, page_number: int, total_pages: int) -> ClassificationResult:
        """
        Classify a page

        Args:
            page_text: Extracted page text
            page_number: 1-based page number
            total_pages: Number of pages in the document

        Returns:
            ClassificationResult with skip flag and reason
        """
        text = (page_text or "").strip()
        if not text:
            return ClassificationResult(skip=True, reason=REASON_NO_TEXT)

        lowered = text.lower()
        length = len(text)

        if (
            self._is_edge_page(page_number, total_pages)
            and length < self.structural_max_chars
            and any(marker in lowered for marker in STRUCTURAL_MARKERS)
        ):
            return ClassificationResult(skip=True, reason=REASON_STRUCTURAL)

        for marker in STRUCTURAL_MARKERS:
            if lowered.startswith(marker) and length <= len(marker) + self.marker_slack_chars:
                return ClassificationResult(skip=True, reason=REASON_STRUCTURAL)

        if HEADING_PATTERN.match(text) and length < self.heading_max_chars:
            return ClassificationResult(skip=True, reason=REASON_HEADING)

        if length < self.min_content_chars:
            return ClassificationResult(skip=True, reason=REASON_TOO_SHORT)

        return CONTENT

    def _is_edge_page(self, page_number: int, total_pages: int) -> bool:
        return (
            page_number <= self.edge_page_window
            or page_number > total_pages - self.edge_page_window
        )
