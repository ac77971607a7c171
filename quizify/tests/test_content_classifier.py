import pytest

from quizify.core.content_classifier import (
    ContentClassifier,
    REASON_HEADING,
    REASON_NO_TEXT,
    REASON_STRUCTURAL,
    REASON_TOO_SHORT,
)
from quizify.tests.fakes import LONG_PROSE


class TestContentClassifier:
    def setup_method(self):
        """Setup test environment"""
        self.classifier = ContentClassifier(
            edge_page_window=5,
            structural_max_chars=600,
            marker_slack_chars=150,
            heading_max_chars=150,
            min_content_chars=400
        )

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n", None])
    def test_empty_page_is_skipped(self, text):
        result = self.classifier.classify(text, 10, 50)

        assert result.skip
        assert result.reason == REASON_NO_TEXT

    def test_short_table_of_contents_is_skipped(self):
        text = "Table of Contents".ljust(50, ".")

        result = self.classifier.classify(text, 2, 50)

        assert result.skip
        assert result.reason == REASON_STRUCTURAL

    def test_structural_marker_near_edge_with_trailing_entries(self):
        text = "Preface " + "This edition thanks the many readers who wrote in. " * 5

        result = self.classifier.classify(text, 49, 50)

        assert result.skip
        assert result.reason == REASON_STRUCTURAL

    def test_marker_mid_document_only_skipped_when_page_starts_with_it(self):
        text = "Appendix " + "x" * 100
        assert self.classifier.classify(text, 25, 50).reason == REASON_STRUCTURAL

        mentions_index = "The index of refraction " + LONG_PROSE
        assert not self.classifier.classify(mentions_index, 25, 50).skip

    def test_bare_chapter_heading_is_skipped(self):
        result = self.classifier.classify("Chapter 4 Cell Biology", 20, 50)

        assert result.skip
        assert result.reason == REASON_HEADING

    def test_roman_numeral_part_heading_is_skipped(self):
        result = self.classifier.classify("Part IV: Ecology", 20, 50)

        assert result.skip
        assert result.reason == REASON_HEADING

    def test_chapter_opening_with_prose_is_kept(self):
        text = ("Chapter 4 " + LONG_PROSE * 3)[:2000]

        result = self.classifier.classify(text, 20, 50)

        assert len(text) == 2000
        assert not result.skip
        assert result.reason is None

    def test_zero_edge_window_disables_edge_rule(self):
        text = "See the references below. " + "word " * 90

        assert self.classifier.classify(text, 1, 50).reason == REASON_STRUCTURAL
        assert not ContentClassifier(edge_page_window=0).classify(text, 1, 50).skip

    def test_short_page_is_skipped(self):
        text = "Some sentence about mitochondria. " * 5

        result = self.classifier.classify(text, 20, 50)

        assert result.skip
        assert result.reason == REASON_TOO_SHORT

    def test_content_page_is_kept(self):
        result = self.classifier.classify(LONG_PROSE, 20, 50)

        assert not result.skip

    def test_long_edge_page_mentioning_references_is_kept(self):
        text = LONG_PROSE + " See the references for further reading."

        result = self.classifier.classify(text, 1, 50)

        assert len(text) >= 600
        assert not result.skip
