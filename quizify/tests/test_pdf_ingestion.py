import fitz  # PyMuPDF
import pytest

from quizify.core.exceptions import PDFExtractionError
from quizify.core.pdf_ingestion import PDFIngestion, PDFTextDocument, normalize_page_text


def build_pdf(pages):
    """Render a small PDF with one text block per page"""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


class TestPDFTextDocument:
    def test_page_count_and_text(self):
        pdf_bytes = build_pdf(["Cells are the unit of life.", "", "Mitochondria make ATP."])

        with PDFTextDocument(pdf_bytes) as document:
            assert document.page_count == 3
            assert "Cells are the unit of life." in document.extract_page_text(1)
            assert document.extract_page_text(2) == ""
            assert "Mitochondria make ATP." in document.extract_page_text(3)

    def test_multiline_text_is_whitespace_joined(self):
        pdf_bytes = build_pdf(["First line\nSecond line"])

        with PDFTextDocument(pdf_bytes) as document:
            text = document.extract_page_text(1)

        assert "\n" not in text
        assert "First line" in text and "Second line" in text

    @pytest.mark.parametrize("page_number", [0, 2])
    def test_page_out_of_range(self, page_number):
        with PDFTextDocument(build_pdf(["Only page"])) as document:
            with pytest.raises(ValueError):
                document.extract_page_text(page_number)

    def test_garbage_bytes_raise_extraction_error(self):
        with pytest.raises(PDFExtractionError):
            PDFTextDocument(b"this is not a pdf at all")


class TestPDFIngestion:
    def setup_method(self):
        """Setup test environment"""
        self.ingestion = PDFIngestion(max_size_mb=1)

    def test_valid_pdf(self):
        is_valid, issues = self.ingestion.validate_pdf(build_pdf(["Hello"]), "notes.pdf")

        assert is_valid
        assert issues == []

    @pytest.mark.parametrize("pdf_bytes, filename, message", [
        (b"%PDF-1.4", "notes.docx", "File must be a PDF"),
        (b"", "notes.pdf", "File is empty"),
        (b"%PDF" + b"0" * (1024 * 1024), "notes.pdf", "File too large (max 1MB)"),
        (b"PK\x03\x04 zip", "notes.pdf", "File does not look like a PDF document"),
    ])
    def test_invalid_uploads(self, pdf_bytes, filename, message):
        is_valid, issues = self.ingestion.validate_pdf(pdf_bytes, filename)

        assert not is_valid
        assert issues == [message]

    def test_open_empty_document(self):
        with pytest.raises(PDFExtractionError):
            self.ingestion.open_document(b"")


class TestNormalizePageText:
    @pytest.mark.parametrize("raw, expected", [
        (None, ""),
        ("", ""),
        ("  a\n\nb\t c  ", "a b c"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_page_text(raw) == expected
