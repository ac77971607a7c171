import fitz  # PyMuPDF
import pdfplumber
from typing import List, Optional, Tuple
import io
import logging

from quizify.config.settings import settings
from quizify.core.exceptions import PDFExtractionError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class PDFTextDocument:
    """
    An opened PDF held in memory. Page text is extracted lazily, one page at a time.

    pdfplumber is used when it can parse the file; PyMuPDF is the fallback.
    """

    def __init__(self, pdf_bytes: bytes):
        self._plumber_pdf = None
        self._fitz_doc = None
        self.extraction_method = None

        try:
            self._plumber_pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
            self.page_count = len(self._plumber_pdf.pages)
            self.extraction_method = "pdfplumber"
        except Exception as e:
            logger.warning(f"pdfplumber could not open PDF, falling back to PyMuPDF: {e}")
            self._close_plumber()
            try:
                self._fitz_doc = fitz.open(stream=pdf_bytes, filetype="pdf")
                self.page_count = len(self._fitz_doc)
                self.extraction_method = "pymupdf_fallback"
            except Exception as fallback_error:
                logger.error(f"Fallback PDF open also failed: {fallback_error}")
                raise PDFExtractionError(
                    f"Could not read the PDF file: {fallback_error}"
                ) from fallback_error

        if self.page_count == 0:
            self.close()
            raise PDFExtractionError("PDF has no pages")

        logger.info(f"Opened PDF with {self.page_count} pages using {self.extraction_method}")

    def extract_page_text(self, page_number: int) -> str:
        """
        Extract the plain text of one page

        Args:
            page_number: 1-based page number

        Returns:
            All text runs of the page joined by single spaces
        """
        if not 1 <= page_number <= self.page_count:
            raise ValueError(f"Page {page_number} is out of range 1..{self.page_count}")

        try:
            if self._plumber_pdf is not None:
                text = self._plumber_pdf.pages[page_number - 1].extract_text()
            else:
                text = self._fitz_doc[page_number - 1].get_text()
        except Exception as e:
            logger.error(f"Error extracting page {page_number}: {e}")
            raise PDFExtractionError(f"Could not extract text from page {page_number}: {e}") from e

        return normalize_page_text(text)

    def close(self):
        self._close_plumber()
        if self._fitz_doc is not None:
            self._fitz_doc.close()
            self._fitz_doc = None

    def _close_plumber(self):
        if self._plumber_pdf is not None:
            self._plumber_pdf.close()
            self._plumber_pdf = None

    def __enter__(self) -> "PDFTextDocument":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def normalize_page_text(text: Optional[str]) -> str:
    """Collapse every run of whitespace (including line breaks) to one space"""
    if not text:
        return ""
    return " ".join(text.split())


class PDFIngestion:
    def __init__(self, max_size_mb: int = None):
        self.max_size_mb = settings.MAX_UPLOAD_SIZE_MB if max_size_mb is None else max_size_mb

    def validate_pdf(self, pdf_bytes: bytes, filename: Optional[str] = None) -> Tuple[bool, List[str]]:
        """
        Validate an uploaded PDF before any processing

        Args:
            pdf_bytes: Raw file content
            filename: Original file name, if known

        Returns:
            Tuple of (is_valid, issues)
        """
        issues = []

        if filename and not filename.lower().endswith(".pdf"):
            issues.append("File must be a PDF")
            return False, issues

        if not pdf_bytes:
            issues.append("File is empty")
            return False, issues

        if len(pdf_bytes) > self.max_size_mb * 1024 * 1024:
            issues.append(f"File too large (max {self.max_size_mb}MB)")
            return False, issues

        if not pdf_bytes.lstrip()[:4].startswith(PDF_MAGIC):
            issues.append("File does not look like a PDF document")
            return False, issues

        return True, issues

    def open_document(self, pdf_bytes: bytes) -> PDFTextDocument:
        """
        Open a PDF for page-by-page extraction

        Raises:
            PDFExtractionError: The bytes are not a readable PDF
        """
        if not pdf_bytes:
            raise PDFExtractionError("PDF file is empty")
        return PDFTextDocument(pdf_bytes)
