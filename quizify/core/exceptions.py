"""Error types raised across the ingestion, curation and session layers."""


class QuizifyError(Exception):
    """Base class for all application errors"""


class PDFExtractionError(QuizifyError):
    """The uploaded document could not be opened or read"""


class NoContentGeneratedError(QuizifyError):
    """The document was readable but no page produced any question"""

    def __init__(self, message: str = "No content generated from the document", page_issues=None):
        super().__init__(message)
        self.page_issues = list(page_issues or [])


class LLMServiceError(QuizifyError):
    """Transport or API failure while talking to the language model"""


class MalformedResponseError(QuizifyError):
    """The language model answered, but not in the required shape"""


class PageGenerationError(QuizifyError):
    """Question generation failed for a single page"""

    def __init__(self, page_number: int, message: str):
        super().__init__(f"Page {page_number}: {message}")
        self.page_number = page_number
        self.reason = message


class CurationError(QuizifyError):
    """Best-subset selection could not be used"""


class ElaborationError(QuizifyError):
    """A richer explanation could not be produced"""


class PersistenceError(QuizifyError):
    """The quiz store rejected or failed an operation"""


class QuizNotFoundError(PersistenceError):
    """No quiz exists with the requested id"""


class EmptyQuestionBankError(QuizifyError):
    """There are no stored questions to build a quick quiz from"""


class SessionStateError(QuizifyError):
    """An action is not allowed in the session's current state"""


class AnswerValidationError(SessionStateError):
    """The answer submitted for a question is not acceptable"""


class SessionBusyError(SessionStateError):
    """A save or elaboration call is still in flight"""


class SessionNotFoundError(QuizifyError):
    """No live session exists with the requested id"""
