import threading
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from quizify.config.settings import settings
from quizify.core.exceptions import QuizNotFoundError, SessionNotFoundError
from quizify.core.quiz_session import QuizSession
from quizify.db.store import QuizStore
from quizify.schemas.quiz_schema import Quiz
from quizify.services.question_bank_service import QuestionBankService

logger = logging.getLogger(__name__)


class SessionService:
    """
    Keeps the live quiz sessions of this process, keyed by session id.

    Clients can leave without ending their session, so sessions idle for longer
    than ``idle_minutes`` are dropped, and past ``max_sessions`` the least
    recently used ones go first. Sessions with a call in flight are never dropped.
    """

    def __init__(
        self,
        store: QuizStore,
        question_bank: QuestionBankService,
        elaborator=None,
        idle_minutes: Optional[int] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.store = store
        self.question_bank = question_bank
        self.elaborator = elaborator
        self.idle_timeout = timedelta(
            minutes=settings.SESSION_IDLE_MINUTES if idle_minutes is None else idle_minutes
        )
        self.max_sessions = settings.MAX_LIVE_SESSIONS if max_sessions is None else max_sessions
        self.clock = clock
        # session id -> session, least recently used first
        self._sessions: "OrderedDict[str, QuizSession]" = OrderedDict()
        self._last_seen: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def start_for_quiz(self, quiz_id: str, resume_latest: bool = False) -> QuizSession:
        """
        Start a session over a stored quiz

        With ``resume_latest`` the session opens on the quiz's latest attempt in
        its finished state, ready for review or retake.
        """
        quiz = self.store.get_quiz_by_id(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")

        latest = self.store.get_latest_attempt_for_quiz(quiz_id) if resume_latest else None
        if latest is not None:
            session = QuizSession.review(quiz, latest, store=self.store, elaborator=self.elaborator)
        else:
            session = QuizSession(quiz, store=self.store, elaborator=self.elaborator)
        return self._register(session)

    def start_quick_quiz(self, desired_count: Optional[int] = None) -> QuizSession:
        quiz = self.question_bank.build_quick_quiz(desired_count)
        return self.start_for_ephemeral(quiz)

    def start_for_ephemeral(self, quiz: Quiz) -> QuizSession:
        return self._register(QuizSession(quiz, store=None, elaborator=self.elaborator))

    def _register(self, session: QuizSession) -> QuizSession:
        with self._lock:
            self._evict_locked()
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = self.clock()
        logger.info(f"Started session {session.session_id} for quiz {session.quiz.id}")
        return session

    def _evict_locked(self):
        now = self.clock()
        expired = [
            sid for sid, session in self._sessions.items()
            if now - self._last_seen[sid] > self.idle_timeout and not session.busy
        ]
        for sid in expired:
            self._drop_locked(sid)

        # Make room for the session about to be registered
        for sid, session in list(self._sessions.items()):
            if len(self._sessions) < self.max_sessions:
                break
            if not session.busy:
                self._drop_locked(sid)
                expired.append(sid)

        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s), {len(self._sessions)} live")

    def _drop_locked(self, session_id: str) -> bool:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def get(self, session_id: str) -> QuizSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                self._last_seen[session_id] = self.clock()
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    @property
    def live_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def end(self, session_id: str) -> bool:
        with self._lock:
            return self._drop_locked(session_id)

    def end_sessions_for_quiz(self, quiz_id: str) -> int:
        """Drop live sessions over a quiz that has been deleted"""
        with self._lock:
            stale = [sid for sid, s in self._sessions.items() if s.quiz.id == quiz_id]
            for sid in stale:
                self._drop_locked(sid)
        return len(stale)
