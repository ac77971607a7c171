# quizify/config/settings.py
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ================= DATABASE =================
    DATABASE_URL: str = "sqlite:///./data/quizify.db"

    # ================= LLM / AI =================
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "llama-3.1-8b-instant"
    LLM_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_TEMPERATURE: float = 0.4

    # ================= APP =================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True
    FRONTEND_URL: Optional[str] = None

    # ================= UPLOADS =================
    MAX_UPLOAD_SIZE_MB: int = 100
    SUBJECT_MIN_LENGTH: int = 3
    SUBJECT_MAX_LENGTH: int = 100

    # ================= QUESTION GEN =================
    MCQS_PER_PAGE: int = 5

    # ================= PAGE CLASSIFIER =================
    EDGE_PAGE_WINDOW: int = 5
    STRUCTURAL_PAGE_MAX_CHARS: int = 600
    MARKER_PAGE_SLACK_CHARS: int = 150
    HEADING_PAGE_MAX_CHARS: int = 150
    MIN_CONTENT_CHARS: int = 400

    # ================= QUICK QUIZ =================
    QUICK_QUIZ_SIZE: int = 100

    # ================= IN-PROCESS REGISTRIES =================
    SESSION_IDLE_MINUTES: int = 120
    MAX_LIVE_SESSIONS: int = 500
    FINISHED_JOB_RETENTION_MINUTES: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
