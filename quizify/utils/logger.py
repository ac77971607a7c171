import logging
import sys
from logging.handlers import RotatingFileHandler
from datetime import datetime
import os
import json
from typing import Dict, Any

from quizify.config.settings import settings

ROOT_LOGGER_NAME = "quizify"

# Attributes every LogRecord has; anything else was passed through ``extra``
_STANDARD_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
            "process": record.process,
            "thread": record.thread,
            "thread_name": record.threadName
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        for key, value in vars(record).items():
            if key not in _STANDARD_RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, ensure_ascii=False, default=str)


class CustomLogger:
    """Custom logger with structured logging"""

    @staticmethod
    def setup_logger(
        name: str = ROOT_LOGGER_NAME,
        level: str = None,
        log_to_file: bool = None,
        log_to_console: bool = True,
        log_dir: str = None
    ) -> logging.Logger:
        """
        Setup and configure logger

        Module loggers (``quizify.*``) propagate into the logger configured here.

        Args:
            name: Logger name
            level: Logging level
            log_to_file: Whether to log to file
            log_to_console: Whether to log to console
            log_dir: Directory for log files

        Returns:
            Configured logger
        """
        # Get log level from settings or default
        if level is None:
            level = settings.LOG_LEVEL
        if log_to_file is None:
            log_to_file = settings.LOG_TO_FILE

        log_level = getattr(logging, level.upper(), logging.INFO)

        # Create logger
        logger = logging.getLogger(name)
        logger.setLevel(log_level)

        # Clear existing handlers
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

        # Create formatters
        json_formatter = JSONFormatter()
        console_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # Console handler
        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(console_formatter)
            logger.addHandler(console_handler)

        # File handler
        if log_to_file:
            # Create logs directory if it doesn't exist
            log_dir = log_dir or settings.LOG_DIR
            os.makedirs(log_dir, exist_ok=True)

            # Application log file
            app_log_file = os.path.join(log_dir, "application.log")
            file_handler = RotatingFileHandler(
                app_log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(json_formatter)
            logger.addHandler(file_handler)

            # Error log file (only errors)
            error_log_file = os.path.join(log_dir, "error.log")
            error_handler = RotatingFileHandler(
                error_log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(json_formatter)
            logger.addHandler(error_handler)

        # Prevent propagation to root logger
        logger.propagate = False

        return logger

    @staticmethod
    def get_logger(name: str = None) -> logging.Logger:
        """
        Get logger instance

        Args:
            name: Logger name (defaults to the application logger)

        Returns:
            Logger instance
        """
        if name is None:
            name = ROOT_LOGGER_NAME

        return logging.getLogger(name)

    @staticmethod
    def log_with_context(
        logger: logging.Logger,
        level: str,
        message: str,
        context: Dict[str, Any] = None,
        **kwargs
    ):
        """
        Log message with context

        Args:
            logger: Logger instance
            level: Log level
            message: Log message
            context: Additional context data
            **kwargs: Additional fields
        """
        extra = {}
        if context:
            extra.update(context)
        extra.update(kwargs)

        # Keys that collide with LogRecord attributes would make logging raise
        extra = {
            (f"ctx_{key}" if key in _STANDARD_RECORD_ATTRS else key): value
            for key, value in extra.items()
        }

        logger.log(getattr(logging, level.upper(), logging.INFO), message, extra=extra or None)


# Convenience functions
def get_logger(name: str = None) -> logging.Logger:
    """Get logger instance"""
    return CustomLogger.get_logger(name)


# PDF ingestion logging
def log_ingestion(
    stage: str,
    status: str,
    details: Dict[str, Any] = None,
    **kwargs
):
    """Log PDF ingestion event"""
    context = {
        "processing_stage": stage,
        "processing_status": status
    }

    if details:
        context.update(details)
    context.update(kwargs)

    level = "WARNING" if status in ("failed", "skipped") else "INFO"
    CustomLogger.log_with_context(
        get_logger(f"{ROOT_LOGGER_NAME}.ingestion"),
        level,
        f"PDF ingestion {stage} - {status}",
        context
    )


# Quiz lifecycle logging
def log_quiz_event(
    quiz_id: str,
    stage: str,
    status: str,
    details: Dict[str, Any] = None,
    **kwargs
):
    """Log quiz lifecycle event"""
    context = {
        "quiz_id": quiz_id,
        "quiz_stage": stage,
        "quiz_status": status
    }

    if details:
        context.update(details)
    context.update(kwargs)

    CustomLogger.log_with_context(
        get_logger(f"{ROOT_LOGGER_NAME}.quiz"),
        "INFO",
        f"Quiz {stage} - {status}",
        context
    )
