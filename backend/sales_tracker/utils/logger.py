"""
Logging Configuration

Structured logging setup using structlog for consistent, JSON-formatted logs
throughout the Sales Tracker backend.
"""

import logging
import sys
from typing import Any, Dict, Optional
from pathlib import Path

import structlog
from structlog.stdlib import LoggerFactory
from pythonjsonlogger import jsonlogger

from sales_tracker.core.config import get_settings

# Get settings
settings = get_settings()


def configure_logging() -> None:
    """Configure structured logging for the application."""

    structlog.configure(
        processors=[
            # Add log level and timestamp
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),

            # Add context
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,

            # JSON formatting for production, pretty for development
            structlog.dev.ConsoleRenderer() if settings.DEBUG
            else structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    # File handler for persistent logging
    if settings.LOG_TO_FILE and not settings.DEBUG:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        file_handler = logging.FileHandler(logs_dir / "app.log")
        file_handler.setFormatter(
            jsonlogger.JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s"
            )
        )

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance
    """
    return structlog.get_logger(name)


def log_scraping_activity(
    scraper_name: str,
    action: str,
    url: Optional[str] = None,
    user_id: Optional[str] = None,
    **kwargs
) -> None:
    """
    Log scraping activity.

    Args:
        scraper_name: Name of the site recipe in use
        action: Action being performed
        url: URL being scraped
        user_id: Owner of the session used, if any
        **kwargs: Additional scraping data
    """
    logger = get_logger("scraping")
    logger.info(
        "Scraping activity",
        scraper=scraper_name,
        action=action,
        url=url,
        user_id=user_id,
        **kwargs
    )


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    **kwargs
) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Additional context about the error
        user_id: User ID associated with the error
        **kwargs: Additional error data
    """
    logger = get_logger("errors")
    logger.error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context or {},
        user_id=user_id,
        **kwargs
    )


def log_security_event(
    event_type: str,
    user_id: Optional[str] = None,
    success: bool = True,
    **kwargs
) -> None:
    """
    Log security-related event such as a session upload or purge.

    Args:
        event_type: Type of security event
        user_id: User ID involved
        success: Whether the event was successful
        **kwargs: Additional security data
    """
    logger = get_logger("security")

    log_level = "info" if success else "warning"
    getattr(logger, log_level)(
        "Security event",
        event_type=event_type,
        user_id=user_id,
        success=success,
        **kwargs
    )


# Configure logging on import
configure_logging()
