"""
Custom Exceptions for Sales Tracker

Business logic exceptions with user-friendly messages and proper error codes.
The scraper exceptions carry the exact text shown to the person who pasted
the job URL, so the orchestrator can surface them without rewording.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum

from fastapi import status


TIMEOUT_USER_MESSAGE = (
    "Request timed out. The page took too long to load. "
    "Please try again or enter details manually."
)
NAVIGATION_USER_MESSAGE = "Could not load the page. Please check the URL or enter details manually."
INVALID_URL_USER_MESSAGE = "Invalid URL. Please check the URL and try again."


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    EXTERNAL_SERVICE = "external_service"
    DATABASE = "database"
    NETWORK = "network"
    SYSTEM = "system"
    CONFIGURATION = "configuration"


class BaseApplicationException(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent error handling
    and user-friendly error responses.
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details or {}
        self.suggested_action = suggested_action
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "suggested_action": self.suggested_action,
        }


# Validation Exceptions
class ValidationException(BaseApplicationException):
    """Exception for input validation errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "VALIDATION_ERROR")
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_400_BAD_REQUEST,
            **kwargs
        )


class InvalidSessionDataException(ValidationException):
    """Exception for an uploaded session that carries no usable cookies."""

    def __init__(self, reason: str = "Expected a non-empty array of cookie objects", **kwargs):
        super().__init__(
            message=f"Invalid cookies format. {reason}.",
            error_code="INVALID_SESSION_DATA",
            suggested_action="Export your cookies again and re-upload them",
            **kwargs
        )


# Database Exceptions
class DatabaseException(BaseApplicationException):
    """Exception for database errors."""

    def __init__(self, message: str = "Database operation failed", **kwargs):
        super().__init__(
            message=message,
            user_message="The session store is temporarily unavailable",
            error_code="DATABASE_ERROR",
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            suggested_action="Please try again later",
            **kwargs
        )


# Scraper Exceptions
class ScraperException(BaseApplicationException):
    """Base exception for job posting extraction failures."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.EXTERNAL_SERVICE)
        kwargs.setdefault("http_status", status.HTTP_502_BAD_GATEWAY)
        super().__init__(message=message, **kwargs)


class SessionRequiredException(ScraperException):
    """No stored session exists for a site that needs one."""

    def __init__(self, site: str = "linkedin", **kwargs):
        super().__init__(
            message=(
                "LinkedIn authentication required. "
                "Please upload your LinkedIn cookies at /linkedin-auth.html"
            ),
            error_code="SESSION_REQUIRED",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.MEDIUM,
            http_status=status.HTTP_424_FAILED_DEPENDENCY,
            details={"site": site},
            suggested_action="Upload a cookie export for this site",
            **kwargs
        )


class SessionExpiredException(ScraperException):
    """A stored session was sent but the site answered with a login page."""

    def __init__(self, reason: Optional[str] = None, site: str = "linkedin", **kwargs):
        message = "LinkedIn authentication expired or invalid."
        message += f" {reason}" if reason else " Please re-upload your LinkedIn cookies."
        super().__init__(
            message=message,
            error_code="SESSION_EXPIRED",
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.MEDIUM,
            http_status=status.HTTP_401_UNAUTHORIZED,
            details={"site": site},
            suggested_action="Re-upload a fresh cookie export",
            **kwargs
        )


class NavigationTimeoutException(ScraperException):
    """Navigation or a manual login wait exceeded its ceiling."""

    def __init__(self, operation: str, timeout: int, **kwargs):
        super().__init__(
            message=f"Timeout: {operation} exceeded {timeout}s",
            user_message=TIMEOUT_USER_MESSAGE,
            error_code="NAVIGATION_TIMEOUT",
            category=ErrorCategory.NETWORK,
            http_status=status.HTTP_504_GATEWAY_TIMEOUT,
            details={"operation": operation, "timeout": timeout},
            **kwargs
        )


class NavigationException(ScraperException):
    """The browser could not load the page."""

    def __init__(self, url: str, reason: str = "", **kwargs):
        super().__init__(
            message=f"Navigation failed for {url}: {reason}".rstrip(": "),
            user_message=NAVIGATION_USER_MESSAGE,
            error_code="NAVIGATION_FAILED",
            category=ErrorCategory.NETWORK,
            details={"url": url},
            **kwargs
        )


class InvalidUrlException(ScraperException):
    """The URL's host did not resolve."""

    def __init__(self, url: str, **kwargs):
        super().__init__(
            message=f"net::ERR_NAME_NOT_RESOLVED at {url}",
            user_message=INVALID_URL_USER_MESSAGE,
            error_code="INVALID_URL",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_400_BAD_REQUEST,
            details={"url": url},
            **kwargs
        )
