#src/domain/common/errors.py

"""
Domain-specific error types for standardized error handling.

Every failure the application reports carries a stable ``ErrorCode`` so that
callers, tests and presentation surfaces can branch on the kind of failure
without parsing the message.
"""
from enum import Enum
from typing import Optional, Dict, Any


class ErrorCategory(Enum):
    """Categories of errors in the application."""
    VALIDATION = "Validation"
    CONFIGURATION = "Configuration"
    PLATFORM = "Platform"
    CAPTURE = "Capture"
    OCR = "OCR"
    TRANSLATION = "Translation"
    RESOURCE = "Resource"
    UI = "UI"
    UNKNOWN = "Unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


class ErrorCode(Enum):
    """Stable discriminants for every failure kind."""
    INVALID_REGION = "INVALID_REGION"
    REGION_OUT_OF_BOUNDS = "REGION_OUT_OF_BOUNDS"
    DISPLAY_NOT_FOUND = "DISPLAY_NOT_FOUND"
    NO_PRIMARY_DISPLAY = "NO_PRIMARY_DISPLAY"
    DISPLAY_ENUMERATION_FAILED = "DISPLAY_ENUMERATION_FAILED"
    CAPTURE_FAILED = "CAPTURE_FAILED"
    CAPTURE_ALREADY_IN_PROGRESS = "CAPTURE_ALREADY_IN_PROGRESS"
    CAPTURE_CANCELLED = "CAPTURE_CANCELLED"
    TRANSLATION_ALREADY_IN_PROGRESS = "TRANSLATION_ALREADY_IN_PROGRESS"
    OCR_FAILED = "OCR_FAILED"
    TRANSLATION_FAILED = "TRANSLATION_FAILED"
    INVALID_REQUEST = "INVALID_REQUEST"
    HISTORY_ERROR = "HISTORY_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UI_ERROR = "UI_ERROR"
    UNKNOWN = "UNKNOWN"


class DomainError:
    """
    Base class for domain-specific errors.

    This provides structured error information that can be used
    for consistent error handling, logging, and user feedback.
    """

    def __init__(self,
                 message: str,
                 category: ErrorCategory = ErrorCategory.UNKNOWN,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None,
                 inner_error: Optional[Exception] = None):
        """
        Initialize a domain error.

        Args:
            message: Human-readable error message
            category: Error category
            severity: Error severity
            code: Stable error code for programmatic handling
            details: Optional additional error details
            inner_error: Optional original exception
        """
        self.message = message
        self.category = category
        self.severity = severity
        self.code = code
        self.details = details or {}
        self.inner_error = inner_error

    @staticmethod
    def from_exception(ex: Exception,
                       category: ErrorCategory = ErrorCategory.UNKNOWN,
                       severity: ErrorSeverity = ErrorSeverity.ERROR) -> 'DomainError':
        """
        Create a domain error from an exception.

        A ``DomainException`` is unwrapped so its original error survives.

        Args:
            ex: The exception
            category: Error category
            severity: Error severity

        Returns:
            A DomainError instance
        """
        if isinstance(ex, DomainException):
            return ex.error
        return DomainError(
            message=str(ex),
            category=category,
            severity=severity,
            inner_error=ex
        )

    def __str__(self) -> str:
        """String representation of the error."""
        return f"{self.category.value} Error [{self.code.value}]: {self.message}"


class DomainException(Exception):
    """Exception carrying a DomainError, for APIs that need a raisable object."""

    def __init__(self, error: DomainError):
        super().__init__(str(error))
        self.error = error

    @property
    def code(self) -> ErrorCode:
        return self.error.code


class ValidationError(DomainError):
    """Error for validation failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 inner_error: Optional[Exception] = None,
                 code: ErrorCode = ErrorCode.INVALID_REQUEST):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code=code,
            details=details,
            inner_error=inner_error
        )


class InvalidRegionError(ValidationError):
    """Structurally malformed region (negative coordinate, non-positive size)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details, code=ErrorCode.INVALID_REGION)


class RegionOutOfBoundsError(ValidationError):
    """Structurally valid region that exceeds the resolved display's bounds."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details, code=ErrorCode.REGION_OUT_OF_BOUNDS)


class ConfigurationError(DomainError):
    """Error for configuration issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            code=ErrorCode.CONFIGURATION_ERROR,
            details=details,
            inner_error=inner_error
        )


class PlatformError(DomainError):
    """Error for display enumeration or other platform interaction issues."""

    def __init__(self, message: str, code: ErrorCode,
                 details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.PLATFORM,
            severity=ErrorSeverity.ERROR,
            code=code,
            details=details,
            inner_error=inner_error
        )


class DisplayNotFoundError(PlatformError):
    """An explicit display id has no match in the current enumeration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DISPLAY_NOT_FOUND, details=details)


class NoPrimaryDisplayError(PlatformError):
    """The platform reports no primary display."""

    def __init__(self, message: str = "No primary display found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.NO_PRIMARY_DISPLAY, details=details)


class DisplayEnumerationError(PlatformError):
    """The platform's enumeration call itself failed."""

    def __init__(self, message: str = "Failed to enumerate displays", inner_error: Optional[Exception] = None):
        super().__init__(message, ErrorCode.DISPLAY_ENUMERATION_FAILED, inner_error=inner_error)


class CaptureError(DomainError):
    """Base class for errors raised by the capture workflow."""

    def __init__(self, message: str, code: ErrorCode,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CAPTURE,
            severity=severity,
            code=code,
            details=details,
            inner_error=inner_error
        )


class CaptureFailedError(CaptureError):
    """No capture source, or the chosen source yielded no image payload."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 inner_error: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CAPTURE_FAILED, details=details, inner_error=inner_error)


class CaptureAlreadyInProgressError(CaptureError):
    def __init__(self, message: str = "Capture already in progress", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CAPTURE_ALREADY_IN_PROGRESS,
                         severity=ErrorSeverity.WARNING, details=details)


class CaptureCancelledError(CaptureError):
    def __init__(self, message: str = "Capture cancelled"):
        super().__init__(message, ErrorCode.CAPTURE_CANCELLED, severity=ErrorSeverity.INFO)


class OcrError(DomainError):
    """Error for OCR engine failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.OCR,
            severity=ErrorSeverity.ERROR,
            code=ErrorCode.OCR_FAILED,
            details=details,
            inner_error=inner_error
        )


class TranslationServiceError(DomainError):
    """Error for translation engine failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.TRANSLATION,
            severity=ErrorSeverity.ERROR,
            code=ErrorCode.TRANSLATION_FAILED,
            details=details,
            inner_error=inner_error
        )


class TranslationAlreadyInProgressError(DomainError):
    def __init__(self, message: str = "Translation already in progress"):
        super().__init__(
            message=message,
            category=ErrorCategory.TRANSLATION,
            severity=ErrorSeverity.WARNING,
            code=ErrorCode.TRANSLATION_ALREADY_IN_PROGRESS
        )


class HistoryError(DomainError):
    """Error for history persistence failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.RESOURCE,
            severity=ErrorSeverity.ERROR,
            code=ErrorCode.HISTORY_ERROR,
            details=details,
            inner_error=inner_error
        )


class UIError(DomainError):
    """Error for UI-related issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.UI,
            severity=ErrorSeverity.WARNING,
            code=ErrorCode.UI_ERROR,
            details=details,
            inner_error=inner_error
        )
