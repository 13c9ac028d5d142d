"""Custom exceptions for the Mastery Analytics engine."""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    DATABASE = "database"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    BUSINESS_LOGIC = "business_logic"


class MasteryAnalyticsException(Exception):
    """Base exception for the Mastery Analytics engine."""

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.user_message = user_message or self._generate_user_message()
        self.recoverable = recoverable

    def _generate_user_message(self) -> str:
        """Generate user-friendly error message."""
        if self.category == ErrorCategory.DATABASE:
            return "We're having trouble accessing your practice data. Please try again shortly."
        elif self.category == ErrorCategory.VALIDATION:
            return "Please check your input and try again."
        elif self.category == ErrorCategory.NOT_FOUND:
            return "We couldn't find that learner."
        else:
            return "Something went wrong. Please try again or contact support if the problem persists."

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# Lookup Exceptions
class LearnerNotFoundException(MasteryAnalyticsException):
    """Raised when a learner id does not resolve."""

    def __init__(self, learner_id: int, **kwargs):
        super().__init__(
            message=f"Learner {learner_id} not found",
            error_code="LEARNER_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            **kwargs
        )
        self.details["learner_id"] = learner_id


# Database Exceptions
class DatabaseException(MasteryAnalyticsException):
    """Base exception for database errors."""

    def __init__(self, message: str, error_code: str = "DATABASE_ERROR", **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.DATABASE,
            **kwargs
        )


class DataIntegrityException(DatabaseException):
    """Exception for data integrity violations."""

    def __init__(self, table: str, constraint: str, **kwargs):
        super().__init__(
            message=f"Data integrity violation in table {table}: {constraint}",
            error_code="DATA_INTEGRITY_VIOLATION",
            severity=ErrorSeverity.HIGH,
            **kwargs
        )
        self.details.update({"table": table, "constraint": constraint})


# Validation Exceptions
class ValidationException(MasteryAnalyticsException):
    """Base exception for validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: str = "VALIDATION_ERROR",
        **kwargs
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            **kwargs
        )
        if field:
            self.details["field"] = field


class InvalidInputException(ValidationException):
    """Exception for invalid input data."""

    def __init__(self, field: str, value: Any, reason: str, **kwargs):
        super().__init__(
            message=f"Invalid value for {field}: {reason}",
            field=field,
            error_code="INVALID_INPUT",
            **kwargs
        )
        self.details.update({"value": value, "reason": reason})


# Configuration Exceptions
class ConfigurationException(MasteryAnalyticsException):
    """Base exception for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            **kwargs
        )
        if config_key:
            self.details["config_key"] = config_key
