"""
Error handling utilities for the CloudMart Lambda handlers.

This module defines the service exception hierarchy shared by every layer,
the mapping from error codes to HTTP status codes, and the helpers that turn
an exception into the JSON error body returned by the API.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.handlers.utils.observability import logger, metrics, tracer


class ErrorSeverity(str, Enum):
    """Error severity levels for classification."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = "VALIDATION"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    SECURITY = "SECURITY"


class BaseServiceError(Exception):
    """Base exception class for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.BUSINESS_LOGIC,
        retry_after: Optional[int] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.retry_after = retry_after
        self.user_message = user_message or message
        self.error_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "retry_after": self.retry_after,
        }


class ValidationError(BaseServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
        )
        self.details = details or []


class BadRequestError(BaseServiceError):
    """Raised when a request breaks a business rule (stock, status, duplicates)."""

    def __init__(self, message: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.BUSINESS_LOGIC,
        )


class ResourceNotFoundError(BaseServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"{resource_type} not found with id: {resource_id}",
            error_code="RESOURCE_NOT_FOUND",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.BUSINESS_LOGIC,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AuthenticationError(BaseServiceError):
    """Raised when the caller cannot be authenticated."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_FAILED",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.SECURITY,
        )


class AccessDeniedError(BaseServiceError):
    """Raised when an authenticated caller lacks permission."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            message=message,
            error_code="ACCESS_DENIED",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.SECURITY,
        )


class FileUploadError(BaseServiceError):
    """Raised when an uploaded file is rejected or cannot be stored."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="FILE_UPLOAD_ERROR",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
        )


class ExternalServiceError(BaseServiceError):
    """Raised when external service calls fail."""

    def __init__(
        self,
        message: str,
        service_name: str,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
        retry_after: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.EXTERNAL_SERVICE,
            retry_after=retry_after,
            user_message="A required service is temporarily unavailable. Please try again later.",
        )
        self.service_name = service_name


STATUS_MAPPING = {
    "VALIDATION_ERROR": 400,
    "BAD_REQUEST": 400,
    "FILE_UPLOAD_ERROR": 400,
    "AUTHENTICATION_FAILED": 401,
    "ACCESS_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "CONDITIONAL_CHECK_FAILED": 409,
    "EXTERNAL_SERVICE_ERROR": 502,
    "THROTTLING_ERROR": 503,
}


def get_http_status_code(error: BaseServiceError) -> int:
    """Get appropriate HTTP status code for error."""
    return STATUS_MAPPING.get(error.error_code, 500)


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""
    metrics.add_metric(name="ErrorCount", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name=f"Error{error.category.value}Count", unit=MetricUnit.Count, value=1)

    tracer.put_annotation("error_code", error.error_code)
    tracer.put_metadata("error_details", error.to_dict())

    log = logger.error if error.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logger.warning
    log("Service error occurred", extra={
        "error_id": error.error_id,
        "error_code": error.error_code,
        "error_severity": error.severity.value,
        "error_category": error.category.value,
        "error_message": error.message,
    })


def format_error_response(
    status_code: int,
    message: str,
    path: Optional[str] = None,
    details: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build the JSON error body returned to API clients."""
    body: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
        "path": path,
    }
    if details:
        body["details"] = details
    return body
