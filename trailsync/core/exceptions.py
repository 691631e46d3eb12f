"""Consolidated exception hierarchy for the sync job.

This module provides an exception hierarchy that:
1. Categorizes errors by collaborator (vendor API, object storage, record store)
2. Carries structured details for logging and notifications
3. Lets the orchestrator decide between continuing and aborting a run
"""

from __future__ import annotations

from typing import Any


class TrailSyncError(Exception):
    """Base exception for all application-specific errors."""

    default_message: str = "An unexpected error occurred"
    default_error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Validation Errors
class ValidationError(TrailSyncError):
    default_message = "Validation failed"
    default_error_code = "VALIDATION_ERROR"


class InvalidImageSizeError(ValidationError):
    """Raised when requested thumbnail dimensions are invalid.

    This exception is raised when image dimensions are invalid:
    - Not integers
    - Negative dimensions
    - Zero dimensions
    """

    default_message = "Invalid image size"
    default_error_code = "INVALID_IMAGE_SIZE"

    def __init__(
        self,
        message: str | None = None,
        *,
        image_size: tuple[int, int] | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.image_size = image_size
        self.reason = reason
        details = kwargs.pop("details", {}) or {}
        if image_size is not None:
            details["image_size"] = list(image_size)
        if reason is not None:
            details["reason"] = reason
        super().__init__(message, details=details, **kwargs)


# External Service Errors
class ExternalServiceError(TrailSyncError):
    default_message = "External service temporarily unavailable"
    default_error_code = "SERVICE_UNAVAILABLE"

    def __init__(
        self,
        message: str | None = None,
        *,
        service_name: str | None = None,
        original_error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        self.service_name = service_name
        self.original_error = original_error
        details = kwargs.pop("details", {}) or {}
        if service_name:
            details["service"] = service_name
        if original_error is not None:
            details["original_error_type"] = type(original_error).__name__
        super().__init__(message, details=details, **kwargs)


class SpypointError(ExternalServiceError):
    default_message = "Spypoint API request failed"
    default_error_code = "SPYPOINT_ERROR"

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, service_name="spypoint", **kwargs)


class SpypointAPIError(SpypointError):
    """Raised when the Spypoint API answers with a non-success status.

    Carries the HTTP status and the vendor-supplied error message taken from
    the ``{"error": ..., "http_status": ...}`` response body.
    """

    default_message = "Spypoint API returned an error"
    default_error_code = "SPYPOINT_API_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int,
        vendor_message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.vendor_message = vendor_message
        details = kwargs.pop("details", {}) or {}
        details["http_status"] = status_code
        if vendor_message:
            details["vendor_message"] = vendor_message
        if message is None:
            message = f"http_status {status_code}, error {vendor_message or ''}".rstrip()
        super().__init__(message, details=details, **kwargs)


class SpypointTransportError(SpypointError):
    """Raised when a Spypoint request never produced a response.

    Covers timeouts, DNS failures and connection resets.
    """

    default_message = "Spypoint API unreachable"
    default_error_code = "SPYPOINT_TRANSPORT_ERROR"


class ObjectStorageError(ExternalServiceError):
    default_message = "Object storage upload failed"
    default_error_code = "OBJECT_STORAGE_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        bucket: str | None = None,
        path: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if bucket:
            details["bucket"] = bucket
        if path:
            details["path"] = path
        super().__init__(message, service_name="object_storage", details=details, **kwargs)


class RecordStoreError(ExternalServiceError):
    default_message = "Record store temporarily unavailable"
    default_error_code = "RECORD_STORE_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        collection: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if collection:
            details["collection"] = collection
        super().__init__(message, service_name="postgresql", details=details, **kwargs)


# Internal Errors
class InternalError(TrailSyncError):
    default_message = "An internal error occurred"
    default_error_code = "INTERNAL_ERROR"


class ConfigurationError(InternalError):
    default_message = "Configuration error"
    default_error_code = "CONFIGURATION_ERROR"


class SyncAbortedError(InternalError):
    """Raised when a sync run cannot continue at all.

    Only authentication and camera enumeration failures abort a run; every
    other failure is contained to a camera or a photo.
    """

    default_message = "Sync run aborted"
    default_error_code = "SYNC_ABORTED"

    def __init__(
        self,
        message: str | None = None,
        *,
        stage: str,
        original_error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        self.stage = stage
        self.original_error = original_error
        details = kwargs.pop("details", {}) or {}
        details["stage"] = stage
        super().__init__(message, details=details, **kwargs)
