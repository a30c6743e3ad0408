# timebill/core/exceptions.py
from typing import Dict, Any, Optional
from fastapi import status


class BusinessException(Exception):
    """Base exception for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "business_error"

    def __init__(
        self, message: str, code: str = None, details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


# Resource-related exceptions
class ResourceNotFoundException(BusinessException):
    """Exception raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "resource_not_found"


class ClientNotFoundException(ResourceNotFoundException):
    """Exception raised when a client id does not resolve."""

    error_code = "client_not_found"


class InvalidReferenceException(BusinessException):
    """Exception raised when a foreign id (e.g. client_id) does not resolve."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_reference"


class DuplicateResourceException(BusinessException):
    """Exception raised when attempting to create a duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "resource_already_exists"


class ValidationException(BusinessException):
    """Exception raised when input validation fails."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "validation_error"


# Billing exceptions
class InvalidClientException(BusinessException):
    """Exception raised when a bill is requested for an unknown client."""

    error_code = "invalid_client"


class InvalidEntryException(BusinessException):
    """Exception raised when a selected time entry cannot be billed."""

    error_code = "invalid_entry"


class AlreadyBilledException(InvalidEntryException):
    """Exception raised when a selected time entry already belongs to a bill."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "already_billed"


class EmptySelectionException(BusinessException):
    """Exception raised when a bill would contain no time entries."""

    error_code = "empty_selection"


class NoUnbilledEntriesException(BusinessException):
    """Exception raised when a date range holds no unbilled time entries."""

    error_code = "no_unbilled_entries"


class BilledEntryLockedException(BusinessException):
    """Exception raised when editing a time entry that is part of a bill."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "billed_entry_locked"


class InvalidStatusTransitionException(BusinessException):
    """Exception raised for a bill status change the lifecycle does not allow."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "invalid_status_transition"


# External Service exceptions
class ExternalServiceException(BusinessException):
    """Exception raised when an external service call fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "external_service_error"


class ServiceUnavailableException(ExternalServiceException):
    """Exception raised when an external service is not reachable at all."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "service_unavailable"


class ServiceTimeoutException(BusinessException):
    """Exception raised when an external service times out."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "service_timeout"


