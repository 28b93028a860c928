"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class QueryExecutionException(RepositoryException):
    """
    Raised by an issue query executor when the storage backend fails.

    The query pipeline never interprets or retries these; they surface to the
    caller as "query execution failed".
    """

    def __init__(self, message: str = "query execution failed", details: Optional[dict] = None):
        super().__init__(message, details)


class CompilerInvariantError(DomainException):
    """
    Raised when a compiled filter's parameter list disagrees with the
    parameter slots in its predicate tree.

    This is a programming error, never a user input error.
    """


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class AuthenticationException(ApplicationException):
    """Exception when the caller identity is missing or malformed."""


class PermissionDeniedException(ApplicationException):
    """Exception when the caller may not access a resource."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)
