"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from buganizer.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    QueryExecutionException,
    CompilerInvariantError,
    ValidationException,
    AuthenticationException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ConfigurationException,
    ExternalServiceException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "QueryExecutionException",
    "CompilerInvariantError",
    "ValidationException",
    "AuthenticationException",
    "PermissionDeniedException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "ExternalServiceException",
]
