# Overview: Error taxonomy shared by services, results, and HTTP responses.

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    STORE_ERROR = "STORE_ERROR"


class OperationError(Exception):
    """
    Base for failures raised inside service operations.

    Never escapes a public service function: @service_operation converts it
    into a failed Result carrying the same kind and message.
    """
    kind: ErrorKind = ErrorKind.STORE_ERROR

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AuthenticationFailed(OperationError):
    """Credentials did not match any active employee."""
    kind = ErrorKind.AUTHENTICATION_FAILED


class AuthorizationDenied(OperationError):
    """Actor's role lacks the permission for the action."""
    kind = ErrorKind.AUTHORIZATION_DENIED


class NotFound(OperationError):
    """Entity missing from the actor's store (or owned by another store)."""
    kind = ErrorKind.NOT_FOUND


class ValidationError(OperationError):
    """400-level input problem."""
    kind = ErrorKind.VALIDATION


class ConflictError(OperationError):
    """409-level business rule conflict (e.g., duplicate SKU, terminal ticket)."""
    kind = ErrorKind.CONFLICT


class StoreError(OperationError):
    """Persistence failure; message is always generic."""
    kind = ErrorKind.STORE_ERROR


ERROR_CLASSES = {
    cls.kind: cls
    for cls in (AuthenticationFailed, AuthorizationDenied, NotFound, ValidationError, ConflictError, StoreError)
}
