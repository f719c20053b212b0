# Overview: Result type returned by every public service operation.

"""
Explicit success/failure results for service operations.

Services raise OperationError subclasses internally; @service_operation is the
single boundary that rolls back the session and turns the failure into a
Result. Routes never see domain exceptions, only Results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Generic, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ERROR_CLASSES, ErrorKind, OperationError
from ..extensions import db

T = TypeVar("T")


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, details: dict | None = None) -> "Result[T]":
        return cls(error=Failure(kind=kind, message=message, details=details or {}))

    def unwrap(self) -> T:
        """Return the value or raise the failure as an OperationError (used by CLI and tests)."""
        if self.error is not None:
            raise ERROR_CLASSES[self.error.kind](self.error.message, self.error.details)
        return self.value


def service_operation(func):
    """
    Run a service function as one transaction and return a Result.

    - OperationError -> rollback, failure with the error's kind
    - IntegrityError -> rollback, CONFLICT (unique keys raced past a pre-check)
    - SQLAlchemyError -> rollback, logged, STORE_ERROR with a generic message
    - anything else -> rollback, re-raised
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> Result[Any]:
        try:
            value = func(*args, **kwargs)
        except OperationError as exc:
            db.session.rollback()
            return Result.failure(exc.kind, exc.message, exc.details)
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning("Integrity conflict in %s", func.__name__)
            return Result.failure(ErrorKind.CONFLICT, "Conflicting record already exists")
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Persistence failure in %s", func.__name__)
            return Result.failure(ErrorKind.STORE_ERROR, "Internal server error")
        except Exception:
            db.session.rollback()
            raise
        return Result.success(value)

    return wrapper
