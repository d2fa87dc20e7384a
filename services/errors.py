from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"

    @property
    def status(self) -> int:
        return _STATUS[self]


_STATUS = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.INTERNAL_FAILURE: 500,
}


@dataclass(frozen=True)
class ServiceError:
    """A client-safe failure: a classification plus a message with no internals."""
    kind: ErrorKind
    message: str

    @property
    def status(self) -> int:
        return self.kind.status


def validation_failed(message: str) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION_FAILED, message)


def not_found(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def unauthorized(message: str) -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)


def conflict(message: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message)


def upstream_failure(message: str) -> ServiceError:
    return ServiceError(ErrorKind.UPSTREAM_FAILURE, message)
