from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    CONFLICT = "CONFLICT"
    ILLEGAL_STATE = "ILLEGAL_STATE"


@dataclass(frozen=True)
class ServiceError:
    """Failed outcome of a service call. Services return it instead of raising;
    the API layer turns it into an HTTP response."""

    kind: ErrorKind
    detail: str

    @property
    def retryable(self) -> bool:
        # A taken slot may be retried with another slot; nothing else changes on retry
        return self.kind is ErrorKind.CONFLICT


def not_found(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, detail)


def invalid_input(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.INVALID_INPUT, detail)


def conflict(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, detail)


def illegal_state(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.ILLEGAL_STATE, detail)
