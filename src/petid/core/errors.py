from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from petid.core.models import WorkflowKind

NETWORK_MESSAGE = "No response from the server. Please check your connection."
INVALID_TYPE_MESSAGE = "Invalid file type. Only JPEG and PNG are allowed."
UNKNOWN_SERVER_ERROR = "Unknown error"


class ErrorKind(str, Enum):
    INVALID_FILE_TYPE = "invalid_file_type"
    MISSING_INPUT = "missing_input"
    SERVER = "server_error"
    NETWORK = "network_error"
    CLIENT = "client_error"
    INVALID_RESPONSE = "invalid_response"

    @property
    def is_validation(self) -> bool:
        """Detected locally, before any request is made."""
        return self in (ErrorKind.INVALID_FILE_TYPE, ErrorKind.MISSING_INPUT)

    @property
    def is_server(self) -> bool:
        return self in (ErrorKind.SERVER, ErrorKind.INVALID_RESPONSE)


@dataclass(frozen=True)
class WorkflowError:
    """A classified failure plus the message shown to the user verbatim."""
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class ValidationError(WorkflowError):
    pass


def invalid_file_type() -> ValidationError:
    return ValidationError(ErrorKind.INVALID_FILE_TYPE, INVALID_TYPE_MESSAGE)


def missing_input(kind: WorkflowKind) -> ValidationError:
    return ValidationError(ErrorKind.MISSING_INPUT, f"Please select an image to {kind.value}.")


def server_error(kind: WorkflowKind, detail: Optional[str]) -> WorkflowError:
    return WorkflowError(ErrorKind.SERVER, f"Error {kind.verb} animal: {detail or UNKNOWN_SERVER_ERROR}")


def invalid_response(kind: WorkflowKind, detail: str) -> WorkflowError:
    return WorkflowError(ErrorKind.INVALID_RESPONSE, f"Error {kind.verb} animal: {detail}")


def network_error() -> WorkflowError:
    return WorkflowError(ErrorKind.NETWORK, NETWORK_MESSAGE)


def client_error(exc: BaseException) -> WorkflowError:
    return WorkflowError(ErrorKind.CLIENT, f"Error: {exc}")


def image_unavailable(status: int) -> WorkflowError:
    return WorkflowError(ErrorKind.SERVER, f"Could not load match image (HTTP {status}).")


T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: WorkflowError


Outcome = Union[Ok, Err]
