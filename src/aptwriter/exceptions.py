"""Error types raised by aptwriter."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Broad category of an aptwriter failure."""

    CONFIG = "config"
    INPUT = "input"
    FORMAT = "format"
    IO = "io"
    DIGEST = "digest"
    SIGNING = "signing"


class AptRepoError(Exception):
    """Any failure while building or signing a repository.

    Args:
        message: Human readable description of the failure
        kind: Category of the failure
        cause: The underlying exception, if any
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.IO, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ControlParseError(AptRepoError):
    """Raised when a control stanza violates the field or folding rules."""

    def __init__(self, message: str, line: int | None = None):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, kind=ErrorKind.FORMAT)
        self.line = line


class DigestError(AptRepoError):
    """Raised for unknown digest algorithms or unreadable digest input."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message, kind=ErrorKind.DIGEST, cause=cause)
