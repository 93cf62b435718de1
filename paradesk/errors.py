"""
Unified hierarchy of error types. These inherit from standard errors like
ValueError and FileExistsError but are more fine-grained.
"""

import sqlite3
from typing import Tuple, Type


class ParadeskError(ValueError):
    """Base class for paradesk runtime errors."""

    pass


class UnexpectedError(ParadeskError):
    """For unexpected errors or runtime check failures."""

    pass


class SelfExplanatoryError(ParadeskError):
    """Common errors that arise from 'normal' problems that are largely self-explanatory,
    i.e., no stack trace should be necessary when reporting to the user."""

    pass


class InvalidInput(SelfExplanatoryError):
    """Raised when the wrong kind of input is given to an operation."""

    pass


class FileExists(InvalidInput, FileExistsError):
    """Raised when a file already exists."""

    pass


class FileNotFound(InvalidInput, FileNotFoundError):
    """Raised when a file is not found."""

    pass


class InvalidFilename(InvalidInput):
    """Raised when a filename is invalid."""

    pass


class InvalidCommand(InvalidInput):
    """Raised when a command line is not valid."""

    pass


class RecordNotFound(InvalidInput):
    """Raised when a stored note, task list, or event does not exist."""

    pass


class InvalidState(SelfExplanatoryError):
    """Raised when the database or other system state is not valid for an operation."""

    pass


class SetupError(SelfExplanatoryError):
    """Raised when something in the environment isn't set up right."""

    pass


NONFATAL_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    SelfExplanatoryError,
    FileNotFoundError,
    IOError,
    sqlite3.OperationalError,
)
"""Exceptions that are not fatal and usually don't merit a full stack trace."""


def is_fatal(exception: Exception) -> bool:
    for e in NONFATAL_EXCEPTIONS:
        if isinstance(exception, e):
            return False
    return True


## Tests


def test_is_fatal():
    assert not is_fatal(InvalidInput("bad"))
    assert not is_fatal(FileNotFound("missing.md"))
    assert not is_fatal(RecordNotFound("task list 3"))
    assert is_fatal(UnexpectedError("boom"))
    assert is_fatal(KeyError("x"))
    assert isinstance(FileExists("a"), FileExistsError)
