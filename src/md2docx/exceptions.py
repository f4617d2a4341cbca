"""Exceptions raised by md2docx.

Exception Hierarchy
-------------------
- Md2DocxError (base exception)

  - PackageWriteError (directory creation / archive write failures)
  - RelationshipError (dangling or duplicate relationship IDs)
  - ImageLoadError (image source could not be read or decoded)

"""

from __future__ import annotations


class Md2DocxError(Exception):
    """Base exception class for all md2docx errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class PackageWriteError(Md2DocxError):
    """Raised when the .docx package cannot be written.

    Parameters
    ----------
    message : str
        Description of the step that failed
    path : str, optional
        Destination path of the package
    original_error : Exception, optional
        The underlying I/O error

    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        original_error: Exception | None = None,
    ):
        if path:
            message = f"{message}: {path}"
        if original_error is not None:
            message = f"{message} ({original_error})"
        super().__init__(message, original_error)
        self.path = path


class RelationshipError(Md2DocxError):
    """Raised when a run or hyperlink references an unknown relationship ID,
    or when two relationships share an ID."""

    def __init__(self, message: str, rel_id: str | None = None):
        super().__init__(message)
        self.rel_id = rel_id


class ImageLoadError(Md2DocxError):
    """Raised when an image source cannot be loaded."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.source = source
