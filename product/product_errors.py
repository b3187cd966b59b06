"""
Error types raised while loading and querying the product catalog.

Two families matter to callers: ``CatalogImportError`` for I/O-level failures
(missing or unreadable files, anything that is not a parse problem) and
``ParseError`` for content-level failures (wrong column count, bad numbers,
unknown content types, malformed query lines). Both remember where the failure
happened so the driver can report it.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for every error raised by the product catalog."""

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: int = -1,
        filename: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.line_number = line_number
        self.filename = filename
        self.cause = cause

    def with_location(self, line_number: int, filename: Optional[str]):
        """Fill in the line number and file name if they are not known yet."""
        if self.line_number < 0:
            self.line_number = line_number
        if self.filename is None:
            self.filename = filename
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.filename is not None:
            parts.append(f"file [{self.filename}]")
        if self.line_number >= 0:
            parts.append(f"line number [{self.line_number}]")
        if self.line is not None:
            parts.append(f"line [{self.line}]")
        if self.cause is not None:
            parts.append(f"caused by: {self.cause}")
        return "; ".join(parts)


class CatalogImportError(CatalogError):
    """Raised when an input file cannot be opened or read."""


class ParseError(CatalogError):
    """Raised when a line does not have the expected format."""


class AccessDeniedError(CatalogError):
    """Raised when a restricted catalog operation gets an unusable access token."""
