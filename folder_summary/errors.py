"""Exception hierarchy for folder-summary runs."""

from __future__ import annotations


class FolderSummaryError(RuntimeError):
    """Base class for every failure raised by folder-summary."""


class FileAccessError(FolderSummaryError):
    """Raised when a source file or its timestamp cannot be read."""


class ParseError(FolderSummaryError):
    """Raised when a fully parsed language contains malformed syntax."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        location = f" at line {line}, column {column}" if line is not None else ""
        super().__init__(f"{message}{location}")
        self.line = line
        self.column = column


class UnsupportedFileError(FolderSummaryError):
    """Raised when no registered analyzer accepts a file."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No suitable analyzer found for file: {path}")
        self.path = path


class CacheError(FolderSummaryError):
    """Raised when the analysis cache cannot be persisted."""


class EnrichmentError(FolderSummaryError):
    """Raised when the text-generation service fails to produce a summary."""


class SchedulingError(FolderSummaryError):
    """Raised when a worker task could not be scheduled or joined."""


class FileAnalysisError(FolderSummaryError):
    """Labels a failure with the file whose analysis produced it."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


__all__ = [
    "CacheError",
    "EnrichmentError",
    "FileAccessError",
    "FileAnalysisError",
    "FolderSummaryError",
    "ParseError",
    "SchedulingError",
    "UnsupportedFileError",
]
