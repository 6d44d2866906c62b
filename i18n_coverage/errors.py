"""Error conditions surfaced by the coverage engine."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable error codes callers map to their own presentation."""
    REPO_NOT_FOUND = "REPO_NOT_FOUND"
    NO_I18N_FILES = "NO_I18N_FILES"
    LANGUAGE_NOT_FOUND = "LANGUAGE_NOT_FOUND"
    NO_BASE_LANGUAGE = "NO_BASE_LANGUAGE"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_STRUCTURE = "INVALID_STRUCTURE"
    INVALID_PATH = "INVALID_PATH"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UNAVAILABLE = "UNAVAILABLE"


class CoverageError(Exception):
    """Base class for every error raised by the coverage engine."""

    code: ErrorCode = ErrorCode.UNAVAILABLE
    status_code: int = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code.value)
        self.message = message or self.code.value


class InvalidRequestError(CoverageError):
    """Required identifying parameters are missing or malformed."""
    code = ErrorCode.INVALID_PATH
    status_code = 400


class RepoNotFoundError(CoverageError):
    """The repository (or a listed path) does not exist upstream."""
    code = ErrorCode.REPO_NOT_FOUND
    status_code = 404


class NoI18nFilesFoundError(CoverageError):
    """No candidate path yielded a recognizable i18n layout."""
    code = ErrorCode.NO_I18N_FILES
    status_code = 404


class LanguageNotFoundError(CoverageError):
    """The requested language is not among the detected languages."""
    code = ErrorCode.LANGUAGE_NOT_FOUND
    status_code = 404


class NoBaseLanguageError(CoverageError):
    """No base language with at least one key could be established."""
    code = ErrorCode.NO_BASE_LANGUAGE
    status_code = 404


class InvalidStructureError(CoverageError):
    """The upstream content does not have the expected shape."""
    code = ErrorCode.INVALID_STRUCTURE
    status_code = 404


class RateLimitedError(CoverageError):
    """Every credential in the pool is out of quota."""
    code = ErrorCode.RATE_LIMITED
    status_code = 429

    def __init__(self, message: Optional[str] = None, reset_at: Optional[float] = None):
        super().__init__(message)
        self.reset_at = reset_at


class GatewayError(CoverageError):
    """Upstream failure that retries could not recover (or must not retry)."""
    code = ErrorCode.UNAVAILABLE
    status_code = 502

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RemoteFileNotFoundError(GatewayError):
    """A file read targeted a path that does not exist."""
    code = ErrorCode.FILE_NOT_FOUND
    status_code = 404
