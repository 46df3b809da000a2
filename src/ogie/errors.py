"""
Error taxonomy for ogie.

Internal components raise these exceptions. The public entry points in
``ogie.extractor`` catch them and hand them back inside a failure result.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Machine readable failure categories."""

    FETCH_ERROR = "FETCH_ERROR"
    TIMEOUT = "TIMEOUT"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_URL = "INVALID_URL"
    NO_HTML = "NO_HTML"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"


class OgieError(Exception):
    """Base class for every error produced by ogie."""

    default_code = ErrorCode.FETCH_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.url = url
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r}, url={self.url!r})"


class InvalidUrlError(OgieError):
    """Raised when a URL is malformed, uses a foreign scheme or targets a private network."""

    default_code = ErrorCode.INVALID_URL

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.INVALID_URL, url, cause)


class FetchError(OgieError):
    """HTTP or network failure."""

    default_code = ErrorCode.FETCH_ERROR

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message, code or self.default_code, url, cause)
        self.status_code = status_code


class FetchTimeoutError(FetchError):
    """A single HTTP attempt exceeded its deadline."""

    default_code = ErrorCode.TIMEOUT

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, url, cause=cause, code=ErrorCode.TIMEOUT)


class RedirectLimitError(FetchError):
    """The redirect chain was longer than ``max_redirects``."""

    default_code = ErrorCode.REDIRECT_LIMIT

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, url, code=ErrorCode.REDIRECT_LIMIT)


class ParseError(OgieError):
    """HTML could not be turned into metadata."""

    default_code = ErrorCode.PARSE_ERROR

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.PARSE_ERROR, url, cause)


def is_ogie_error(error: object) -> bool:
    return isinstance(error, OgieError)
