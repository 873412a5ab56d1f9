#!/usr/bin/env python3
"""Error taxonomy shared by the extraction and feed pipelines.

Every pipeline failure is raised as a ReaderError subclass carrying the
boundary error code, so api.py can convert it without string matching.
"""

from typing import List, Optional, Tuple


class ErrorCode:
    """Codes exposed in ``{"success": false, "code": ...}`` responses."""

    MISSING_URL = "MISSING_URL"
    INVALID_URL = "INVALID_URL"
    DNS_ERROR = "DNS_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    JSDOM_ERROR = "JSDOM_ERROR"
    READABILITY_FAILED = "READABILITY_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    FETCH_ERROR = "FETCH_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"


class ReaderError(Exception):
    """Base class for classified pipeline failures."""

    code = ErrorCode.EXTRACTION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(ReaderError):
    """Malformed URL or a scheme other than http/https."""

    code = ErrorCode.INVALID_URL


class NetworkError(ReaderError):
    """Connection failure or timeout after the retry budget was spent."""

    code = ErrorCode.EXTRACTION_FAILED


class DnsError(NetworkError):
    """Host name could not be resolved (e.g. EAI_AGAIN)."""

    code = ErrorCode.DNS_ERROR


class HttpError(ReaderError):
    """Non-2xx response on the final attempt."""

    code = ErrorCode.HTTP_ERROR

    def __init__(self, status: int, reason: Optional[str] = None):
        self.status = status
        self.reason = reason or ""
        super().__init__(f"HTTP {status}: {self.reason}" if self.reason else f"HTTP {status}")


class ParseError(ReaderError):
    """Markup could not be tokenized into a document."""

    code = ErrorCode.JSDOM_ERROR


class ReadabilityFailedError(ReaderError):
    """No candidate cleared the content threshold."""

    code = ErrorCode.READABILITY_FAILED


class ExtractionError(ReaderError):
    """Unclassified failure inside the extraction pipeline."""

    code = ErrorCode.EXTRACTION_FAILED


class FetchError(ReaderError):
    """Every proxy (or fetch path) failed.

    Attributes:
        failures: (proxy label, reason) for each strategy that was tried, in order.
    """

    code = ErrorCode.FETCH_ERROR

    def __init__(self, message: str = "All proxy fetches failed", failures: Optional[List[Tuple[str, str]]] = None):
        super().__init__(message)
        self.failures = failures or []


class NoValidItemsError(ReaderError):
    """Feed parsed but no item had both a title and a link."""

    code = ErrorCode.FETCH_ERROR


__all__ = [
    "ErrorCode",
    "ReaderError",
    "InvalidUrlError",
    "NetworkError",
    "DnsError",
    "HttpError",
    "ParseError",
    "ReadabilityFailedError",
    "ExtractionError",
    "FetchError",
    "NoValidItemsError",
]
