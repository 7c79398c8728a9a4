"""
Exception types raised by the LMS client.

Transport failures are not wrapped: whatever requests raises reaches the
caller unchanged, TransportError is only an alias so callers can catch it
by a project name.
"""

from __future__ import annotations

from typing import Optional

import requests


TransportError = requests.RequestException


class LMSError(Exception):
    """Base class for every error raised by pknulms itself."""


class ProtocolError(LMSError):
    """
    The portal answered, but not the way the protocol requires
    (unexpected status code, server-signaled isError, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ParseError(LMSError):
    """
    The markup did not match what the extractor expects.

    `raw` holds the offending attribute/text so format drift can be diagnosed.
    """

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        if raw is not None:
            message = f"{message}: {raw!r}"
        super().__init__(message)
        self.raw = raw


class MalformedEnvelopeError(ProtocolError, ParseError):
    """A JSON {isError, message} envelope could not be decoded."""

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        ParseError.__init__(self, message, raw)
        self.message = str(self)
        self.status_code = None


class PreconditionError(LMSError, ValueError):
    """Arguments rejected before any request is sent."""
