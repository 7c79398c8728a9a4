"""
pknulms - client for the Pukyong National University LMS portal.

Logs in with a session cookie, scrapes the notification feed into typed
records, fetches notification contents and sends notes.
"""

from pathlib import Path

from pknulms.client import LMSClient, must
from pknulms.config import PortalConfig, Settings
from pknulms.errors import (
    LMSError,
    MalformedEnvelopeError,
    ParseError,
    PreconditionError,
    ProtocolError,
    TransportError,
)
from pknulms.model import Lecture, Notification

try:
    __version__ = (Path(__file__).resolve().parent / "VERSION").read_text(encoding="utf-8").strip()
except OSError:
    __version__ = "0.0.0"

__all__ = [
    "LMSClient",
    "must",
    "PortalConfig",
    "Settings",
    "LMSError",
    "MalformedEnvelopeError",
    "ParseError",
    "PreconditionError",
    "ProtocolError",
    "TransportError",
    "Lecture",
    "Notification",
]
