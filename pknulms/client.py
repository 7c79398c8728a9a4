"""
LMS client.

    client = LMSClient()
    if client.login("201912345", "secret"):
        for n in client.get_notifications_by_page(1):
            print(n, client.get_notification_content(n))
        client.logout()

Every method is one synchronous round trip (two for get_notification_content)
on the client's own session. Do not share a client between threads.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from pknulms.config import PortalConfig
from pknulms.errors import LMSError, PreconditionError, ProtocolError, TransportError
from pknulms.model import Notification
from pknulms.parse import parse_envelope, parse_notifications, serialize_content
from pknulms.session import create_session, make_request

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _text(response: requests.Response, encoding: str) -> str:
    return response.content.decode(encoding, errors="replace")


class LMSClient:
    """Client for one logical portal user."""

    def __init__(
        self,
        config: Optional[PortalConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or PortalConfig()
        self.session = session if session is not None else create_session(self.config)

    def _post(self, path: str, data: Dict[str, str]) -> requests.Response:
        return make_request(self.session, "POST", self.config.url(path), self.config, data=data)

    # -- Authentication -----------------------------------------------------

    def login(self, user_id: str, password: str) -> bool:
        """
        Log in to the portal.

        Returns False for rejected credentials. A status other than 200 is
        a ProtocolError, not a credential failure.
        """
        data = dict(self.config.login_extra_fields)
        data["usr_id"] = user_id
        data["usr_pwd"] = password

        logger.info("Logging in as %s", user_id)
        with self._post(self.config.login_path, data) as resp:
            if resp.status_code != 200:
                raise ProtocolError(
                    f"Expected HTTP status code 200, got {resp.status_code}",
                    status_code=resp.status_code,
                )
            body = _text(resp, self.config.encoding)

        if self.config.login_failure_marker in body:
            logger.warning("Login rejected for %s", user_id)
            return False

        logger.info("Login successful for %s", user_id)
        return True

    def logout(self) -> None:
        with make_request(self.session, "GET", self.config.url(self.config.logout_path), self.config):
            pass
        logger.info("Logged out")

    # -- Notifications --------------------------------------------------------

    def get_notifications(self, start: int = 1, count: int = 20) -> List[Notification]:
        """
        Return `count` notifications starting at `start`.

        `start` is 1-based: the first notification is at offset 1.
        The portal misbehaves for fewer than 8 entries, so `count` must
        be >= 8.
        """
        if start < 1:
            raise PreconditionError(f"start must be >= 1, got {start}")
        if count < self.config.min_count:
            raise PreconditionError(f"count must be >= {self.config.min_count}, got {count}")

        data = {
            "start": str(start),
            "display": str(count),
            "GUBUN": "",
            "encoding": self.config.encoding,
        }
        with self._post(self.config.listing_path, data) as resp:
            html = _text(resp, self.config.encoding)

        notifications = parse_notifications(html, self.config)
        logger.info("Fetched %d notifications (start=%d, count=%d)", len(notifications), start, count)
        return notifications

    def get_notifications_by_page(self, page: int = 1) -> List[Notification]:
        """Return one page of notifications (page size 20)."""
        if page < 1:
            raise PreconditionError(f"page must be >= 1, got {page}")
        size = self.config.page_size
        return self.get_notifications((page - 1) * size + 1, size)

    # -- Content ----------------------------------------------------------------

    def _prefetch_article(self, lecture_key: str, return_uri: str) -> None:
        # Selects the lecture room server-side; the detail page is empty without it
        data = {
            "KJKEY": lecture_key,
            "returnURI": return_uri,
            "encoding": self.config.encoding,
        }
        with self._post(self.config.prefetch_path, data) as resp:
            parse_envelope(resp.content)

    def get_notification_content(self, notification: Notification) -> str:
        """
        Return the detail content of `notification` as HTML fragments
        joined by newlines ("" if the page has no content).
        """
        origin = self.config.origin
        link = notification.link
        return_uri = link[len(origin):] if link.startswith(origin) else link

        self._prefetch_article(notification.lecture.key, return_uri)

        url = link + self.config.content_suffix
        with make_request(self.session, "GET", url, self.config) as resp:
            html = _text(resp, self.config.encoding)

        return serialize_content(html)

    # -- Notes --------------------------------------------------------------------

    def send_note(self, recipient: str, title: str, content: str) -> None:
        """Send a note (portal message) to `recipient`."""
        data = {
            "TITLE": title,
            "RECV_IDs": recipient + self.config.recipient_delimiter,
            "CONTENT": content,
            "encoding": self.config.encoding,
        }
        with self._post(self.config.note_path, data) as resp:
            # The portal has not been seen to set isError here, still checked
            parse_envelope(resp.content)
        logger.info("Note sent to %s", recipient)


def must(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Call `func` and abort the program on any client error.

    For callers (scripts, the CLI) that prefer a fatal exit over handling
    errors: the error is logged and turned into SystemExit.
    """
    try:
        return func(*args, **kwargs)
    except (LMSError, TransportError) as e:
        logger.error("Aborting: %s", e)
        raise SystemExit(f"error: {e}") from e
