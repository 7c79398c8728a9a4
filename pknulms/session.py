"""
Session transport.

One requests.Session per client: it owns the cookie jar that carries the
portal login between calls. Requests never follow redirects (the login flow
must stay inspectable) and are never retried.

The portal serves a certificate that does not validate, so verification is
switched off for the portal origin only. Everything else keeps the default
verification.
"""

from __future__ import annotations

import logging
import ssl

import requests
import urllib3
from requests.adapters import HTTPAdapter

from pknulms.config import PortalConfig

logger = logging.getLogger(__name__)


class UnsafeTLSAdapter(HTTPAdapter):
    """HTTPAdapter whose pools skip certificate and hostname checks."""

    def __init__(self, *args, **kwargs):
        self._ssl_context = ssl.create_default_context()
        self._ssl_context.check_hostname = False
        self._ssl_context.verify_mode = ssl.CERT_NONE
        super().__init__(*args, **kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["ssl_context"] = self._ssl_context
        pool_kwargs["assert_hostname"] = False
        return super().init_poolmanager(connections, maxsize, block, **pool_kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self._ssl_context
        proxy_kwargs["assert_hostname"] = False
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def create_session(config: PortalConfig) -> requests.Session:
    """
    Create the session used for every portal call.

    The relaxed TLS adapter is mounted on the portal origin only; requests to
    other hosts go through the session's default adapters.
    """
    session = requests.Session()

    session.mount(config.origin + "/", UnsafeTLSAdapter(max_retries=0))
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    logger.debug("TLS verification disabled for %s", config.origin)

    session.headers.update(
        {
            "User-Agent": config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        }
    )
    return session


def is_portal_url(url: str, config: PortalConfig) -> bool:
    return url == config.origin or url.startswith(config.origin + "/")


def make_request(
    session: requests.Session,
    method: str,
    url: str,
    config: PortalConfig,
    **kwargs,
) -> requests.Response:
    """
    Send one request through `session`.

    Redirects are never followed and nothing is retried. Exceptions raised by
    requests (connection errors, timeouts, ...) propagate unchanged. The
    response is returned as-is whatever its status; callers close it
    (it is a context manager).

    Args:
        session: session created by create_session().
        method: "GET" or "POST".
        url: absolute URL.
        config: portal configuration (timeout, origin).
        **kwargs: passed to session.request (data, params, headers, ...).
    """
    kwargs.setdefault("timeout", config.timeout)
    if is_portal_url(url, config):
        kwargs.setdefault("verify", False)

    logger.debug("%s %s", method, url)
    response = session.request(method, url, allow_redirects=False, **kwargs)
    logger.debug("%s %s -> %s", method, url, response.status_code)
    return response
