"""
Configuration.

Two records live here:

- PortalConfig: every fixed value the portal expects on the wire
  (endpoints, empty form fields, encoding, markers). Keeping them in one
  place makes the integration contract auditable.
- Settings: user/runtime settings read from the environment (or a .env file),
  e.g. credentials for the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from dotenv import load_dotenv

from pknulms.errors import PreconditionError
from pknulms.model import ASSIGNMENT_TYPE


DEFAULT_BASE_URL = "https://lms.pknu.ac.kr"


@dataclass(frozen=True)
class PortalConfig:
    base_url: str = DEFAULT_BASE_URL

    # Endpoints (relative to base_url)
    login_path: str = "/ilos/lo/login.acl"
    logout_path: str = "/ilos/lo/logout.acl"
    listing_path: str = "/ilos/mp/mypage_main_list.acl"
    prefetch_path: str = "/ilos/st/course/eclass_room2.acl"
    note_path: str = "/ilos/message/insert_pop.acl"

    encoding: str = "utf-8"

    # Required by the login form, always sent empty
    login_extra_fields: Dict[str, str] = field(
        default_factory=lambda: {"returnURL": "", "challenge": "", "response": ""}
    )
    login_failure_marker: str = "로그인 정보가 일치하지 않습니다."

    # Listing markup
    assignment_type: str = ASSIGNMENT_TYPE
    submitted_marker: str = "제출"

    # Appended to RECV_IDs
    recipient_delimiter: str = "^"
    content_suffix: str = "&s=menu&acl="

    page_size: int = 20
    min_count: int = 8

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    # None = no client-side timeout, callers impose their own deadlines
    timeout: Optional[float] = None

    def url(self, path: str) -> str:
        return self.base_url.rstrip("/") + path

    @property
    def origin(self) -> str:
        return self.base_url.rstrip("/")


@dataclass
class Settings:
    """
    Runtime settings, usually read from environment variables:

        LMS_BASE_URL   portal origin (default https://lms.pknu.ac.kr)
        LMS_ID         portal user id
        LMS_PASSWORD   portal password
        LMS_TIMEOUT    request timeout in seconds (unset = none)
        LMS_LOG_LEVEL  logging level name (default WARNING)
    """

    base_url: str = DEFAULT_BASE_URL
    user_id: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, dotenv: bool = True) -> "Settings":
        """
        Build settings from the environment.

        A .env file in the working directory is loaded first (it never
        overrides variables that are already set).
        """
        if dotenv:
            load_dotenv()
        env = os.environ if environ is None else environ

        timeout_raw = (env.get("LMS_TIMEOUT") or "").strip()
        timeout = None
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError as e:
                raise PreconditionError(f"LMS_TIMEOUT must be a number, got {timeout_raw!r}") from e

        return cls(
            base_url=(env.get("LMS_BASE_URL") or DEFAULT_BASE_URL).strip(),
            user_id=env.get("LMS_ID") or None,
            password=env.get("LMS_PASSWORD") or None,
            timeout=timeout,
            log_level=(env.get("LMS_LOG_LEVEL") or "WARNING").strip().upper(),
        )

    def portal_config(self, base: Optional[PortalConfig] = None) -> PortalConfig:
        return replace(base or PortalConfig(), base_url=self.base_url, timeout=self.timeout)
