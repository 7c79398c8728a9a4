"""
Parsing (portal responses -> structured records).

- Listing HTML  -> list of Notification
- Detail HTML   -> content string (HTML fragments joined by newlines)
- JSON envelope -> dict, or an error when the server says isError

Important rules (DO NOT CHANGE):
- The listing repeats two <li> per entry, only the second one carries data
- One malformed entry aborts the whole listing (no partial results)
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from pknulms.config import PortalConfig
from pknulms.errors import MalformedEnvelopeError, ParseError, ProtocolError
from pknulms.model import Lecture, Notification


DUE_RE = re.compile(r"^(.+?) \| 마감일\((.+?)\)$")
ID_RE = re.compile(r"=(\d+)$")
JS_STRING_RE = re.compile(r"'(.*?)'")

LISTING_ITEM_SELECTOR = ".resultBox li:nth-of-type(2)"
CONTENT_SELECTOR = ".bbsview .textviewer"


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def split_type_title(text: str) -> Tuple[str, str]:
    """
    Split the anchor text "과제: Homework 3" into ("과제", "Homework 3").
    """
    parts = text.strip().split(": ", 1)
    if len(parts) != 2:
        raise ParseError("Missing ': ' separator in site-link text", text)
    return parts[0], parts[1]


def extract_notification_id(href: str) -> Optional[int]:
    """
    Trailing digits of the href query string ("...&ARTL_NUM=1234" -> 1234).
    Returns None when the href does not end with "=<digits>".
    """
    match = ID_RE.search(href)
    if not match:
        return None
    return int(match.group(1))


def extract_lecture_key(onclick: str) -> str:
    """
    The lecture key is the second single-quoted literal of the onclick script,
    e.g. "pageMove('/ilos/...', 'A20241234', 'N')" -> "A20241234".
    """
    literals = JS_STRING_RE.findall(onclick)
    if len(literals) < 2:
        raise ParseError("Mismatching 'onclick' pattern", onclick)
    return literals[1]


def parse_due_text(text: str, submitted_marker: str = "제출") -> Tuple[bool, str]:
    """
    Parse an assignment's "<status> | 마감일(<date>)" text.

    Returns (submitted, date).
    """
    match = DUE_RE.match(text)
    if not match:
        raise ParseError("Mismatching due date pattern", text)
    return match.group(1) == submitted_marker, match.group(2)


# ---------------------------------------------------------------------------
# Listing parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def parse_notification_item(item: Tag, config: PortalConfig) -> Notification:
    """
    Parse one data <li> of the listing into a Notification.
    """
    anchor = item.select_one(".site-link")
    if anchor is None:
        raise ParseError("Missing site-link anchor", item.get_text(" ", strip=True))

    type_text, title = split_type_title(anchor.get_text())

    href = anchor.get("href")
    if href is None:
        raise ParseError("Missing 'href' attribute for the site-link tag", str(anchor))
    notification_id = extract_notification_id(href)
    link = config.origin + href

    onclick = anchor.get("onclick")
    if onclick is None:
        raise ParseError("Missing 'onclick' attribute for the site-link tag", str(anchor))
    lecture_key = extract_lecture_key(onclick)

    # 1st span: date (or submit status + due date), 2nd span: preview
    texts = [span.get_text().strip() for span in item.find_all("span")]
    if len(texts) < 2:
        raise ParseError("Expected at least two <span> texts", " | ".join(texts))
    preview_content = texts[1]

    if type_text == config.assignment_type:
        submitted, date = parse_due_text(texts[0], config.submitted_marker)
    else:
        submitted, date = False, texts[0]

    # Last <div>: professor, then lecture name
    professor = ""
    lecture_name = ""
    divs = item.find_all("div")
    if divs:
        names = [a.get_text().strip() for a in divs[-1].find_all("a")]
        if len(names) > 0:
            professor = names[0]
        if len(names) > 1:
            lecture_name = names[1]

    return Notification(
        id=notification_id,
        link=link,
        type=type_text,
        title=title,
        datetime=date,
        submitted=submitted,
        lecture=Lecture(key=lecture_key, name=lecture_name),
        professor=professor,
        preview_content=preview_content,
    )


def parse_notifications(html: str, config: Optional[PortalConfig] = None) -> List[Notification]:
    """
    Parse a listing response into notifications, in document order.

    Raises ParseError on the first malformed entry; nothing is returned
    for the entries that did parse.
    """
    config = config or PortalConfig()
    soup = BeautifulSoup(html, "html.parser")

    notifications: List[Notification] = []
    for item in soup.select(LISTING_ITEM_SELECTOR):
        notifications.append(parse_notification_item(item, config))

    return notifications


# ---------------------------------------------------------------------------
# Detail content
# ---------------------------------------------------------------------------


def _serialize_node(node: Any) -> str:
    if isinstance(node, Tag):
        if node.name == "script":
            return ""
        return str(node).strip()
    if isinstance(node, Comment):
        return f"<!--{node}-->"
    if isinstance(node, NavigableString):
        return str(node).strip()
    return ""


def serialize_content(html: str) -> str:
    """
    Serialize the children of the detail page's text viewer.

    Scripts are dropped, text is trimmed, other elements keep their
    outer HTML. Empty pieces are skipped, the rest joined with newlines.
    A page without the container gives "".
    """
    soup = BeautifulSoup(html, "html.parser")

    lines: List[str] = []
    for container in soup.select(CONTENT_SELECTOR):
        for child in container.children:
            text = _serialize_node(child)
            if text:
                lines.append(text)

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON envelope
# ---------------------------------------------------------------------------


def parse_envelope(body: Union[str, bytes]) -> Dict[str, Any]:
    """
    Decode the portal's {"isError": bool, "message": str, ...} envelope.

    Raises MalformedEnvelopeError if the body is not a JSON object and
    ProtocolError (with the server's message) if isError is set.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedEnvelopeError(f"Invalid JSON envelope ({e.msg})", body[:200]) from e

    if not isinstance(data, dict):
        raise MalformedEnvelopeError("JSON envelope is not an object", body[:200])

    if data.get("isError"):
        raise ProtocolError(str(data.get("message") or "Server reported an error"))

    return data
