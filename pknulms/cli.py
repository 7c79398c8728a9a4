"""
CLI (Command Line Interface).

Quick terminal access to the portal, e.g.:

    pknulms login
    pknulms notifications --page 2
    pknulms notifications --start 1 --count 8 --json
    pknulms content 3
    pknulms send-note 201912345 "Hello" "See you tomorrow"

Credentials come from --id/--password or from LMS_ID/LMS_PASSWORD
(environment or a .env file). Every command logs in first and logs out
when it is done.

Note:
- This CLI prints plain text (no rich formatting)
- Client errors abort the command with a message (see client.must)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from pknulms.client import LMSClient, must
from pknulms.config import Settings
from pknulms.errors import LMSError, TransportError
from pknulms.log import setup_logging
from pknulms.model import Notification

logger = logging.getLogger(__name__)


def _format_notification(n: Notification) -> str:
    nid = str(n.id) if n.id is not None else "-"
    date = n.datetime
    if n.is_assignment:
        date = f"{date} ({'submitted' if n.submitted else 'not submitted'})"
    lecture = n.lecture.name or n.lecture.key
    return f"{nid} | {n.type} | {n.title} | {date} | {lecture} | {n.professor}"


def _login(client: LMSClient, settings: Settings) -> bool:
    """
    Log in with the resolved credentials. Prints the reason on failure.
    """
    if not settings.user_id or not settings.password:
        print("Please provide credentials (--id/--password or LMS_ID/LMS_PASSWORD).")
        return False

    if not must(client.login, settings.user_id, settings.password):
        print("Login failed: id or password is incorrect.")
        return False
    return True


def _cmd_login(args: argparse.Namespace, client: LMSClient) -> int:
    print(f"Logged in as {args.settings.user_id}")
    return 0


def _cmd_notifications(args: argparse.Namespace, client: LMSClient) -> int:
    """
    List notifications, by page (default) or by explicit start/count window.
    """
    if args.start is not None or args.count is not None:
        start = args.start if args.start is not None else 1
        count = args.count if args.count is not None else client.config.page_size
        notifications = must(client.get_notifications, start, count)
    else:
        notifications = must(client.get_notifications_by_page, args.page)

    if args.json:
        print(json.dumps([n.to_dict() for n in notifications], ensure_ascii=False, indent=2))
        return 0

    if not notifications:
        print("No notifications.")
        return 0

    for n in notifications:
        print(_format_notification(n))
    return 0


def _cmd_content(args: argparse.Namespace, client: LMSClient) -> int:
    """
    Print the detail content of the INDEX-th (1-based) notification of a page.
    """
    notifications = must(client.get_notifications_by_page, args.page)
    if not 1 <= args.index <= len(notifications):
        print(f"No notification #{args.index} on page {args.page} ({len(notifications)} found).")
        return 1

    n = notifications[args.index - 1]
    print(str(n))
    content = must(client.get_notification_content, n)
    print(content if content else "(no content)")
    return 0


def _cmd_send_note(args: argparse.Namespace, client: LMSClient) -> int:
    content = sys.stdin.read() if args.content == "-" else args.content
    if not content.strip():
        print("Please provide note content.")
        return 1

    must(client.send_note, args.recipient, args.title, content)
    print(f"Note sent to {args.recipient}")
    return 0


COMMANDS = {
    "login": _cmd_login,
    "notifications": _cmd_notifications,
    "content": _cmd_content,
    "send-note": _cmd_send_note,
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="pknulms", description="PKNU LMS client")
    parser.add_argument("--id", dest="user_id", type=str, help="Portal user id (default: $LMS_ID)")
    parser.add_argument("--password", type=str, help="Portal password (default: $LMS_PASSWORD)")
    parser.add_argument("--base-url", type=str, help="Portal origin (default: $LMS_BASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Check credentials")

    p_list = sub.add_parser("notifications", help="List notifications")
    p_list.add_argument("--page", "-p", type=int, default=1, help="Page number (20 per page)")
    p_list.add_argument("--start", type=int, help="1-based offset (use with --count)")
    p_list.add_argument("--count", type=int, help="Number of notifications (>= 8)")
    p_list.add_argument("--json", action="store_true", help="Print JSON instead of text")

    p_content = sub.add_parser("content", help="Show the content of one notification")
    p_content.add_argument("index", type=int, help="Position on the page (1-based)")
    p_content.add_argument("--page", "-p", type=int, default=1, help="Page number")

    p_note = sub.add_parser("send-note", help="Send a note to another user")
    p_note.add_argument("recipient", type=str, help="Recipient user id")
    p_note.add_argument("title", type=str, help="Note title")
    p_note.add_argument("content", type=str, help="Note content ('-' reads stdin)")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entry point. Parses args, logs in, dispatches to the command handler,
    logs out and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = must(Settings.from_env)
    if args.user_id:
        settings.user_id = args.user_id
    if args.password:
        settings.password = args.password
    if args.base_url:
        settings.base_url = args.base_url
    args.settings = settings

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    client = LMSClient(settings.portal_config())
    if not _login(client, settings):
        raise SystemExit(1)

    try:
        code = COMMANDS[args.command](args, client)
    finally:
        # A failed logout must not hide the command's own error
        try:
            client.logout()
        except (LMSError, TransportError) as e:
            logger.warning("Logout failed: %s", e)

    raise SystemExit(code)
