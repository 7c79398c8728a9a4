"""
Unit tests for the listing extractor.

The listing markup repeats two <li> per entry; only the second one
carries data. Any malformed entry must abort the whole parse.
"""

from __future__ import annotations

import unittest

from pknulms.config import PortalConfig
from pknulms.errors import ParseError
from pknulms.model import Lecture, Notification
from pknulms.parse import (
    extract_lecture_key,
    extract_notification_id,
    parse_due_text,
    parse_notifications,
    split_type_title,
)

from listing_html import listing, listing_entry


class TestFieldHelpers(unittest.TestCase):
    def test_split_type_title(self) -> None:
        self.assertEqual(split_type_title(" 과제: Homework 3 "), ("과제", "Homework 3"))

    def test_split_only_on_first_separator(self) -> None:
        self.assertEqual(split_type_title("공지: Exam: room change"), ("공지", "Exam: room change"))

    def test_split_without_separator_raises(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            split_type_title("Homework 3")
        self.assertEqual(ctx.exception.raw, "Homework 3")

    def test_notification_id_from_trailing_digits(self) -> None:
        self.assertEqual(extract_notification_id("/a.acl?KJKEY=A1&ARTL_NUM=987"), 987)

    def test_notification_id_missing_is_none(self) -> None:
        self.assertIsNone(extract_notification_id("/a.acl?ARTL_NUM=987&x=y"))

    def test_lecture_key_is_second_literal(self) -> None:
        self.assertEqual(extract_lecture_key("go('/path', 'KEY42', 'N')"), "KEY42")

    def test_lecture_key_needs_two_literals(self) -> None:
        with self.assertRaises(ParseError):
            extract_lecture_key("go('/path')")

    def test_due_text_submitted(self) -> None:
        self.assertEqual(parse_due_text("제출 | 마감일(2024-05-01)"), (True, "2024-05-01"))

    def test_due_text_not_submitted(self) -> None:
        self.assertEqual(parse_due_text("미제출 | 마감일(2024-05-01)"), (False, "2024-05-01"))

    def test_due_text_mismatch_raises(self) -> None:
        with self.assertRaises(ParseError):
            parse_due_text("2024-05-01")


class TestParseNotifications(unittest.TestCase):
    def test_assignment_entry(self) -> None:
        result = parse_notifications(listing(listing_entry()))

        self.assertEqual(
            result,
            [
                Notification(
                    id=12345,
                    link="https://lms.pknu.ac.kr/ilos/st/course/report_view_form.acl?ARTL_NUM=12345",
                    type="과제",
                    title="Homework 3",
                    datetime="2024-05-01",
                    submitted=True,
                    lecture=Lecture(key="A2024CS101", name="Algorithms"),
                    professor="Kim Minsu",
                    preview_content="Submit the report as PDF.",
                )
            ],
        )

    def test_assignment_not_submitted(self) -> None:
        result = parse_notifications(listing(listing_entry(date_text="미제출 | 마감일(2024-05-01)")))
        self.assertFalse(result[0].submitted)
        self.assertEqual(result[0].datetime, "2024-05-01")

    def test_non_assignment_keeps_raw_date_and_is_never_submitted(self) -> None:
        # Even a text that looks like a submit status is taken verbatim
        entry = listing_entry(text="공지: Midterm room", date_text="제출 | 마감일(2024-05-01)")
        n = parse_notifications(listing(entry))[0]

        self.assertEqual(n.type, "공지")
        self.assertEqual(n.title, "Midterm room")
        self.assertEqual(n.datetime, "제출 | 마감일(2024-05-01)")
        self.assertFalse(n.submitted)
        self.assertFalse(n.is_assignment)

    def test_multiple_entries_in_document_order(self) -> None:
        html = listing(
            listing_entry(text="공지: First", href="/view.acl?ARTL_NUM=1", date_text="2024-04-01"),
            listing_entry(text="자료실: Second", href="/view.acl?ARTL_NUM=2", date_text="2024-04-02"),
        )
        result = parse_notifications(html)
        self.assertEqual([n.title for n in result], ["First", "Second"])
        self.assertEqual([n.id for n in result], [1, 2])

    def test_professor_only(self) -> None:
        n = parse_notifications(listing(listing_entry(people=("Lee Jiwon",))))[0]
        self.assertEqual(n.professor, "Lee Jiwon")
        self.assertEqual(n.lecture.name, "")

    def test_link_uses_configured_origin(self) -> None:
        config = PortalConfig(base_url="http://localhost:8080/")
        n = parse_notifications(listing(listing_entry(href="/view.acl?ARTL_NUM=5")), config)[0]
        self.assertEqual(n.link, "http://localhost:8080/view.acl?ARTL_NUM=5")

    def test_href_without_id_keeps_entry(self) -> None:
        n = parse_notifications(listing(listing_entry(href="/view.acl?ARTL_NUM=5&amp;x=y")))[0]
        self.assertIsNone(n.id)

    def test_missing_href_aborts_everything(self) -> None:
        html = listing(listing_entry(), listing_entry(href=None))
        with self.assertRaises(ParseError):
            parse_notifications(html)

    def test_missing_onclick_aborts(self) -> None:
        with self.assertRaises(ParseError):
            parse_notifications(listing(listing_entry(onclick=None)))

    def test_missing_site_link_aborts(self) -> None:
        html = listing(listing_entry(), "<ul><li></li><li><span>a</span><span>b</span></li></ul>")
        with self.assertRaises(ParseError):
            parse_notifications(html)

    def test_single_span_aborts(self) -> None:
        entry = listing_entry().replace("<span> 제출 | 마감일(2024-05-01) </span>", "")
        with self.assertRaises(ParseError) as ctx:
            parse_notifications(listing(entry))
        self.assertEqual(ctx.exception.raw, "Submit the report as PDF.")

    def test_bad_assignment_date_aborts(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_notifications(listing(listing_entry(date_text="2024-05-01")))
        self.assertEqual(ctx.exception.raw, "2024-05-01")

    def test_empty_listing(self) -> None:
        self.assertEqual(parse_notifications("<div class='resultBox'></div>"), [])

    def test_str(self) -> None:
        n = parse_notifications(listing(listing_entry()))[0]
        self.assertEqual(str(n), "{과제: Homework 3}")


if __name__ == "__main__":
    unittest.main()
