"""
Data model shared by the parser, the client and the CLI.

Records are created fresh by every scrape call and never mutated afterwards,
so they are frozen dataclasses compared by value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


ASSIGNMENT_TYPE = "과제"


@dataclass(frozen=True)
class Lecture:
    """
    One course section. `key` is the opaque KJKEY the portal uses,
    recovered from the listing's inline onclick script.
    """

    key: str
    name: str = ""


@dataclass(frozen=True)
class Notification:
    """
    One entry of the portal's activity feed.

    `datetime` is kept raw; its format depends on `type`.
    `submitted` only carries information for assignments ("과제"),
    for every other type it is always False.
    """

    link: str
    type: str
    title: str
    datetime: str
    submitted: bool
    lecture: Lecture
    professor: str
    preview_content: str
    id: Optional[int] = None

    @property
    def is_assignment(self) -> bool:
        return self.type == ASSIGNMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return f"{{{self.type}: {self.title}}}"
