"""Data models for plans."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from .naming import OPEN_STATUS


@dataclass
class TodoItem:
    """A single checkbox in a plan's todo list."""

    text: str
    done: bool = False

    def __post_init__(self):
        self.text = self.text.strip()
        if not self.text:
            raise ValueError("Todo item text must not be empty")


@dataclass
class ReportEntry:
    """A dated report of a high-level change."""

    date: date
    text: str


@dataclass
class Plan:
    """A plan document: a numbered todo list with check-in and report."""

    number: int
    title: str
    status: str = OPEN_STATUS
    created: date = field(default_factory=date.today)
    approved: Optional[date] = None
    items: List[TodoItem] = field(default_factory=list)
    report: List[ReportEntry] = field(default_factory=list)
    notes: str = ""
    path: Optional[Path] = field(default=None, compare=False)

    @property
    def is_open(self) -> bool:
        return self.status == OPEN_STATUS

    @property
    def is_approved(self) -> bool:
        return self.approved is not None

    @property
    def progress(self) -> Tuple[int, int]:
        """Number of done items and total items."""
        done = sum(1 for item in self.items if item.done)
        return done, len(self.items)

    @property
    def is_complete(self) -> bool:
        """True when the plan has items and all of them are done."""
        done, total = self.progress
        return total > 0 and done == total

    @property
    def pending_items(self) -> List[TodoItem]:
        return [item for item in self.items if not item.done]
