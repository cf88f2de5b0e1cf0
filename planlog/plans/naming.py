"""Plan file naming: ``<prefix>-<number>.md`` and ``<prefix>-<number>-<status>.md``."""

import re
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

OPEN_STATUS = "open"
PLAN_SUFFIX = ".md"
DEFAULT_STATUSES = ("done", "abandoned", "superseded")


@dataclass(frozen=True)
class PlanName:
    """Parsed plan file name."""

    prefix: str
    number: int
    status: str = OPEN_STATUS
    width: int = 3

    @property
    def is_open(self) -> bool:
        return self.status == OPEN_STATUS

    @property
    def filename(self) -> str:
        """File name for this plan."""
        stem = f"{self.prefix}-{self.number:0{self.width}d}"
        if not self.is_open:
            stem = f"{stem}-{self.status}"
        return stem + PLAN_SUFFIX

    def with_status(self, status: str) -> "PlanName":
        return replace(self, status=status)

    def __str__(self) -> str:
        return self.filename


class PlanNaming:
    """Parses and formats plan file names for one prefix and status vocabulary."""

    def __init__(
        self,
        prefix: str = "todo",
        number_width: int = 3,
        statuses: Sequence[str] = DEFAULT_STATUSES,
    ):
        self.prefix = prefix
        self.number_width = number_width
        self.statuses = tuple(statuses)
        self._pattern = re.compile(
            r"^{prefix}-(?P<number>\d+)(?:-(?P<status>[a-z]+))?{suffix}$".format(
                prefix=re.escape(prefix), suffix=re.escape(PLAN_SUFFIX)
            )
        )

    def parse(self, filename: str) -> Optional[PlanName]:
        """Parse a file name, returning None when it does not follow the scheme."""
        match = self._pattern.match(filename)
        if not match:
            return None

        number = int(match.group("number"))
        if number < 1:
            return None

        status = match.group("status") or OPEN_STATUS
        if status != OPEN_STATUS and status not in self.statuses:
            return None
        # "todo-001-open.md" is not a valid name; open plans carry no status word
        if match.group("status") == OPEN_STATUS:
            return None

        return PlanName(self.prefix, number, status, self.number_width)

    def name(self, number: int, status: str = OPEN_STATUS) -> PlanName:
        """Build a plan name for this scheme."""
        if number < 1:
            raise ValueError(f"Plan numbers start at 1, got {number}")
        if status != OPEN_STATUS and status not in self.statuses:
            raise ValueError(
                f"Unknown status {status!r}; expected one of {', '.join(self.statuses)}"
            )
        return PlanName(self.prefix, number, status, self.number_width)

    def is_known_status(self, status: str) -> bool:
        return status in self.statuses


def next_number(names: Iterable[PlanName]) -> int:
    """One more than the highest number in use; gaps are not reused."""
    return max((name.number for name in names), default=0) + 1
