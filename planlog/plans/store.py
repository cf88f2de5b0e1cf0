"""Plan directory management."""

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..core.config import Config
from ..core.error_handling import (
    PlanError,
    PlanNotFoundError,
    PlanStateError,
    error_context,
)
from .document import parse_plan, render_plan
from .models import Plan, ReportEntry, TodoItem
from .naming import DEFAULT_STATUSES, OPEN_STATUS, PlanName, PlanNaming, next_number

logger = logging.getLogger(__name__)

LOG_HEADING = "# Completed plans"
DONE_STATUS = "done"


class PlanStore:
    """Creates, updates and closes numbered plan files in one directory."""

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "todo",
        number_width: int = 3,
        statuses: Sequence[str] = DEFAULT_STATUSES,
        log_file: str = "LOG.md",
        require_approval: bool = True,
        today: Callable[[], date] = date.today,
    ):
        """Initialize plan store.

        Args:
            directory: Directory holding the plan files
            prefix: File name prefix of plan files
            number_width: Zero padding of plan numbers
            statuses: Status words allowed when closing a plan
            log_file: Completion log file name, relative to the directory
            require_approval: Refuse to tick items on plans without check-in
            today: Date source, replaceable in tests
        """
        self.directory = Path(directory)
        self.naming = PlanNaming(prefix, number_width, statuses)
        self.log_path = self.directory / log_file
        self.require_approval = require_approval
        self._today = today

    @classmethod
    def from_config(cls, config: Config, root: Optional[Path] = None) -> "PlanStore":
        """Create a store from the ``[plans]`` configuration section."""
        plans = config.plans
        return cls(
            config.plans_directory(root),
            prefix=plans["prefix"],
            number_width=plans["number_width"],
            statuses=plans["statuses"],
            log_file=plans["log_file"],
            require_approval=plans["require_approval"],
        )

    def _names(self) -> List[PlanName]:
        if not self.directory.is_dir():
            return []
        names = []
        for path in self.directory.iterdir():
            if not path.is_file():
                continue
            name = self.naming.parse(path.name)
            if name is not None:
                names.append(name)
        return sorted(names, key=lambda n: n.number)

    def _find_name(self, number: int) -> PlanName:
        matches = [name for name in self._names() if name.number == number]
        if not matches:
            raise PlanNotFoundError(
                f"No plan numbered {number} in {self.directory}",
                details={"number": number},
            )
        if len(matches) > 1:
            files = ", ".join(name.filename for name in matches)
            raise PlanError(
                f"Plan number {number} is used by several files: {files}",
                details={"number": number},
            )
        return matches[0]

    def _read(self, name: PlanName) -> Plan:
        path = self.directory / name.filename
        with error_context("read plan", file_path=str(path)):
            plan = parse_plan(path.read_text(encoding="utf-8"))
        plan.path = path
        # The file name is authoritative for the status
        plan.status = name.status
        return plan

    def _write(self, plan: Plan, name: PlanName) -> Plan:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name.filename
        path.write_text(
            render_plan(plan, self.naming.number_width), encoding="utf-8"
        )
        plan.path = path
        return plan

    def next_number(self) -> int:
        return next_number(self._names())

    def list_plans(self, status: Optional[str] = None) -> List[Plan]:
        """List plans ordered by number.

        Args:
            status: ``open``, ``closed`` or a specific status word
        """
        plans = []
        for name in self._names():
            if status == "closed" and name.is_open:
                continue
            if status not in (None, "closed") and name.status != status:
                continue
            plans.append(self._read(name))
        return plans

    def get(self, number: int) -> Plan:
        return self._read(self._find_name(number))

    def create(self, title: str, items: Iterable[str] = ()) -> Plan:
        """Write a new open plan with the next free number."""
        title = " ".join(title.split())
        if not title:
            raise PlanError("Plan title must not be empty")

        try:
            todo_items = [TodoItem(_one_line(text)) for text in items]
        except ValueError as e:
            raise PlanError(str(e)) from e

        number = self.next_number()
        plan = Plan(
            number=number,
            title=title,
            created=self._today(),
            items=todo_items,
        )
        self._write(plan, self.naming.name(number))
        logger.info(f"Created plan {plan.path}")
        return plan

    def _open_plan(self, number: int, action: str) -> tuple:
        name = self._find_name(number)
        if not name.is_open:
            raise PlanStateError(
                f"Cannot {action} plan {number}: it is closed as '{name.status}'",
                details={"number": number, "status": name.status},
            )
        return name, self._read(name)

    def approve(self, number: int) -> Plan:
        """Record the check-in for a plan."""
        name, plan = self._open_plan(number, "approve")
        if plan.is_approved:
            logger.info(f"Plan {number} already approved on {plan.approved}")
            return plan
        plan.approved = self._today()
        self._write(plan, name)
        logger.info(f"Approved plan {number}")
        return plan

    def add_item(self, number: int, text: str) -> Plan:
        name, plan = self._open_plan(number, "add items to")
        try:
            plan.items.append(TodoItem(_one_line(text)))
        except ValueError as e:
            raise PlanError(str(e)) from e
        return self._write(plan, name)

    def check(self, number: int, index: int, note: Optional[str] = None) -> Plan:
        """Mark a todo item done and optionally report what changed.

        Args:
            number: Plan number
            index: 1-based item index
            note: Report line to append
        """
        name, plan = self._open_plan(number, "check items of")
        if self.require_approval and not plan.is_approved:
            raise PlanStateError(
                f"Plan {number} has not been approved; check in before starting",
                details={"number": number},
            )
        if not 1 <= index <= len(plan.items):
            raise PlanError(
                f"Plan {number} has no item {index} "
                f"(it has {len(plan.items)} items)",
                details={"number": number, "index": index},
            )

        item = plan.items[index - 1]
        if item.done:
            logger.info(f"Item {index} of plan {number} is already done")
        item.done = True
        if note:
            plan.report.append(ReportEntry(self._today(), _one_line(note)))
        self._write(plan, name)
        logger.info(f"Checked item {index} of plan {number}: {item.text}")
        return plan

    def report(self, number: int, text: str) -> Plan:
        """Append a dated report entry."""
        text = _one_line(text)
        if not text:
            raise PlanError("Report text must not be empty")
        name, plan = self._open_plan(number, "report on")
        plan.report.append(ReportEntry(self._today(), text))
        return self._write(plan, name)

    def close(self, number: int, status: str = DONE_STATUS, force: bool = False) -> Plan:
        """Close a plan: rename it with the status word and log it.

        Raises:
            PlanError: If ``status`` is not a configured status word
            PlanStateError: If the plan is already closed, or is closed as
                done with unchecked items and ``force`` is not set
        """
        if status == OPEN_STATUS or not self.naming.is_known_status(status):
            raise PlanError(
                f"Unknown status {status!r}; expected one of "
                f"{', '.join(self.naming.statuses)}"
            )

        name, plan = self._open_plan(number, "close")
        if status == DONE_STATUS and not plan.is_complete and not force:
            done, total = plan.progress
            raise PlanStateError(
                f"Plan {number} has unchecked items ({done}/{total} done); "
                f"use force to close it anyway",
                details={"number": number, "done": done, "total": total},
            )

        old_path = self.directory / name.filename
        new_name = name.with_status(status)
        plan.status = status
        self._write(plan, new_name)
        old_path.unlink()
        self._append_log(plan, new_name)
        logger.info(f"Closed plan {number} as {status}: {new_name.filename}")
        return plan

    def _append_log(self, plan: Plan, name: PlanName) -> None:
        done, total = plan.progress
        line = (
            f"- {self._today().isoformat()} {name.filename}: "
            f"{plan.title} ({done}/{total})\n"
        )
        self.directory.mkdir(parents=True, exist_ok=True)
        if not self.log_path.exists():
            self.log_path.write_text(f"{LOG_HEADING}\n\n", encoding="utf-8")
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(line)

    def read_log(self) -> List[str]:
        """Entries of the completion log, oldest first."""
        if not self.log_path.exists():
            return []
        return [
            line[2:]
            for line in self.log_path.read_text(encoding="utf-8").splitlines()
            if line.startswith("- ")
        ]


def _one_line(text: str) -> str:
    return " ".join(text.split())
