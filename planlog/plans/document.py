"""Reading and writing plan markdown documents.

A plan document looks like::

    # Plan 001: Publish the site

    - Status: open
    - Created: 2026-10-18
    - Approved: no

    ## Todo

    - [ ] first step
    - [x] second step

    ## Report

    - 2026-10-18: what changed

    ## Notes

    free text

Sections other than Todo and Report are kept verbatim in the notes.
"""

import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..core.error_handling import PlanFormatError
from .models import Plan, ReportEntry, TodoItem
from .naming import OPEN_STATUS

HEADER_RE = re.compile(r"^#\s+Plan\s+(?P<number>\d+)\s*:\s*(?P<title>.*)$")
SECTION_RE = re.compile(r"^##\s+(?P<name>.+?)\s*$")
META_RE = re.compile(r"^[-*]\s+(?P<key>[A-Za-z]+)\s*:\s*(?P<value>.*)$")
CHECKBOX_RE = re.compile(r"^\s*[-*]\s+\[(?P<mark>[ xX])\]\s+(?P<text>\S.*)$")
REPORT_RE = re.compile(r"^[-*]\s+(?P<date>\d{4}-\d{2}-\d{2})\s*:\s*(?P<text>.*)$")
BULLET_RE = re.compile(r"^[-*]\s+(?P<text>\S.*)$")
FENCE = "```"

TODO_SECTION = "todo"
REPORT_SECTION = "report"
NOTES_SECTION = "notes"


def _parse_date(value: str, field_name: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise PlanFormatError(f"Invalid {field_name} date: {value!r}") from e


def _split_sections(lines: List[str]) -> Tuple[List[str], List[Tuple[str, List[str]]]]:
    """Split body lines into the preamble and ``## `` sections, ignoring fenced code."""
    preamble: List[str] = []
    sections: List[Tuple[str, List[str]]] = []
    current = preamble
    in_fence = False

    for line in lines:
        if line.strip().startswith(FENCE):
            in_fence = not in_fence
        elif not in_fence:
            match = SECTION_RE.match(line)
            if match:
                body: List[str] = []
                sections.append((match.group("name"), body))
                current = body
                continue
        current.append(line)

    return preamble, sections


def _strip_blank(lines: List[str]) -> str:
    return "\n".join(lines).strip("\n").rstrip()


def parse_plan(text: str) -> Plan:
    """Parse a plan document.

    Raises:
        PlanFormatError: If the ``# Plan NNN: title`` header is missing or a
            metadata date is malformed.
    """
    lines = text.splitlines()

    header_index = None
    for index, line in enumerate(lines):
        if HEADER_RE.match(line):
            header_index = index
            break
    if header_index is None:
        raise PlanFormatError("Missing '# Plan NNN: title' header")

    header = HEADER_RE.match(lines[header_index])
    number = int(header.group("number"))
    title = header.group("title").strip()

    preamble, sections = _split_sections(lines[header_index + 1 :])

    metadata: Dict[str, str] = {}
    for line in preamble:
        match = META_RE.match(line.strip())
        if match:
            metadata[match.group("key").lower()] = match.group("value").strip()

    created = (
        _parse_date(metadata["created"], "created")
        if metadata.get("created")
        else date.today()
    )
    approved: Optional[date] = None
    approved_value = metadata.get("approved", "")
    if approved_value and approved_value.lower() not in ("no", "false", "-"):
        approved = _parse_date(approved_value, "approved")

    status = metadata.get("status", OPEN_STATUS).lower() or OPEN_STATUS

    items: List[TodoItem] = []
    report: List[ReportEntry] = []
    notes_parts: List[str] = []

    for name, body in sections:
        key = name.lower()
        if key == TODO_SECTION:
            for line in body:
                match = CHECKBOX_RE.match(line)
                if match:
                    items.append(
                        TodoItem(match.group("text"), match.group("mark") != " ")
                    )
        elif key == REPORT_SECTION:
            for line in body:
                stripped = line.strip()
                match = REPORT_RE.match(stripped)
                if match:
                    report.append(
                        ReportEntry(
                            _parse_date(match.group("date"), "report"),
                            match.group("text").strip(),
                        )
                    )
                    continue
                bullet = BULLET_RE.match(stripped)
                if bullet:
                    report.append(ReportEntry(created, bullet.group("text").strip()))
        elif key == NOTES_SECTION:
            content = _strip_blank(body)
            if content:
                notes_parts.append(content)
        else:
            content = _strip_blank(body)
            notes_parts.append(f"## {name}\n\n{content}" if content else f"## {name}")

    return Plan(
        number=number,
        title=title,
        status=status,
        created=created,
        approved=approved,
        items=items,
        report=report,
        notes="\n\n".join(notes_parts),
    )


def render_plan(plan: Plan, number_width: int = 3) -> str:
    """Render a plan in the canonical layout."""
    approved = plan.approved.isoformat() if plan.approved else "no"
    lines = [
        f"# Plan {plan.number:0{number_width}d}: {plan.title}",
        "",
        f"- Status: {plan.status}",
        f"- Created: {plan.created.isoformat()}",
        f"- Approved: {approved}",
        "",
        "## Todo",
        "",
    ]
    for item in plan.items:
        mark = "x" if item.done else " "
        lines.append(f"- [{mark}] {item.text}")
    if plan.items:
        lines.append("")

    lines.extend(["## Report", ""])
    for entry in plan.report:
        lines.append(f"- {entry.date.isoformat()}: {entry.text}")
    if plan.report:
        lines.append("")

    if plan.notes:
        lines.extend(["## Notes", "", plan.notes.strip("\n"), ""])

    return "\n".join(lines)
