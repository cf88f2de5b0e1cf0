"""Numbered plan files: todo list, check-in, report and completion log."""

from .document import parse_plan, render_plan
from .models import Plan, ReportEntry, TodoItem
from .naming import PlanName, PlanNaming, next_number
from .store import PlanStore

__all__ = [
    "Plan",
    "PlanName",
    "PlanNaming",
    "PlanStore",
    "ReportEntry",
    "TodoItem",
    "next_number",
    "parse_plan",
    "render_plan",
]
