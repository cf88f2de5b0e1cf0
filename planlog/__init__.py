"""planlog - Numbered plan files and a deployment checklist for static sites."""

__version__ = "0.3.0"

from planlog.core.config import Config
from planlog.plans.models import Plan, TodoItem

__all__ = [
    "Plan",
    "TodoItem",
    "Config",
]
