"""End-to-end tests of the plan workflow against a real directory."""

from datetime import date

import pytest

from planlog.plans.store import PlanStore
from planlog.plans.templates import render_instructions
from planlog.validation.validators import PlanValidator

pytestmark = pytest.mark.integration


class TestPlanWorkflow:
    """Write, check in, report and log several plans."""

    def test_several_plans(self, tmp_path):
        days = iter([date(2026, 10, d) for d in range(1, 30)])
        store = PlanStore(tmp_path / "plans", today=lambda: next(days))

        first = store.create("Deploy svg2gcode", ["push main", "check page"])
        second = store.create("Refactor nothing", ["look around"])
        assert (first.number, second.number) == (1, 2)

        store.approve(1)
        store.check(1, 1, "Pushed to main; workflow started")
        store.check(1, 2, "Page loads with the app")
        store.close(1)
        store.close(2, "abandoned")

        third = store.create("Follow-up", ["one more"])
        assert third.number == 3

        names = sorted(p.name for p in (tmp_path / "plans").iterdir())
        assert names == [
            "LOG.md",
            "todo-001-done.md",
            "todo-002-abandoned.md",
            "todo-003.md",
        ]
        log = store.read_log()
        assert len(log) == 2
        assert "todo-001-done.md: Deploy svg2gcode (2/2)" in log[0]
        assert "todo-002-abandoned.md: Refactor nothing (0/1)" in log[1]

        validator = PlanValidator(store.naming)
        results = validator.validate_directory(tmp_path / "plans")
        assert all(results)
        abandoned = [r for r in results if r.path.name == "todo-002-abandoned.md"][0]
        assert "Closed plan has no report entries" in abandoned.warnings

    def test_hand_edited_plan_is_preserved(self, tmp_path):
        plans = tmp_path / "plans"
        plans.mkdir()
        (plans / "todo-001.md").write_text(
            "# Plan 1: Hand written\n\n"
            "- Approved: 2026-10-01\n\n"
            "## Todo\n\n"
            "* [ ] first\n"
            "* [X] second\n\n"
            "## Context\n\n"
            "Links to the workflow run.\n"
        )
        store = PlanStore(plans)
        plan = store.check(1, 1)
        assert plan.is_complete
        text = (plans / "todo-001.md").read_text()
        assert "## Context\n\nLinks to the workflow run." in text
        assert "- [x] first" in text

    def test_instructions_follow_layout(self):
        text = render_instructions(prefix="plan", directory="docs/plans", number_width=2)
        assert "docs/plans/plan-01.md" in text
        assert "plan-01-done.md" in text
