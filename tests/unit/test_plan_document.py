"""Tests for plan markdown parsing and rendering."""

from datetime import date

import pytest

from planlog.core.error_handling import PlanFormatError
from planlog.plans.document import parse_plan, render_plan
from planlog.plans.models import Plan, ReportEntry, TodoItem

SAMPLE = """\
# Plan 004: Publish the site

- Status: open
- Created: 2026-10-01
- Approved: 2026-10-02

## Todo

- [x] Push to main
- [X] Wait for the workflow
- [ ] Check the page loads

## Report

- 2026-10-02: Pushed the release commit

## Notes

Site is published by the pages workflow.
"""


class TestParsePlan:
    """Test reading plan documents."""

    def test_parse_sample(self):
        plan = parse_plan(SAMPLE)
        assert plan.number == 4
        assert plan.title == "Publish the site"
        assert plan.status == "open"
        assert plan.created == date(2026, 10, 1)
        assert plan.approved == date(2026, 10, 2)
        assert [item.text for item in plan.items] == [
            "Push to main",
            "Wait for the workflow",
            "Check the page loads",
        ]
        assert [item.done for item in plan.items] == [True, True, False]
        assert plan.report == [
            ReportEntry(date(2026, 10, 2), "Pushed the release commit")
        ]
        assert plan.notes == "Site is published by the pages workflow."

    def test_progress(self):
        plan = parse_plan(SAMPLE)
        assert plan.progress == (2, 3)
        assert not plan.is_complete

    def test_missing_header(self):
        with pytest.raises(PlanFormatError, match="header"):
            parse_plan("## Todo\n\n- [ ] something\n")

    def test_defaults_for_missing_metadata(self):
        plan = parse_plan("# Plan 2: Bare\n")
        assert plan.status == "open"
        assert plan.approved is None
        assert plan.items == []

    def test_approved_no(self):
        plan = parse_plan("# Plan 2: x\n\n- Approved: no\n")
        assert plan.approved is None

    def test_invalid_date(self):
        with pytest.raises(PlanFormatError, match="created"):
            parse_plan("# Plan 2: x\n\n- Created: yesterday\n")

    def test_unknown_sections_kept_in_notes(self):
        text = "# Plan 1: x\n\n## Todo\n\n- [ ] a\n\n## Links\n\nsee README\n"
        plan = parse_plan(text)
        assert plan.notes == "## Links\n\nsee README"

    def test_headings_inside_code_fence_are_not_sections(self):
        text = (
            "# Plan 1: x\n\n## Notes\n\n```\n## Todo\n- [ ] not an item\n```\n"
        )
        plan = parse_plan(text)
        assert plan.items == []
        assert "## Todo" in plan.notes

    def test_undated_report_bullet_uses_created_date(self):
        text = "# Plan 1: x\n\n- Created: 2026-01-05\n\n## Report\n\n- tidied up\n"
        plan = parse_plan(text)
        assert plan.report == [ReportEntry(date(2026, 1, 5), "tidied up")]

    def test_blank_checkbox_is_not_an_item(self):
        text = "# Plan 1: x\n\n## Todo\n\n- [ ] real\n- [ ]  \n- [x]\n"
        plan = parse_plan(text)
        assert [item.text for item in plan.items] == ["real"]


class TestRenderPlan:
    """Test writing plan documents."""

    def test_render_layout(self):
        plan = Plan(
            number=7,
            title="Ship it",
            created=date(2026, 10, 18),
            items=[TodoItem("one"), TodoItem("two", done=True)],
        )
        text = render_plan(plan)
        assert text.startswith("# Plan 007: Ship it\n")
        assert "- Approved: no" in text
        assert "- [ ] one" in text
        assert "- [x] two" in text

    def test_render_then_parse_is_stable(self):
        plan = parse_plan(SAMPLE)
        assert parse_plan(render_plan(plan)) == plan

    def test_notes_with_extra_sections_survive_rewrite(self):
        text = (
            "# Plan 1: x\n\n## Notes\n\nfirst\n\n## Links\n\nsee README\n"
        )
        plan = parse_plan(text)
        assert parse_plan(render_plan(plan)) == plan
