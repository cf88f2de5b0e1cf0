"""Contributor workflow instructions document."""

INSTRUCTIONS_TEMPLATE = """\
# Workflow instructions

These instructions describe how to plan, carry out and report a piece of work
in this repository. They apply to human contributors and coding assistants
alike.

## 1. Write a todo list

Before touching any code, write the plan as a new numbered file in
`{directory}/`. Take the next free number; numbers are never reused.

```
planlog new "Short title" -i "first step" -i "second step"
```

This creates `{directory}/{example_open}`.

## 2. Check in before starting

Share the todo list and wait for a go-ahead. Record the check-in:

```
planlog approve {example_number}
```

Do not start on the steps of an unapproved plan.

## 3. Report high-level changes

After each step, tick it off and describe what changed in one line. Keep the
report at the level of behaviour, not individual edits.

```
planlog check {example_number} 1 -m "what changed"
```

## 4. Keep diffs minimal

Change only what the current step needs. Unrelated clean-ups go into a plan
of their own.

## 5. Log completed plans

When every step is done, close the plan. The file is renamed with a status
word (`{example_closed}`) and a line is appended to
`{directory}/{log_file}`.

```
planlog close {example_number}
```

Plans that are dropped are closed with `--status abandoned` instead.
"""


def render_instructions(
    prefix: str = "todo",
    directory: str = "plans",
    log_file: str = "LOG.md",
    number_width: int = 3,
) -> str:
    """Render the workflow instructions for a plan directory layout."""
    number = f"{1:0{number_width}d}"
    return INSTRUCTIONS_TEMPLATE.format(
        directory=directory,
        log_file=log_file,
        example_number=1,
        example_open=f"{prefix}-{number}.md",
        example_closed=f"{prefix}-{number}-done.md",
    )
