"""Command line interface for planlog."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from planlog.core.config import Config
from planlog.core.error_handling import PlanlogError
from planlog.core.logging_config import LogContext, setup_logging
from planlog.deploy.checklist import (
    DeployChecklist,
    DeploySettings,
    StepResult,
    StepStatus,
    render_markdown,
)
from planlog.deploy.exceptions import SiteConfigError, SiteError
from planlog.deploy.git import GitRepository
from planlog.deploy.site_client import StaticSiteClient
from planlog.plans.models import Plan
from planlog.plans.store import PlanStore
from planlog.plans.templates import render_instructions
from planlog.validation.validators import PlanValidator

STEP_MARKS = {
    StepStatus.PASSED: "✓",
    StepStatus.WARNING: "⚠",
    StepStatus.FAILED: "✗",
    StepStatus.SKIPPED: "-",
    StepStatus.PENDING: " ",
}


def get_version() -> str:
    """Get the current version of planlog."""
    try:
        import planlog

        return planlog.__version__
    except (ImportError, AttributeError):
        return "unknown"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="planlog",
        description="planlog: numbered plan files and a static site deployment checklist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"planlog {get_version()}"
    )
    parser.add_argument("-c", "--config", help="Config file (planlog_config.toml)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default from config)",
    )
    parser.add_argument("--log-file", help="Also log to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser(
        "init", help="Write the workflow instructions document"
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    new_parser = subparsers.add_parser("new", help="Create a new plan")
    new_parser.add_argument("title", help="Plan title")
    new_parser.add_argument(
        "-i",
        "--item",
        action="append",
        default=[],
        dest="items",
        help="Todo item (repeatable)",
    )

    list_parser = subparsers.add_parser("list", help="List plans")
    list_parser.add_argument(
        "--status", help="Filter: open, closed, or a status word such as done"
    )

    show_parser = subparsers.add_parser("show", help="Show a plan")
    show_parser.add_argument("number", type=int, help="Plan number")

    approve_parser = subparsers.add_parser(
        "approve", help="Record the check-in for a plan"
    )
    approve_parser.add_argument("number", type=int, help="Plan number")

    add_parser = subparsers.add_parser("add", help="Add a todo item to a plan")
    add_parser.add_argument("number", type=int, help="Plan number")
    add_parser.add_argument("text", help="Todo item text")

    check_parser = subparsers.add_parser("check", help="Mark a todo item done")
    check_parser.add_argument("number", type=int, help="Plan number")
    check_parser.add_argument("index", type=int, help="Item index (1-based)")
    check_parser.add_argument("-m", "--message", help="Report what changed")

    report_parser = subparsers.add_parser("report", help="Report a high-level change")
    report_parser.add_argument("number", type=int, help="Plan number")
    report_parser.add_argument("text", help="What changed")

    for command in ("close", "done"):
        close_parser = subparsers.add_parser(
            command, help="Close a plan and log it" if command == "close" else "Alias of close"
        )
        close_parser.add_argument("number", type=int, help="Plan number")
        close_parser.add_argument(
            "--status", default="done", help="Status word (default: done)"
        )
        close_parser.add_argument(
            "--force", action="store_true", help="Close as done with unchecked items"
        )

    validate_parser = subparsers.add_parser("validate", help="Validate plan files")
    validate_parser.add_argument(
        "path", nargs="?", help="Plan file or directory (default: plan directory)"
    )

    deploy_parser = subparsers.add_parser(
        "deploy", help="Run the deployment checklist"
    )
    deploy_parser.add_argument("--url", help="Published site URL")
    deploy_parser.add_argument("--expect", help="Text the published page must contain")
    deploy_parser.add_argument(
        "--no-push", action="store_true", help="Skip pushing, only watch the site"
    )
    deploy_parser.add_argument(
        "--allow-dirty",
        action="store_true",
        default=None,
        help="Do not fail on uncommitted changes",
    )
    deploy_parser.add_argument(
        "--require-change",
        action="store_true",
        default=None,
        help="Wait until the published page differs from the current one",
    )
    deploy_parser.add_argument("--timeout", type=float, help="Seconds to wait")
    deploy_parser.add_argument("--interval", type=float, help="Seconds between polls")
    deploy_parser.add_argument(
        "-o", "--output", help="Write the filled-in checklist to this file"
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Check that the published page loads"
    )
    verify_parser.add_argument("--url", help="Published site URL")
    verify_parser.add_argument("--expect", help="Text the page must contain")

    return parser


def _store(config: Config) -> PlanStore:
    return PlanStore.from_config(config)


def _print_plan_line(plan: Plan) -> None:
    done, total = plan.progress
    approved = "approved" if plan.is_approved else "not approved"
    state = approved if plan.is_open else plan.status
    print(f"  {plan.path.name:28} {done}/{total}  {state:12}  {plan.title}")


def cmd_init(args, config: Config) -> bool:
    """Write the workflow instructions document."""
    plans = config.plans
    target = Path(plans["instructions_file"])
    if target.exists() and not args.force:
        print(f"✗ {target} already exists (use --force to overwrite)")
        return False

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        render_instructions(
            prefix=plans["prefix"],
            directory=plans["directory"],
            log_file=plans["log_file"],
            number_width=plans["number_width"],
        ),
        encoding="utf-8",
    )
    print(f"✓ Wrote workflow instructions to {target}")
    return True


def cmd_new(args, config: Config) -> bool:
    plan = _store(config).create(args.title, args.items)
    print(f"✓ Created {plan.path}")
    if not plan.items:
        print(f'  Add todo items with: planlog add {plan.number} "step"')
    print(f"  Check in before starting, then run: planlog approve {plan.number}")
    return True


def cmd_list(args, config: Config) -> bool:
    plans = _store(config).list_plans(args.status)
    if not plans:
        print("No plans found")
        return True
    print(f"Plans in {config.plans['directory']}:")
    for plan in plans:
        _print_plan_line(plan)
    return True


def cmd_show(args, config: Config) -> bool:
    plan = _store(config).get(args.number)
    print(plan.path.read_text(encoding="utf-8"), end="")
    return True


def cmd_approve(args, config: Config) -> bool:
    plan = _store(config).approve(args.number)
    print(f"✓ Plan {plan.number} approved on {plan.approved.isoformat()}")
    return True


def cmd_add(args, config: Config) -> bool:
    plan = _store(config).add_item(args.number, args.text)
    print(f"✓ Added item {len(plan.items)} to plan {plan.number}")
    return True


def cmd_check(args, config: Config) -> bool:
    plan = _store(config).check(args.number, args.index, args.message)
    done, total = plan.progress
    print(f"✓ Plan {plan.number}: item {args.index} done ({done}/{total})")
    if plan.is_complete:
        print(f"  All items done. Close it with: planlog close {plan.number}")
    return True


def cmd_report(args, config: Config) -> bool:
    plan = _store(config).report(args.number, args.text)
    print(f"✓ Reported on plan {plan.number} ({len(plan.report)} entries)")
    return True


def cmd_close(args, config: Config) -> bool:
    store = _store(config)
    plan = store.close(args.number, args.status, force=args.force)
    print(f"✓ Closed plan {plan.number} as {plan.status}: {plan.path}")
    print(f"  Logged in {store.log_path}")
    return True


def cmd_validate(args, config: Config) -> bool:
    store = _store(config)
    validator = PlanValidator(store.naming, config.plans["log_file"])
    target = Path(args.path) if args.path else store.directory

    if target.is_dir():
        results = validator.validate_directory(target)
    elif target.exists():
        results = [validator.validate(target)]
    else:
        print(f"✗ Not found: {target}")
        return False

    if not results:
        print(f"No plan files in {target}")
        return True

    valid = True
    for result in results:
        print(f"{'✓' if result else '✗'} {result.message}")
        for warning in result.warnings:
            print(f"  ⚠ {warning}")
        valid = valid and result.is_valid
    return valid


def _print_step(step: StepResult) -> None:
    mark = STEP_MARKS[step.status]
    detail = f": {step.detail}" if step.detail else ""
    print(f"  {mark} {step.title}{detail}")


def cmd_deploy(args, config: Config) -> bool:
    """Run the deployment checklist."""
    settings = DeploySettings.from_config(
        config,
        site_url=args.url,
        expected_text=args.expect,
        allow_dirty=args.allow_dirty,
        require_change=args.require_change,
        timeout=args.timeout,
        interval=args.interval,
    )
    settings.push = not args.no_push

    workflow = f" via {settings.workflow}" if settings.workflow else ""
    print(f"Deploying {settings.remote}/{settings.branch} to {settings.site_url}{workflow}")
    print("=" * 60)

    checklist = DeployChecklist(
        settings,
        repo=GitRepository(Path.cwd()),
        step_callback=_print_step,
    )
    with LogContext("deploy"):
        result = checklist.run()

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(render_markdown(result, settings), encoding="utf-8")
        print(f"\nChecklist written to {output}")

    if result.succeeded:
        print(f"\n✓ Deployment verified: {settings.site_url}")
    else:
        print("\n✗ Deployment checklist failed")
    return result.succeeded


def cmd_verify(args, config: Config) -> bool:
    """Check that the published page loads."""
    url = args.url or config.deploy["site_url"]
    expected = args.expect if args.expect is not None else config.deploy["expected_text"]
    if not url:
        raise SiteConfigError("No site URL configured; set deploy.site_url or pass --url")

    client = StaticSiteClient(timeout=config.deploy["request_timeout"])
    check = client.check(url, expected or None)
    if check.is_live:
        print(f"✓ {url}: {check.describe()}")
        return True
    print(f"✗ {url}: {check.describe()}")
    return False


COMMAND_HANDLERS = {
    "init": cmd_init,
    "new": cmd_new,
    "list": cmd_list,
    "show": cmd_show,
    "approve": cmd_approve,
    "add": cmd_add,
    "check": cmd_check,
    "report": cmd_report,
    "close": cmd_close,
    "done": cmd_close,
    "validate": cmd_validate,
    "deploy": cmd_deploy,
    "verify": cmd_verify,
}


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, dispatch the command and return the exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\nQuick start:")
        print("  planlog init                          # Write workflow instructions")
        print('  planlog new "Title" -i "first step"   # Start a todo list')
        print("  planlog approve 1                     # Check in before starting")
        print('  planlog check 1 1 -m "what changed"   # Tick off and report')
        print("  planlog close 1                       # Rename to -done and log")
        print("  planlog deploy                        # Push main and verify the site")
        return 1

    try:
        config = Config(args.config)
        config.validate()
    except PlanlogError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level=args.log_level or config.logging["level"],
        log_file=args.log_file or config.logging.get("file"),
    )

    handler = COMMAND_HANDLERS[args.command]
    try:
        return 0 if handler(args, config) else 1
    except (PlanlogError, SiteError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130


def main():
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
