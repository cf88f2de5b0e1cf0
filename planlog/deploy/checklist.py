"""Deployment checklist for a static site published by CI on push.

The CI workflow and the hosting platform are external. The checklist only
pushes the deploy branch and watches the public URL until the new build is
served.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..core.config import Config
from ..core.error_handling import DeployError
from .exceptions import (
    SiteConfigError,
    SiteConnectionError,
    SiteError,
    SiteTimeoutError,
)
from .git import GitRepository
from .monitor import DeployMonitor
from .site_client import StaticSiteClient

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    """Outcome of a checklist step."""

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    WARNING = "warning"


@dataclass
class StepResult:
    key: str
    title: str
    status: StepStatus = StepStatus.PENDING
    detail: str = ""
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status in (StepStatus.PASSED, StepStatus.WARNING)


@dataclass
class ChecklistResult:
    steps: List[StepResult]
    started: datetime = field(default_factory=datetime.now)
    finished: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return not any(step.status == StepStatus.FAILED for step in self.steps)

    def step(self, key: str) -> StepResult:
        for step in self.steps:
            if step.key == key:
                return step
        raise KeyError(key)


@dataclass
class DeploySettings:
    """Deployment parameters, normally taken from the ``[deploy]`` section."""

    site_url: str
    expected_text: str = ""
    remote: str = "origin"
    branch: str = "main"
    workflow: str = ""
    timeout: float = 600
    interval: float = 15
    request_timeout: float = 10
    require_change: bool = False
    allow_dirty: bool = False
    push: bool = True

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "DeploySettings":
        deploy = config.deploy
        values = {
            "site_url": deploy["site_url"],
            "expected_text": deploy["expected_text"],
            "remote": deploy["remote"],
            "branch": deploy["branch"],
            "workflow": deploy["workflow"],
            "timeout": deploy["timeout"],
            "interval": deploy["interval"],
            "request_timeout": deploy["request_timeout"],
            "require_change": deploy["require_change"],
            "allow_dirty": deploy["allow_dirty"],
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


STEPS: List[Tuple[str, str]] = [
    ("branch", "On the deploy branch"),
    ("clean", "Working tree is clean"),
    ("baseline", "Record the currently published page"),
    ("push", "Push the deploy branch"),
    ("publish", "Wait for the CI workflow to publish"),
    ("verify", "Published page loads with the expected content"),
]


class DeployChecklist:
    """Runs the deployment checklist step by step."""

    def __init__(
        self,
        settings: DeploySettings,
        repo: Optional[GitRepository] = None,
        client: Optional[StaticSiteClient] = None,
        monitor: Optional[DeployMonitor] = None,
        step_callback: Optional[Callable[[StepResult], None]] = None,
    ):
        self.settings = settings
        self.repo = repo or GitRepository()
        self.client = client or StaticSiteClient(timeout=settings.request_timeout)
        self.monitor = monitor or DeployMonitor(
            self.client, interval=settings.interval, timeout=settings.timeout
        )
        self.step_callback = step_callback
        self._baseline_digest: Optional[str] = None

    def run(self) -> ChecklistResult:
        """Run all steps; a failed step skips the rest.

        Raises:
            SiteConfigError: If no site URL is configured
        """
        if not self.settings.site_url:
            raise SiteConfigError(
                "No site URL configured; set deploy.site_url or pass --url"
            )

        result = ChecklistResult([StepResult(key, title) for key, title in STEPS])
        self._baseline_digest = None
        failed = False

        for step in result.steps:
            if failed:
                step.status = StepStatus.SKIPPED
                step.detail = "not run after an earlier failure"
            else:
                self._run_step(step)
                failed = step.status == StepStatus.FAILED
            if self.step_callback:
                self.step_callback(step)

        result.finished = datetime.now()
        outcome = "succeeded" if result.succeeded else "failed"
        logger.info(f"Deployment checklist {outcome} for {self.settings.site_url}")
        return result

    def _run_step(self, step: StepResult) -> None:
        handler = getattr(self, f"_step_{step.key}")
        start = time.monotonic()
        try:
            step.status, step.detail = handler()
        except (DeployError, SiteError) as e:
            step.status = StepStatus.FAILED
            step.detail = str(e)
            logger.error(f"Step '{step.title}' failed: {e}")
        step.duration = time.monotonic() - start

    def _step_branch(self) -> Tuple[StepStatus, str]:
        branch = self.repo.current_branch()
        if branch != self.settings.branch:
            return (
                StepStatus.FAILED,
                f"on '{branch}', expected '{self.settings.branch}'",
            )
        return StepStatus.PASSED, branch

    def _step_clean(self) -> Tuple[StepStatus, str]:
        changed = self.repo.changed_files()
        if not changed:
            return StepStatus.PASSED, "no uncommitted changes"
        detail = f"{len(changed)} uncommitted change(s): {', '.join(changed[:5])}"
        if self.settings.allow_dirty:
            return StepStatus.WARNING, detail + " (not part of the push)"
        return StepStatus.FAILED, detail

    def _step_baseline(self) -> Tuple[StepStatus, str]:
        if not self.settings.require_change:
            return StepStatus.SKIPPED, "page change not required"
        try:
            check = self.client.fetch(self.settings.site_url)
        except (SiteConnectionError, SiteTimeoutError) as e:
            return StepStatus.WARNING, f"site unreachable before push: {e}"
        if check.status_code != 200:
            return StepStatus.WARNING, f"no published page yet ({check.describe()})"
        self._baseline_digest = check.digest
        return StepStatus.PASSED, f"sha256 {check.digest[:12]}"

    def _step_push(self) -> Tuple[StepStatus, str]:
        if not self.settings.push:
            return StepStatus.SKIPPED, "push disabled"
        if self.repo.remote_url(self.settings.remote) is None:
            return StepStatus.FAILED, f"remote '{self.settings.remote}' is not configured"
        commit = self.repo.head_commit()
        self.repo.push(self.settings.remote, self.settings.branch)
        return (
            StepStatus.PASSED,
            f"{commit[:12]} -> {self.settings.remote}/{self.settings.branch}",
        )

    def _step_publish(self) -> Tuple[StepStatus, str]:
        check = self.monitor.wait_until_live(
            self.settings.site_url,
            self.settings.expected_text or None,
            self._baseline_digest,
        )
        return StepStatus.PASSED, check.describe()

    def _step_verify(self) -> Tuple[StepStatus, str]:
        check = self.client.check(
            self.settings.site_url, self.settings.expected_text or None
        )
        if not check.is_live:
            return StepStatus.FAILED, check.describe()
        return StepStatus.PASSED, check.describe()


def render_markdown(result: ChecklistResult, settings: DeploySettings) -> str:
    """Render a checklist run as a markdown document."""
    workflow = settings.workflow or "CI workflow"
    lines = [
        f"# Deployment checklist: {settings.site_url}",
        "",
        f"- Branch: {settings.remote}/{settings.branch}",
        f"- Workflow: {workflow}",
        f"- Started: {result.started.strftime('%Y-%m-%d %H:%M:%S')}",
        f"- Result: {'succeeded' if result.succeeded else 'failed'}",
        "",
        "## Steps",
        "",
    ]
    for step in result.steps:
        mark = "x" if step.ok else " "
        line = f"- [{mark}] {step.title}"
        if step.status not in (StepStatus.PASSED, StepStatus.PENDING):
            line += f" ({step.status.value})"
        if step.detail:
            line += f": {step.detail}"
        lines.append(line)
    if settings.expected_text:
        lines.extend(["", f"Expected page text: `{settings.expected_text}`"])
    lines.append("")
    return "\n".join(lines)
