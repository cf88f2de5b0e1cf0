"""Validation for plan files."""

from pathlib import Path
from typing import List, Optional

from ..core.error_handling import PlanFormatError
from ..plans.document import FENCE, HEADER_RE, parse_plan
from ..plans.naming import PlanNaming


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        is_valid: bool,
        message: str,
        warnings: Optional[List[str]] = None,
        path: Optional[Path] = None,
    ):
        self.is_valid = is_valid
        self.message = message
        self.warnings = warnings or []
        self.path = path

    def __bool__(self) -> bool:
        return self.is_valid


class PlanValidator:
    """Validator for plan files."""

    def __init__(self, naming: Optional[PlanNaming] = None, log_file: str = "LOG.md"):
        self.naming = naming or PlanNaming()
        self.log_file = log_file

    def validate(self, plan_path: str | Path) -> ValidationResult:
        """Validate a plan file's name, header, status and structure."""
        plan_path = Path(plan_path)

        name = self.naming.parse(plan_path.name)
        if name is None:
            return ValidationResult(
                False,
                f"File name does not follow the plan naming scheme: {plan_path.name}",
                path=plan_path,
            )

        try:
            text = plan_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return ValidationResult(False, f"Cannot read {plan_path}: {e}", path=plan_path)

        fences = sum(1 for line in text.splitlines() if line.strip().startswith(FENCE))
        if fences % 2:
            return ValidationResult(
                False, f"Unmatched code fence in {plan_path.name}", path=plan_path
            )

        try:
            plan = parse_plan(text)
        except PlanFormatError as e:
            return ValidationResult(False, f"{plan_path.name}: {e}", path=plan_path)

        if plan.number != name.number:
            return ValidationResult(
                False,
                f"{plan_path.name}: header says plan {plan.number}, "
                f"file name says {name.number}",
                path=plan_path,
            )
        if plan.status != name.status:
            return ValidationResult(
                False,
                f"{plan_path.name}: status line says '{plan.status}', "
                f"file name says '{name.status}'",
                path=plan_path,
            )

        warnings = []
        if not plan.items:
            warnings.append("Plan has no todo items")
        if not plan.title:
            warnings.append("Plan has no title")
        if plan.status == "done" and not plan.is_complete and plan.items:
            done, total = plan.progress
            warnings.append(f"Closed as done with unchecked items ({done}/{total})")
        if plan.is_open and plan.is_complete:
            warnings.append("Every item is done but the plan is still open")
        if not plan.is_open and not plan.report:
            warnings.append("Closed plan has no report entries")
        headers = sum(1 for line in text.splitlines() if HEADER_RE.match(line))
        if headers > 1:
            warnings.append("More than one plan header found")

        return ValidationResult(
            True,
            f"Plan validation passed: {plan_path.name}",
            warnings=warnings,
            path=plan_path,
        )

    def validate_directory(self, directory: str | Path) -> List[ValidationResult]:
        """Validate every plan-named markdown file in a directory."""
        directory = Path(directory)
        results = []
        for path in sorted(directory.glob("*.md")):
            if path.name == self.log_file:
                continue
            if self.naming.parse(path.name) is None:
                continue
            results.append(self.validate(path))
        return results
