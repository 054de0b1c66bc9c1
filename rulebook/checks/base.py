"""Core check data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from rulebook.config import RulebookConfig
    from rulebook.models import Corpus

ERROR = "error"
WARNING = "warning"


@dataclass
class LintIssue:
    """Represents a single finding against a document or the README tree."""

    check: str
    path: str
    message: str
    line: Optional[int] = None
    severity: str = ERROR

    def sort_key(self) -> tuple:
        return (self.path, self.line or 0, self.check, self.message)

    def format(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else self.path
        return f"{location}: [{self.check}] {self.severity}: {self.message}"


@dataclass
class LintReport:
    """Aggregated outcome of a lint run."""

    root: str
    issues: List[LintIssue] = field(default_factory=list)
    checked: int = 0
    checks: List[str] = field(default_factory=list)

    @property
    def errors(self) -> List[LintIssue]:
        return [issue for issue in self.issues if issue.severity == ERROR]

    @property
    def warnings(self) -> List[LintIssue]:
        return [issue for issue in self.issues if issue.severity == WARNING]

    def ok(self, *, strict: bool = False) -> bool:
        if strict:
            return not self.issues
        return not self.errors

    def to_dict(self) -> Dict[str, object]:
        return {
            "root": self.root,
            "checked": self.checked,
            "checks": list(self.checks),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [asdict(issue) for issue in self.issues],
        }


class Check(Protocol):
    """Protocol implemented by corpus checks."""

    name: str

    def run(self, context: "CheckContext") -> List[LintIssue]:
        """Run the check and return any issues."""


@dataclass
class CheckContext:
    """Context shared with checks for a single lint run."""

    corpus: "Corpus"
    config: "RulebookConfig"

    @property
    def root(self) -> Path:
        return Path(self.corpus.root)

    @property
    def readme_path(self) -> Path:
        return self.root / self.config.readme


def sort_issues(issues: Sequence[LintIssue]) -> List[LintIssue]:
    return sorted(issues, key=LintIssue.sort_key)
