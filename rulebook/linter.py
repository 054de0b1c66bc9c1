"""Lint pipeline coordinating the corpus scan and checks."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .checks import Check, CheckContext, LintIssue, LintReport, discover_checks, sort_issues
from .config import RulebookConfig, load_config
from .corpus import CorpusScanner
from .logging import get_logger

REPORT_DIRNAME = ".rulebook"
REPORT_FILENAME = "report.json"


class Linter:
    """Runs every enabled check against a rules corpus."""

    def __init__(
        self,
        scanner: CorpusScanner | None = None,
        checks: Optional[Iterable[Check]] = None,
    ) -> None:
        self.scanner = scanner or CorpusScanner()
        self._check_overrides = list(checks) if checks is not None else None
        self.logger = get_logger("linter")

    def run(self, path: str, *, checks: Sequence[str] | None = None) -> LintReport:
        """Lint the corpus rooted at ``path`` and return the collected issues."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Corpus path not found: {path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Corpus path is not a directory: {path}")
        self.logger.info("Linting %s", root)

        config = load_config(root)
        corpus = self.scanner.scan(str(root), config)
        self.logger.debug("Scanner discovered %d documents", len(corpus.documents))

        selected = self._select_checks(config, checks)
        context = CheckContext(corpus=corpus, config=config)

        issues: List[LintIssue] = []
        for check in selected:
            self.logger.debug("Running check %s", check.name)
            try:
                found = check.run(context)
            except Exception as exc:
                self.logger.exception("Check %s failed", check.name)
                found = [
                    LintIssue(
                        check=check.name,
                        path=".",
                        message=f"Check crashed: {exc.__class__.__name__}: {exc}",
                    )
                ]
            self.logger.debug("Check %s reported %d issues", check.name, len(found))
            issues.extend(found)

        report = LintReport(
            root=corpus.root,
            issues=sort_issues(issues),
            checked=len(corpus.documents),
            checks=[check.name for check in selected],
        )
        self.logger.info(
            "Checked %d documents: %d errors, %d warnings",
            report.checked,
            len(report.errors),
            len(report.warnings),
        )
        return report

    def write_report(self, report: LintReport) -> Path:
        """Persist the report as JSON under the corpus root."""
        output = Path(report.root) / REPORT_DIRNAME / REPORT_FILENAME
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(report.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        self.logger.debug("Report written to %s", output)
        return output

    def _select_checks(
        self, config: RulebookConfig, requested: Sequence[str] | None
    ) -> List[Check]:
        if self._check_overrides is not None:
            if not requested:
                return list(self._check_overrides)
            wanted = {name.lower() for name in requested}
            return [check for check in self._check_overrides if check.name.lower() in wanted]
        return discover_checks(requested or config.checks.enabled or None)


__all__ = ["Linter", "REPORT_DIRNAME", "REPORT_FILENAME"]
