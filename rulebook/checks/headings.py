"""Heading checks for rule files."""

from __future__ import annotations

from typing import List

from ..markdown import iter_headings
from .base import WARNING, CheckContext, LintIssue


class HeadingCheck:
    """Every Markdown document carries at least one top-level heading."""

    name = "headings"

    def run(self, context: CheckContext) -> List[LintIssue]:
        issues: List[LintIssue] = []
        for document in context.corpus.documents:
            if document.title is None:
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=document.path,
                        message="Missing top-level heading",
                    )
                )
                continue
            headings = list(iter_headings(document.body))
            first_level, _, first_line = headings[0]
            if first_level != 1:
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=document.path,
                        line=first_line,
                        message="First heading is not a top-level heading",
                        severity=WARNING,
                    )
                )
        return issues


__all__ = ["HeadingCheck"]
