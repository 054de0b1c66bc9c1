"""Keeps the README file tree and the files on disk in agreement."""

from __future__ import annotations

from collections import Counter
from typing import List

from ..tree import TreeError, read_tree
from .base import WARNING, CheckContext, LintIssue


class TreeCheck:
    """Every file listed in the README tree exists on disk, and vice versa."""

    name = "tree"

    def run(self, context: CheckContext) -> List[LintIssue]:
        readme = context.config.readme
        try:
            entries = read_tree(context.readme_path)
        except TreeError as exc:
            return [LintIssue(check=self.name, path=readme, message=str(exc))]

        issues: List[LintIssue] = []
        counts = Counter(entry.path for entry in entries)
        reported_duplicates = set()
        for entry in entries:
            if counts[entry.path] > 1 and entry.path not in reported_duplicates:
                reported_duplicates.add(entry.path)
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=readme,
                        line=entry.line,
                        message=f"Listed more than once in the tree: {entry.path}",
                        severity=WARNING,
                    )
                )

            target = context.root / entry.path
            if entry.is_dir:
                if not target.is_dir():
                    issues.append(
                        LintIssue(
                            check=self.name,
                            path=readme,
                            line=entry.line,
                            message=f"Listed directory not found on disk: {entry.path}/",
                        )
                    )
            elif target.is_dir():
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=readme,
                        line=entry.line,
                        message=f"Listed as a file but is a directory: {entry.path}",
                    )
                )
            elif not target.is_file():
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=readme,
                        line=entry.line,
                        message=f"Listed file not found on disk: {entry.path}",
                    )
                )

        for document in context.corpus.documents:
            if document.path not in counts:
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=document.path,
                        message=f"Not listed in the {readme} tree",
                    )
                )
        return issues


__all__ = ["TreeCheck"]
