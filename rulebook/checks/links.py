"""Cross-reference validation between rule files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Set
from urllib.parse import unquote

from ..markdown import iter_code_references, iter_headings, iter_links
from ..models import Document
from .base import WARNING, CheckContext, LintIssue

_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "ftp://", "//")


def slugify(title: str) -> str:
    """Return the GitHub-style anchor for a heading title."""
    slug = title.strip().lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    return re.sub(r"\s", "-", slug)


def heading_anchors(document: Document) -> Set[str]:
    anchors: Set[str] = set()
    seen: Dict[str, int] = {}
    for _, title, _ in iter_headings(document.body):
        base = slugify(title)
        count = seen.get(base, 0)
        seen[base] = count + 1
        anchors.add(base if count == 0 else f"{base}-{count}")
    return anchors


class LinkCheck:
    """Relative links and `*.md` references point at files that exist."""

    name = "links"

    def run(self, context: CheckContext) -> List[LintIssue]:
        root = context.root
        documents = {document.path: document for document in context.corpus.documents}
        names = {document.name for document in context.corpus.documents}
        anchor_cache: Dict[str, Set[str]] = {}

        def _anchors(path: str) -> Set[str]:
            if path not in anchor_cache:
                anchor_cache[path] = heading_anchors(documents[path])
            return anchor_cache[path]

        issues: List[LintIssue] = []
        for document in context.corpus.documents:
            base_dir = (root / document.path).parent

            for target, line in iter_links(document.body):
                if not target:
                    issues.append(
                        LintIssue(check=self.name, path=document.path, line=line, message="Empty link target")
                    )
                    continue
                if target.lower().startswith(_EXTERNAL_PREFIXES):
                    continue

                path_part, _, anchor = target.partition("#")
                path_part = unquote(path_part.split("?", 1)[0])

                if not path_part:
                    if anchor and anchor not in _anchors(document.path):
                        issues.append(
                            LintIssue(
                                check=self.name,
                                path=document.path,
                                line=line,
                                message=f"Anchor not found in document: #{anchor}",
                                severity=WARNING,
                            )
                        )
                    continue

                if path_part.startswith("/"):
                    candidate = root / path_part.lstrip("/")
                else:
                    candidate = base_dir / path_part
                if not candidate.exists():
                    issues.append(
                        LintIssue(
                            check=self.name,
                            path=document.path,
                            line=line,
                            message=f"Link target not found: {target}",
                        )
                    )
                    continue

                rel_target = _relative_to(candidate, root)
                if anchor and rel_target in documents and anchor not in _anchors(rel_target):
                    issues.append(
                        LintIssue(
                            check=self.name,
                            path=document.path,
                            line=line,
                            message=f"Anchor not found in {rel_target}: #{anchor}",
                            severity=WARNING,
                        )
                    )

            if not context.config.links.check_code_references:
                continue
            for reference, line in iter_code_references(document.body):
                if (base_dir / reference).exists() or (root / reference).exists():
                    continue
                if "/" not in reference and reference in names:
                    continue
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=document.path,
                        line=line,
                        message=f"Referenced document not found: {reference}",
                        severity=WARNING,
                    )
                )
        return issues


def _relative_to(candidate: Path, root: Path) -> str:
    try:
        return candidate.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return ""


__all__ = ["LinkCheck", "heading_anchors", "slugify"]
