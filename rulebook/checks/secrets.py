"""Secret-looking pattern detection for rule files."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

from ..corpus import is_binary, read_text
from ..logging import get_logger
from .base import CheckContext, LintIssue

logger = get_logger("checks.secrets")

# Each pattern either captures the secret value in group 1 or matches it whole.
SECRET_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("AWS access key id", re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b")),
    (
        "AWS secret access key",
        re.compile(r"(?i)aws_?secret_?access_?key\s*[:=]\s*[\"']?([A-Za-z0-9/+=]{40})(?![A-Za-z0-9/+=])"),
    ),
    (
        "Private key",
        re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |PGP |ENCRYPTED )?PRIVATE KEY(?: BLOCK)?-----"),
    ),
    ("GitHub token", re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}\b")),
    ("Slack token", re.compile(r"\bxox[baprs]-[A-Za-z0-9-]{10,}")),
    (
        "Generic credential",
        re.compile(r"(?i)\b(?:api[_-]?key|secret|token|password)\b\s*[:=]\s*[\"']([^\"'\s]{8,})[\"']"),
    ),
)

# Values that are obviously templated rather than real credentials.
_PLACEHOLDER_HINTS = ("${", "{{", "<", "example", "xxxx", "****", "changeme", "placeholder", "your")


def mask(value: str) -> str:
    """Return a preview that never exposes the full value."""
    if len(value) > 10:
        return value[:4] + "…" + value[-4:]
    return value[:2] + "…"


def _is_placeholder(value: str) -> bool:
    lowered = value.lower()
    return any(hint in lowered for hint in _PLACEHOLDER_HINTS)


def find_secrets(
    text: str, *, allow: Sequence[str] = ()
) -> Iterable[Tuple[str, str, int]]:
    """Yield ``(label, value, line_number)`` for every secret-looking match."""
    for number, line in enumerate(text.splitlines(), start=1):
        for label, pattern in SECRET_PATTERNS:
            for match in pattern.finditer(line):
                value = match.group(1) if pattern.groups else match.group(0)
                if any(allowed and allowed in value for allowed in allow):
                    continue
                if label == "Generic credential" and _is_placeholder(value):
                    continue
                yield label, value, number


class SecretCheck:
    """No file in the corpus contains a hardcoded secret-looking value."""

    name = "secrets"

    def run(self, context: CheckContext) -> List[LintIssue]:
        allow = context.config.secrets.allow
        bodies = {document.path: document.body for document in context.corpus.documents}
        issues: List[LintIssue] = []
        for rel_path in context.corpus.files:
            text = bodies.get(rel_path)
            if text is None:
                path = context.root / rel_path
                if is_binary(path):
                    logger.debug("Skipping binary file %s", rel_path)
                    continue
                text = read_text(path)
            for label, value, line in find_secrets(text, allow=allow):
                issues.append(
                    LintIssue(
                        check=self.name,
                        path=rel_path,
                        line=line,
                        message=f"{label} detected ({mask(value)})",
                    )
                )
        return issues


__all__ = ["SECRET_PATTERNS", "SecretCheck", "find_secrets", "mask"]
