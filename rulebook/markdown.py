"""Markdown parsing and formatting helpers for rule files."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

_ATX_PATTERN = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.+?)[ \t]*$")
_ATX_CLOSING = re.compile(r"[ \t]+#+$")
_SETEXT_PATTERN = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_SPAN_PATTERN = re.compile(r"(`+)(.+?)\1")
_LINK_PATTERN = re.compile(r"!?\[[^\]]*\]\(\s*<?([^)\s>]*)>?(?:\s+[\"'][^\"']*[\"'])?\s*\)")
_CODE_REFERENCE_PATTERN = re.compile(r"`([^`\s*<>]+\.(?:md|markdown))`")
_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s")

_PUNCTUATION = {
    "—": "-",
    "–": "-",
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
    "…": "...",
}


def iter_prose_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` for lines outside fenced code blocks."""
    fence: Optional[str] = None
    for number, line in enumerate(text.splitlines(), start=1):
        match = _FENCE_PATTERN.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                continue
            yield number, line
        elif match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
            fence = None


def iter_headings(text: str) -> Iterator[Tuple[int, str, int]]:
    """Yield ``(level, title, line_number)`` for ATX and setext headings."""
    previous: Optional[Tuple[int, str]] = None
    for number, line in iter_prose_lines(text):
        atx = _ATX_PATTERN.match(line)
        if atx:
            title = _ATX_CLOSING.sub("", atx.group(2)).strip()
            if title and title.strip("#"):
                yield len(atx.group(1)), title, number
            previous = None
            continue

        setext = _SETEXT_PATTERN.match(line)
        if (
            setext
            and previous is not None
            and previous[0] == number - 1
            and not _LIST_MARKER.match(previous[1])
        ):
            level = 1 if setext.group(1).startswith("=") else 2
            yield level, previous[1].strip(), previous[0]
            previous = None
            continue

        previous = (number, line) if line.strip() else None


def extract_title(text: str) -> Optional[str]:
    """Return the first top-level heading, or ``None`` when the document has none."""
    for level, title, _ in iter_headings(text):
        if level == 1:
            return title
    return None


def _strip_code_spans(line: str) -> str:
    return _CODE_SPAN_PATTERN.sub(lambda match: " " * len(match.group(0)), line)


def iter_links(text: str) -> Iterator[Tuple[str, int]]:
    """Yield ``(target, line_number)`` for inline links and images outside code."""
    for number, line in iter_prose_lines(text):
        for match in _LINK_PATTERN.finditer(_strip_code_spans(line)):
            yield match.group(1).strip(), number


def iter_code_references(text: str) -> Iterator[Tuple[str, int]]:
    """Yield inline code spans that name a Markdown file, e.g. `global_rules.md`."""
    for number, line in iter_prose_lines(text):
        for match in _CODE_REFERENCE_PATTERN.finditer(line):
            reference = match.group(1)
            if "://" in reference:
                continue
            yield reference, number


class MarkdownFormatter:
    """Normalises whitespace, headings and punctuation in rule files."""

    def format(self, markdown: str) -> str:
        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        cleaned: List[str] = []
        fence: Optional[str] = None
        previous_blank = False

        for line in normalized.split("\n"):
            stripped = line.rstrip()
            match = _FENCE_PATTERN.match(stripped)
            if fence is not None:
                if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                    fence = None
                cleaned.append(stripped)
                previous_blank = False
                continue
            if match:
                fence = match.group(1)
                cleaned.append(stripped)
                previous_blank = False
                continue

            if not stripped:
                if previous_blank or not cleaned:
                    continue
                previous_blank = True
                cleaned.append("")
                continue

            if _ATX_PATTERN.match(stripped) and cleaned and cleaned[-1] != "":
                cleaned.append("")

            cleaned.append(self._normalise_punctuation(stripped))
            previous_blank = False

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return "\n".join(cleaned) + "\n"

    @staticmethod
    def _normalise_punctuation(line: str) -> str:
        # Code spans keep their characters verbatim.
        output: List[str] = []
        position = 0
        for match in _CODE_SPAN_PATTERN.finditer(line):
            prose = line[position : match.start()]
            output.append("".join(_PUNCTUATION.get(char, char) for char in prose))
            output.append(match.group(0))
            position = match.end()
        output.append("".join(_PUNCTUATION.get(char, char) for char in line[position:]))
        return "".join(output)


__all__ = [
    "MarkdownFormatter",
    "extract_title",
    "iter_code_references",
    "iter_headings",
    "iter_links",
    "iter_prose_lines",
]
