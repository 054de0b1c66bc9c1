"""Parsing and rendering of the README file tree."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .corpus import read_text
from .logging import get_logger
from .models import Corpus, TreeEntry

TREE_BEGIN = "<!-- rulebook:begin:tree -->"
TREE_END = "<!-- rulebook:end:tree -->"

_FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_ENTRY_PATTERN = re.compile(r"^((?:[│|][ \u00a0]{3}|[ \u00a0]{4})*)(?:├──|└──|\|--|`--)[ \u00a0]+(.+)$")
_INDENT_UNIT = re.compile(r"[│|][ \u00a0]{3}|[ \u00a0]{4}")
_COMMENT_PATTERN = re.compile(r"\s+(?:#|<-|←).*$")
_TREE_GLYPHS = ("├──", "└──")

logger = get_logger("tree")


class TreeError(RuntimeError):
    """Raised when the README tree is missing or cannot be rewritten."""


Block = Tuple[int, int, List[Tuple[int, str]]]


def _iter_fenced_blocks(lines: Sequence[str]) -> List[Block]:
    """Return ``(open_line, close_line, [(line_number, text), ...])`` per fenced block."""
    blocks: List[Block] = []
    fence: Optional[str] = None
    start = 0
    body: List[Tuple[int, str]] = []
    for number, line in enumerate(lines, start=1):
        match = _FENCE_PATTERN.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                start = number
                body = []
            continue
        if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
            blocks.append((start, number, body))
            fence = None
            continue
        body.append((number, line))
    return blocks


def _marker_span(lines: Sequence[str]) -> Optional[Tuple[int, int]]:
    begin = end = None
    for number, line in enumerate(lines, start=1):
        if TREE_BEGIN in line and begin is None:
            begin = number
        elif TREE_END in line and begin is not None:
            end = number
            break
    if begin is None or end is None:
        return None
    return begin, end


def _select_block(readme_text: str) -> List[Tuple[int, str]]:
    lines = readme_text.splitlines()
    blocks = _iter_fenced_blocks(lines)
    span = _marker_span(lines)
    if span is not None:
        for start, close, body in blocks:
            if start > span[0] and close < span[1]:
                return body
        raise TreeError("README tree markers do not enclose a fenced code block")
    for _, _, body in blocks:
        if any(glyph in text for _, text in body for glyph in _TREE_GLYPHS):
            return body
    raise TreeError("README does not contain a file tree")


def _clean_name(raw: str) -> str:
    name = _COMMENT_PATTERN.sub("", raw.strip())
    return name.strip().strip("`")


def parse_tree(readme_text: str) -> List[TreeEntry]:
    """Return the entries listed in the README tree, with paths relative to the corpus root."""
    entries: List[TreeEntry] = []
    stack: List[str] = []
    last: Optional[Tuple[TreeEntry, int]] = None

    for number, line in _select_block(readme_text):
        match = _ENTRY_PATTERN.match(line.rstrip())
        if not match:
            continue
        name = _clean_name(match.group(2))
        if not name or name in {".", "..."}:
            continue
        depth = len(_INDENT_UNIT.findall(match.group(1)))

        # A child one level deeper turns the previous bare name into a directory.
        if last is not None and depth == last[1] + 1 and not last[0].is_dir:
            last[0].is_dir = True
            stack = stack[: last[1]] + [last[0].path.rsplit("/", 1)[-1]]

        if depth > len(stack):
            logger.debug("Tree line %d is nested too deeply; clamping to depth %d", number, len(stack))
            depth = len(stack)
        stack = stack[:depth]

        is_dir = name.endswith("/")
        name = name.rstrip("/")
        entry = TreeEntry(path="/".join([*stack, name]), is_dir=is_dir, line=number)
        entries.append(entry)
        if is_dir:
            stack.append(name)
        last = (entry, depth)

    return entries


def read_tree(readme_path: Path) -> List[TreeEntry]:
    """Parse the tree from a README on disk."""
    if not readme_path.is_file():
        raise TreeError(f"README not found: {readme_path}")
    return parse_tree(read_text(readme_path))


def _build_nodes(paths: Sequence[str]) -> Dict[str, object]:
    root: Dict[str, object] = {}
    for path in paths:
        parts = path.split("/")
        if any(part.startswith(".") for part in parts):
            continue
        node = root
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node.setdefault(parts[-1], None)
    return root


def render_tree(corpus: Corpus, root_label: str) -> str:
    """Render the corpus files as a fenced box-drawing tree."""
    lines = [root_label]

    def _walk(node: Dict[str, object], prefix: str) -> None:
        files = sorted(
            (name for name, child in node.items() if child is None),
            key=lambda name: (name != "README.md", name),
        )
        directories = sorted(name for name, child in node.items() if child is not None)
        items = [*files, *directories]
        for index, name in enumerate(items):
            is_last = index == len(items) - 1
            connector = "└── " if is_last else "├── "
            child = node[name]
            if isinstance(child, dict):
                lines.append(f"{prefix}{connector}{name}/")
                _walk(child, prefix + ("    " if is_last else "│   "))
            else:
                lines.append(f"{prefix}{connector}{name}")

    _walk(_build_nodes(corpus.files), "")
    return "```text\n" + "\n".join(lines) + "\n```"


def replace_tree_block(readme_text: str, rendered: str) -> str:
    """Replace the managed tree block between the README markers."""
    begin = readme_text.find(TREE_BEGIN)
    end = readme_text.find(TREE_END, begin + len(TREE_BEGIN)) if begin != -1 else -1
    if begin == -1 or end == -1:
        raise TreeError(
            f"README is missing the {TREE_BEGIN} / {TREE_END} markers, or they are out of order"
        )
    pre = readme_text[:begin]
    post = readme_text[end + len(TREE_END) :]
    return f"{pre}{TREE_BEGIN}\n{rendered.strip()}\n{TREE_END}{post}"


__all__ = [
    "TREE_BEGIN",
    "TREE_END",
    "TreeError",
    "parse_tree",
    "read_tree",
    "render_tree",
    "replace_tree_block",
]
