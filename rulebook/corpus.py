"""Corpus scanning utilities for the rules directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from .config import RulebookConfig, load_config
from .logging import get_logger
from .markdown import extract_title
from .models import Corpus, Document

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".rulebook",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

MARKDOWN_SUFFIXES = (".md", ".markdown")

logger = get_logger("corpus")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .rulebook.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return not self.directory_only or is_dir
            # Files below an ignored directory are ignored with it.
            return rel_path.startswith(f"{self.pattern}/")

        parts = rel_path.split("/")
        for index, part in enumerate(parts):
            if not fnmatchcase(part, self.pattern):
                continue
            is_last = index == len(parts) - 1
            if not self.directory_only or not is_last or is_dir:
                return True
        return False


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, config: RulebookConfig) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in config.exclude_paths:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if should_ignore(rel_path, True, rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def _detect_category(rel_path: str) -> str | None:
    parts = rel_path.split("/")
    return parts[0] if len(parts) > 1 else None


def is_markdown(path: str) -> bool:
    return path.lower().endswith(MARKDOWN_SUFFIXES)


def decode_file(path: Path) -> Tuple[str, bool]:
    """Return the decoded text and whether undecodable bytes had to be replaced."""
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8"), False
    except UnicodeDecodeError:
        logger.warning("%s is not valid UTF-8; undecodable bytes were replaced", path)
        return raw.decode("utf-8", errors="replace"), True


def read_text(path: Path) -> str:
    """Read a document, replacing undecodable bytes instead of failing."""
    return decode_file(path)[0]


def is_binary(path: Path, *, probe_size: int = 8192) -> bool:
    with path.open("rb") as handle:
        return b"\0" in handle.read(probe_size)


class CorpusScanner:
    """Walks the rules directory to produce a normalized corpus."""

    def scan(self, root: str, config: RulebookConfig | None = None) -> Corpus:
        """Return a corpus describing every non-ignored file and Markdown document."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Corpus path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Corpus path is not a directory: {root}")

        if config is None:
            config = load_config(root_path)

        rules = _load_ignore_rules(root_path, config)

        files: List[str] = []
        documents: List[Document] = []
        for path in _iter_files(root_path, rules):
            rel_path = path.relative_to(root_path).as_posix()
            files.append(rel_path)
            if not is_markdown(rel_path):
                continue
            body, lossy = decode_file(path)
            documents.append(
                Document(
                    path=rel_path,
                    category=_detect_category(rel_path),
                    title=extract_title(body),
                    body=body,
                    size=path.stat().st_size,
                    lossy=lossy,
                )
            )

        files.sort()
        documents.sort(key=lambda doc: doc.path)
        logger.debug("Scanned %s: %d files, %d documents", root_path, len(files), len(documents))
        return Corpus(root=str(root_path), documents=documents, files=files)
