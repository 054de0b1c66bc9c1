"""Tests for rulebook.corpus."""

from __future__ import annotations

from pathlib import Path

import pytest

from rulebook.config import ConfigError
from rulebook.corpus import CorpusScanner, build_ignore_rule, should_ignore
from tests._fixtures.corpus_builder import CorpusBuilder


def test_scan_builds_documents_with_categories_and_titles(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "README.md": "# Rules\n",
            "global_rules.md": "# Global Rules\n\nText\n",
            "languages/python.md": "Python\n======\n\n- Use pathlib.\n",
            "cloud/aws.md": "No heading here.\n",
            "cloud/diagram.png": "not really a png\n",
            ".venv/ignored.md": "# Ignored\n",
            ".git/HEAD": "ref: refs/heads/main\n",
        }
    )

    corpus = corpus_builder.scan()

    assert corpus.root == str(corpus_builder.path().resolve())
    assert [doc.path for doc in corpus.documents] == [
        "README.md",
        "cloud/aws.md",
        "global_rules.md",
        "languages/python.md",
    ]
    assert "cloud/diagram.png" in corpus.files
    assert ".venv/ignored.md" not in corpus.files
    assert ".git/HEAD" not in corpus.files

    python = corpus.get("languages/python.md")
    assert python is not None
    assert python.category == "languages"
    assert python.title == "Python"
    assert python.name == "python.md"
    assert python.size == len("Python\n======\n\n- Use pathlib.\n")

    assert corpus.get("global_rules.md").category is None
    assert corpus.get("cloud/aws.md").title is None
    assert corpus.categories() == ["cloud", "languages"]
    assert [doc.path for doc in corpus.by_category()["cloud"]] == ["cloud/aws.md"]


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="missing"):
        CorpusScanner().scan(str(missing))


def test_scan_rejects_file_path(tmp_path: Path) -> None:
    target = tmp_path / "README.md"
    target.write_text("# Title\n", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        CorpusScanner().scan(str(target))


def test_scan_respects_gitignore(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            ".gitignore": "drafts/\n*.bak.md\n!keep.bak.md\n",
            "README.md": "# Rules\n",
            "drafts/wip.md": "# WIP\n",
            "notes.bak.md": "# Backup\n",
            "keep.bak.md": "# Kept\n",
        }
    )

    paths = {doc.path for doc in corpus_builder.scan().documents}

    assert paths == {"README.md", "keep.bak.md"}


def test_scan_respects_config_exclude_paths(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            ".rulebook.yml": "exclude_paths:\n  - /archive/\n  - '*.generated.md'\n",
            "README.md": "# Rules\n",
            "archive/old.md": "# Old\n",
            "security/archive/still_here.md": "# Nested archive is not anchored\n",
            "report.generated.md": "# Generated\n",
        }
    )

    paths = {doc.path for doc in corpus_builder.scan().documents}

    assert paths == {"README.md", "security/archive/still_here.md"}


def test_scan_replaces_undecodable_bytes(corpus_builder: CorpusBuilder) -> None:
    target = corpus_builder.path() / "latin1.md"
    target.write_bytes("# Caf\xe9\n".encode("latin-1"))

    corpus = corpus_builder.scan()

    document = corpus.get("latin1.md")
    assert document is not None
    assert document.title == "Caf\ufffd"
    assert document.lossy is True


def test_directory_only_rule_does_not_match_files() -> None:
    rule = build_ignore_rule("build/")
    assert rule is not None
    assert should_ignore("build", True, [rule]) is True
    assert should_ignore("build", False, [rule]) is False
    assert should_ignore("docs/build", True, [rule]) is True


def test_scan_surfaces_malformed_config(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write({"README.md": "# Rules\n", ".rulebook.yml": "readme: [unclosed\n"})

    with pytest.raises(ConfigError, match="Failed to parse"):
        corpus_builder.scan()


def test_scan_marks_valid_documents_as_lossless(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write({"README.md": "# Règles\n"})

    document = corpus_builder.scan().get("README.md")

    assert document is not None
    assert document.lossy is False
