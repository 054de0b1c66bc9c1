"""Tests for the README tree check."""

from __future__ import annotations

from rulebook.checks import ERROR, WARNING, TreeCheck
from tests._fixtures.corpus_builder import VALID_CORPUS, CorpusBuilder


def test_tree_check_passes_for_consistent_corpus(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(VALID_CORPUS)

    assert TreeCheck().run(corpus_builder.context()) == []


def test_tree_check_reports_missing_and_undocumented_files(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "README.md": """\
                # Rules

                ```text
                rules/
                ├── README.md
                ├── missing.md
                ├── cloud/
                │   └── aws.md
                └── docs/
                ```
                """,
            "cloud/aws.md": "# AWS\n",
            "orphan.md": "# Orphan\n",
            "languages/go.md": "# Go\n",
        }
    )

    issues = TreeCheck().run(corpus_builder.context())
    messages = {(issue.path, issue.message) for issue in issues}

    assert messages == {
        ("README.md", "Listed file not found on disk: missing.md"),
        ("README.md", "Listed directory not found on disk: docs/"),
        ("orphan.md", "Not listed in the README.md tree"),
        ("languages/go.md", "Not listed in the README.md tree"),
    }
    assert all(issue.severity == ERROR for issue in issues)
    missing = next(issue for issue in issues if "missing.md" in issue.message)
    assert missing.line == 6


def test_tree_check_flags_directory_listed_as_file(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "README.md": "# Rules\n\n```\nrules/\n├── README.md\n└── cloud\n```\n",
            "cloud/aws.md": "# AWS\n",
        }
    )

    messages = [issue.message for issue in TreeCheck().run(corpus_builder.context())]

    assert "Listed as a file but is a directory: cloud" in messages
    assert "Not listed in the README.md tree" in messages


def test_tree_check_warns_about_duplicates(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "README.md": "# Rules\n\n```\nrules/\n├── README.md\n└── README.md\n```\n",
        }
    )

    issues = TreeCheck().run(corpus_builder.context())

    assert len(issues) == 1
    assert issues[0].severity == WARNING
    assert issues[0].message == "Listed more than once in the tree: README.md"


def test_tree_check_reports_missing_readme(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write({"global_rules.md": "# Global\n"})

    issues = TreeCheck().run(corpus_builder.context())

    assert len(issues) == 1
    assert issues[0].path == "README.md"
    assert issues[0].message.startswith("README not found")


def test_tree_check_uses_configured_readme(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            ".rulebook.yml": "readme: INDEX.md\n",
            "INDEX.md": "# Index\n\n```\nrules/\n└── INDEX.md\n```\n",
        }
    )

    assert TreeCheck().run(corpus_builder.context()) == []


def test_tree_check_reads_readme_with_undecodable_bytes(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(VALID_CORPUS)
    readme = corpus_builder.path() / "README.md"
    readme.write_bytes(readme.read_bytes() + b"\nLegacy note \xff\n")

    assert TreeCheck().run(corpus_builder.context()) == []
