"""Tests for check discovery."""

from __future__ import annotations

from typing import List

import pytest

import rulebook.checks as checks_module
from rulebook.checks import CheckContext, LintIssue, discover_checks


class _StubEntryPoint:
    def __init__(self, name: str, obj: object) -> None:
        self.name = name
        self._obj = obj

    def load(self) -> object:
        return self._obj


class _TodoCheck:
    name = "todo"

    def run(self, context: CheckContext) -> List[LintIssue]:
        return []


def test_discover_checks_returns_builtins_in_order(monkeypatch) -> None:
    monkeypatch.setattr(checks_module, "_iter_entry_points", lambda: [])

    names = [check.name for check in discover_checks()]

    assert names == ["tree", "headings", "secrets", "links"]


def test_discover_checks_honours_enabled_names(monkeypatch) -> None:
    monkeypatch.setattr(checks_module, "_iter_entry_points", lambda: [])

    names = [check.name for check in discover_checks(["Secrets", "tree"])]

    assert names == ["tree", "secrets"]


def test_discover_checks_rejects_unknown_names(monkeypatch) -> None:
    monkeypatch.setattr(checks_module, "_iter_entry_points", lambda: [])

    with pytest.raises(ValueError, match="spelling"):
        discover_checks(["tree", "spelling"])


def test_discover_checks_loads_entry_points(monkeypatch) -> None:
    monkeypatch.setattr(
        checks_module,
        "_iter_entry_points",
        lambda: [_StubEntryPoint("todo", _TodoCheck)],
    )

    checks = discover_checks()

    assert [check.name for check in checks][-1] == "todo"
    assert isinstance(checks[-1], _TodoCheck)


def test_discover_checks_rejects_invalid_entry_points(monkeypatch) -> None:
    monkeypatch.setattr(
        checks_module,
        "_iter_entry_points",
        lambda: [_StubEntryPoint("broken", 42)],
    )

    with pytest.raises(TypeError):
        discover_checks()
