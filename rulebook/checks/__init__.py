"""Built-in corpus checks and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import ERROR, WARNING, Check, CheckContext, LintIssue, LintReport, sort_issues
from .headings import HeadingCheck
from .links import LinkCheck
from .secrets import SecretCheck
from .tree_sync import TreeCheck

_ENTRY_POINT_GROUP = "rulebook.checks"

_BUILTIN_FACTORIES: dict[str, Callable[[], Check]] = {
    "tree": TreeCheck,
    "headings": HeadingCheck,
    "secrets": SecretCheck,
    "links": LinkCheck,
}


def builtin_check_names() -> List[str]:
    return list(_BUILTIN_FACTORIES)


def discover_checks(enabled: Sequence[str] | None = None) -> List[Check]:
    """Return instantiated checks, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled:
        enabled_set = {name.lower() for name in enabled}

    checks: List[Check] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Check]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not _is_check(instance):
            raise TypeError(f"Check factory for '{name}' did not return a check instance")
        checks.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to load check entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Check:
            return _coerce_check(obj)

        _add(entry.name, _factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown checks requested: {', '.join(sorted(missing))}")

    return checks


def _is_check(obj: object) -> bool:
    return isinstance(getattr(obj, "name", None), str) and callable(getattr(obj, "run", None))


def _coerce_check(obj: object) -> Check:
    if isinstance(obj, type):
        obj = obj()
    elif not _is_check(obj) and callable(obj):
        obj = obj()
    if _is_check(obj):
        return obj  # type: ignore[return-value]
    raise TypeError("Check entry point must be a check class, instance or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Check",
    "CheckContext",
    "ERROR",
    "HeadingCheck",
    "LinkCheck",
    "LintIssue",
    "LintReport",
    "SecretCheck",
    "TreeCheck",
    "WARNING",
    "builtin_check_names",
    "discover_checks",
    "sort_issues",
]
