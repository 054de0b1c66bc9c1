"""CLI entrypoints for rulebook commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Tuple

from .checks import builtin_check_names
from .config import ConfigError, RulebookConfig, load_config
from .corpus import CorpusScanner, decode_file
from .linter import Linter
from .logging import configure_logging, get_logger
from .markdown import MarkdownFormatter
from .models import Corpus
from .tree import TreeError, render_tree, replace_tree_block

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the rules directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulebook",
        description="Lint and maintain a corpus of Markdown rule files.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        metavar="PATH",
        help="Also write a DEBUG-level log of the run to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Run content checks against the rules directory.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_path_argument(check_parser)
    check_parser.add_argument(
        "--check",
        dest="checks",
        action="append",
        metavar="NAME",
        help=f"Run only the named check (repeatable). Built-in: {', '.join(builtin_check_names())}.",
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as failures.",
    )
    check_parser.add_argument(
        "--report",
        action="store_true",
        help="Write a JSON report to .rulebook/report.json under the rules directory.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List rule files grouped by category.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_path_argument(list_parser)
    list_parser.add_argument(
        "--category",
        help="Only list documents in this category.",
    )

    tree_parser = subparsers.add_parser(
        "tree",
        help="Render the file tree documented in the README.",
    )
    _add_verbose_option(tree_parser, suppress_default=True)
    _add_path_argument(tree_parser)
    tree_parser.add_argument(
        "--write",
        action="store_true",
        help="Replace the tree between the README markers instead of printing it.",
    )

    fmt_parser = subparsers.add_parser(
        "fmt",
        help="Normalise whitespace and punctuation in rule files.",
    )
    _add_verbose_option(fmt_parser, suppress_default=True)
    _add_path_argument(fmt_parser)
    fmt_parser.add_argument(
        "--write",
        action="store_true",
        help="Rewrite files in place instead of only reporting them.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for rulebook commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    verbose = bool(args.verbose)
    configure_logging(verbose=verbose, log_file=args.log_file)

    handlers = {
        "check": _run_check,
        "list": _run_list,
        "tree": _run_tree,
        "fmt": _run_fmt,
    }
    handler = handlers.get(args.command)
    if handler is None:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        status = handler(args)
    except (FileNotFoundError, NotADirectoryError, ConfigError, TreeError, ValueError) as exc:
        if verbose:
            logger.exception("rulebook %s failed", args.command)
        parser.exit(1, f"rulebook {args.command} failed: {exc}\n")
    if status:
        parser.exit(status)


def _run_check(args: argparse.Namespace) -> int:
    linter = Linter()
    report = linter.run(args.path, checks=args.checks)
    for issue in report.issues:
        print(issue.format())
    print(
        f"{report.checked} documents checked: "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings"
    )
    if args.report:
        output = linter.write_report(report)
        print(f"Report written to {_relativize(output)}")
    return 0 if report.ok(strict=bool(args.strict)) else 1


def _load_corpus(path: str) -> Tuple[RulebookConfig, Corpus]:
    root = Path(path).expanduser().resolve()
    config = load_config(root)
    return config, CorpusScanner().scan(str(root), config)


def _run_list(args: argparse.Namespace) -> int:
    _, corpus = _load_corpus(args.path)
    grouped = corpus.by_category()
    if args.category is not None:
        if args.category not in grouped:
            raise ValueError(f"Unknown category: {args.category}")
        grouped = {args.category: grouped[args.category]}

    ordered = sorted(grouped, key=lambda category: (category is not None, category or ""))
    for category in ordered:
        print(f"{category}/" if category else "(root)")
        for document in grouped[category]:
            print(f"  {document.path}  {document.title or '(untitled)'}")
    return 0


def _run_tree(args: argparse.Namespace) -> int:
    config, corpus = _load_corpus(args.path)
    rendered = render_tree(corpus, config.root_label)
    if not args.write:
        print(rendered)
        return 0

    readme = config.readme_path
    if not readme.is_file():
        raise TreeError(f"README not found: {readme}")
    current, lossy = decode_file(readme)
    if lossy:
        raise TreeError(f"Refusing to rewrite {readme}: it is not valid UTF-8")
    updated = replace_tree_block(current, rendered)
    if updated == current:
        print("README tree already up to date")
        return 0
    readme.write_text(updated, encoding="utf-8")
    print(f"README tree updated at {_relativize(readme)}")
    return 0


def _run_fmt(args: argparse.Namespace) -> int:
    _, corpus = _load_corpus(args.path)
    root = Path(corpus.root)
    formatter = MarkdownFormatter()
    changed: List[str] = []
    skipped: List[str] = []
    for document in corpus.documents:
        if document.lossy:
            print(f"Skipped {document.path} (not valid UTF-8)")
            skipped.append(document.path)
            continue
        formatted = formatter.format(document.body)
        if formatted == document.body:
            continue
        changed.append(document.path)
        if args.write:
            (root / document.path).write_text(formatted, encoding="utf-8")
            print(f"Reformatted {document.path}")
        else:
            print(f"Would reformat {document.path}")

    if not changed and not skipped:
        print("All documents already formatted")
        return 0
    if skipped:
        return 1
    return 0 if args.write else 1


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
