"""CLI entrypoints for repoctx commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import ConfigError
from .git.vcs import VCSError
from .logging import configure_logging
from .models import Freshness, SYMBOL_KINDS
from .parsing import parse_exports, parse_related, split_list
from .service import ContextService

EMPTY_CONTEXT_MESSAGE = "No context found. Use `repoctx save` to add context."


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoctx",
        description="Structured context layer for AI coding assistants.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--root",
        default=".",
        help="Repository root holding the context store (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write detailed (DEBUG) logs to this file.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Create the context store and add it to .gitignore.",
    )
    _add_verbose_option(init_parser, suppress_default=True)

    save_parser = subparsers.add_parser(
        "save",
        help="Save context for a file. Include --keywords so it can be found by topic.",
    )
    _add_verbose_option(save_parser, suppress_default=True)
    save_parser.add_argument("file", help="File path (or virtual key with --meta).")
    save_parser.add_argument("summary", help="What this file does, its role and conventions.")
    save_parser.add_argument("--symbols", default="", help="Comma-separated exported symbols.")
    save_parser.add_argument(
        "--exports",
        default="",
        help="Typed exports as 'name:kind,name:kind' (kind: function, class, constant, type, other).",
    )
    save_parser.add_argument(
        "--keywords",
        default="",
        help="Comma-separated tags (e.g. dal,payments,http) used by `get --keyword`.",
    )
    save_parser.add_argument("--deps", default="", help="Comma-separated dependencies of this module.")
    save_parser.add_argument("--footguns", help="Things that break if touched wrong.")
    save_parser.add_argument("--delta", help="Short description of what changed in this save.")
    save_parser.add_argument(
        "--meta",
        action="store_true",
        help="Virtual entry with no backing file (patterns, glossary, folder maps).",
    )

    symbol_parser = subparsers.add_parser(
        "save-symbol",
        help="Save a symbol card for a function, class or constant.",
    )
    _add_verbose_option(symbol_parser, suppress_default=True)
    symbol_parser.add_argument("symbol", help="Symbol name (e.g. removeCharge).")
    symbol_parser.add_argument("purpose", help="One-line description of what the symbol does.")
    symbol_parser.add_argument("--file", required=True, help="File where the symbol lives.")
    symbol_parser.add_argument("--kind", default="function", choices=SYMBOL_KINDS)
    symbol_parser.add_argument("--signature", help="Full signature of the symbol.")
    symbol_parser.add_argument(
        "--related",
        default="",
        help="Typed relations as 'symbol:relation,symbol' (unlabelled pairs become 'related').",
    )
    symbol_parser.add_argument("--keywords", default="", help="Comma-separated tags.")

    get_parser = subparsers.add_parser(
        "get",
        help="Print saved context, optionally filtered by path, keyword or symbol.",
    )
    _add_verbose_option(get_parser, suppress_default=True)
    get_parser.add_argument("path", nargs="?", help="Filter by file or directory path.")
    get_parser.add_argument(
        "--keyword",
        help="Comma-separated keywords, OR logic (e.g. --keyword dal,payments).",
    )
    get_parser.add_argument("--symbol", help="Look up a symbol card by name (case-insensitive).")

    stale_parser = subparsers.add_parser(
        "stale",
        help="List indexed files whose content changed or vanished since the last save.",
    )
    _add_verbose_option(stale_parser, suppress_default=True)

    checkpoint_parser = subparsers.add_parser(
        "checkpoint",
        help="Save the current git revision as the baseline for `diff`.",
    )
    _add_verbose_option(checkpoint_parser, suppress_default=True)

    diff_parser = subparsers.add_parser(
        "diff",
        help="Show changes since the last checkpoint.",
    )
    _add_verbose_option(diff_parser, suppress_default=True)
    diff_parser.add_argument(
        "--top",
        type=_positive_int,
        help="Show only the top N changed files by lines modified.",
    )

    reindex_parser = subparsers.add_parser(
        "reindex",
        help="Rebuild the keyword index from the saved module cards.",
    )
    _add_verbose_option(reindex_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoctx commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        service = ContextService(args.root)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "init":
        outcome = service.init()
        if outcome.gitignore_updated:
            print(f"Added {service.config.store_dir} to .gitignore")
        else:
            print(f"{service.config.store_dir} already in .gitignore")
        print("repoctx initialized.")
    elif args.command == "save":
        try:
            rel = service.save_module(
                args.file,
                args.summary,
                symbols=split_list(args.symbols, unique=False),
                exports=parse_exports(args.exports),
                keywords=split_list(args.keywords),
                dependencies=split_list(args.deps),
                footguns=args.footguns,
                delta=args.delta,
                meta=bool(args.meta),
            )
        except OSError as exc:
            parser.exit(1, f"Cannot save context for {args.file}: {exc}\n")
        print(f"Saved context for {rel}")
    elif args.command == "save-symbol":
        service.save_symbol(
            args.symbol,
            args.purpose,
            file=args.file,
            kind=args.kind,
            signature=args.signature,
            related=parse_related(args.related),
            keywords=split_list(args.keywords),
        )
        print(f"Saved symbol card for {args.symbol}")
    elif args.command == "get":
        keywords = split_list(args.keyword) if args.keyword is not None else None
        output = service.get(filter_path=args.path, keywords=keywords, symbol=args.symbol)
        if not output.strip():
            print(EMPTY_CONTEXT_MESSAGE)
        else:
            print(output)
    elif args.command == "stale":
        entries = service.stale()
        if not entries:
            print("All context is up to date.")
            return
        print(f"{len(entries)} stale file(s):\n")
        for entry in entries:
            print(f"  ! {entry.path}  ({entry.reason})")
            if entry.freshness is Freshness.MISSING:
                print("    -> file moved or deleted: save it again under its new path")
            else:
                print(
                    f'    -> repoctx save {entry.path} "<updated summary>" '
                    '--keywords "..." --delta "what changed"'
                )
    elif args.command == "checkpoint":
        try:
            checkpoint = service.checkpoint()
        except VCSError as exc:
            parser.exit(1, f"Error: {exc}\nMake sure you are inside a git repository.\n")
        print(
            f"Checkpoint saved: {checkpoint.branch} @ {checkpoint.short_revision} "
            f"({checkpoint.timestamp})"
        )
    elif args.command == "diff":
        print(service.diff(top=args.top).render())
    elif args.command == "reindex":
        count = service.reindex()
        print(f"Keyword index rebuilt ({count} keywords).")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


if __name__ == "__main__":
    main(sys.argv[1:])
