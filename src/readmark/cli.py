"""Command-line interface for locating and highlighting selections.

The selection is given as the selected text plus, optionally, the rendered
text of its enclosing block and that block's occurrence index.  Instead of
spelling those out, ``--html`` and ``--offset`` derive them from the rendered
HTML the text was selected in.

Usage:
    readmark locate notes/reading.md "selected text"
    readmark highlight notes/reading.md "text" --context "the whole row text"
    readmark tag notes/reading.md "text" --tag idea --tag later
    readmark color notes/reading.md "text" --index 2
    readmark annotate notes/reading.md "text" --comment "check this"
    readmark remove notes/reading.md "text"
    readmark list notes/reading.md
    readmark export notes/reading.md
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from readmark import setup_logging
from readmark.anchoring import SelectionContext
from readmark.config import Settings, get_settings
from readmark.errors import ReadmarkError
from readmark.export import preview
from readmark.markup import HighlightEntry
from readmark.selection import describe_selection
from readmark.service import EditOutcome, HighlightService
from readmark.storage import FileDocumentStore

console = Console()

_SELECTION_COMMANDS = ("locate", "highlight", "tag", "color", "annotate", "remove")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="readmark",
        description="Anchor rendered-text selections back to markdown source.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Document root (defaults to READMARK_STORAGE__ROOT).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in _SELECTION_COMMANDS:
        sub = subparsers.add_parser(name, help=f"{name} a selection")
        sub.add_argument("path", help="Document path relative to the root.")
        sub.add_argument("snippet", help="The selected rendered text.")
        sub.add_argument(
            "--context", default=None, help="Rendered text of the enclosing block."
        )
        sub.add_argument(
            "--occurrence",
            type=int,
            default=0,
            help="Rank of the enclosing block among identical blocks.",
        )
        sub.add_argument(
            "--html",
            type=Path,
            default=None,
            help="Rendered HTML file to derive --context and --occurrence from.",
        )
        sub.add_argument(
            "--offset",
            type=int,
            default=None,
            help="Offset of the selection in the rendered text (with --html).",
        )
        if name == "tag":
            sub.add_argument(
                "--tag", dest="tags", action="append", required=True, help="Tag name."
            )
        elif name == "color":
            sub.add_argument(
                "--index", type=int, required=True, help="Palette colour number."
            )
        elif name == "annotate":
            sub.add_argument("--comment", required=True, help="Footnote text.")

    for name, help_text in (
        ("list", "list the highlights of a document"),
        ("export", "write a highlights summary next to a document"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("path", help="Document path relative to the root.")

    return parser


def _selection_from_args(args: argparse.Namespace) -> SelectionContext:
    if args.html is not None:
        html = args.html.read_text(encoding="utf-8")
        offset = args.offset if args.offset is not None else 0
        return describe_selection(html, args.snippet, offset)
    return SelectionContext(
        snippet=args.snippet,
        context_text=args.context,
        occurrence_index=args.occurrence,
    )


def _report_edit(outcome: EditOutcome, path: str) -> int:
    if not outcome.located:
        console.print(f"[yellow]Could not locate selection in[/] {escape(path)}")
        return 1
    assert outcome.span is not None  # located outcomes carry a span
    console.print(
        f"[green]Updated[/] {escape(path)} "
        f"at [{outcome.span.start}, {outcome.span.end})"
    )
    return 0


def _print_highlights(path: str, entries: list[HighlightEntry]) -> None:
    if not entries:
        console.print(f"No highlights in {escape(path)}.")
        return
    table = Table(title=f"Highlights in {path}")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Colour")
    table.add_column("Text")
    for number, entry in enumerate(entries, start=1):
        table.add_row(
            str(number), entry.kind, entry.color or "", escape(preview(entry.text, 60))
        )
    console.print(table)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the parsed command; return the process exit code."""
    root = args.root if args.root is not None else settings.storage.root
    store = FileDocumentStore(root=root, encoding=settings.storage.encoding)
    service = HighlightService(store, settings.highlight, settings.tags)

    if args.command == "list":
        _print_highlights(args.path, await service.list_highlights(args.path))
        return 0
    if args.command == "export":
        target = await service.export_highlights(args.path)
        console.print(f"[green]Exported highlights to[/] {escape(target)}")
        return 0

    selection = _selection_from_args(args)

    if args.command == "locate":
        span = await service.locate(args.path, selection)
        if span is None:
            console.print(
                f"[yellow]Could not locate selection in[/] {escape(args.path)}"
            )
            return 1
        raw = await store.read(args.path)
        console.print(f"[{span.start}, {span.end}) {escape(preview(span.slice(raw)))}")
        return 0

    if args.command == "highlight":
        outcome = await service.highlight(args.path, selection)
    elif args.command == "tag":
        outcome = await service.tag(args.path, selection, args.tags)
    elif args.command == "color":
        outcome = await service.color(args.path, selection, args.index)
    elif args.command == "annotate":
        outcome = await service.annotate(args.path, selection, args.comment)
    else:
        outcome = await service.remove(args.path, selection)
    return _report_edit(outcome, args.path)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for readmark."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.app.log_dir, settings.app.log_level)

    try:
        code = asyncio.run(_run(args, settings))
    except (ReadmarkError, ValueError) as exc:
        console.print(f"[red]Error:[/] {escape(str(exc))}")
        sys.exit(1)
    sys.exit(code)
