from __future__ import annotations

import argparse
import logging
import os
import sqlite3
import sys
from collections.abc import Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bytefind.core.buffer import Buffer, normalize_encoding
from bytefind.core.cursor import byte_offset
from bytefind.core.errors import MalformedText, SearchError
from bytefind.core.io import MappedFile
from bytefind.core.patterns import parse_pattern
from bytefind.core.profile import ProfileError, resolve_profile
from bytefind.core.rsearch import MAX_POSITION, rfind
from bytefind.core.search import find
from bytefind.core.sqlite_ext import register

log = logging.getLogger("bytefind")

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_MALFORMED = 3


def setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def iter_hits(haystack: Buffer, needle: Buffer, start: int | None, *, reverse: bool) -> Iterator[int]:
    """Yield successive positions, left to right (or right to left with reverse)."""
    if reverse:
        pos = rfind(haystack, needle, MAX_POSITION if start is None else start)
        while pos > 0:
            yield pos
            pos = rfind(haystack, needle, pos - 1)
    else:
        pos = find(haystack, needle, 1 if start is None else start)
        while pos > 0:
            yield pos
            pos = find(haystack, needle, pos + 1)


def cmd_find(args: argparse.Namespace, console: Console) -> int:
    encoding = normalize_encoding(args.encoding)
    kind, needle = parse_pattern(args.needle, encoding, hex_mode=args.hex)
    if needle is None:
        console.print(f"bytefind: invalid {kind} pattern: {args.needle!r}", style="red")
        return EXIT_USAGE
    log.debug("needle %s (%d bytes, %s)", kind, needle.size, encoding.value)

    with MappedFile(args.path) as mf:
        haystack = mf.buffer(encoding)
        log.debug("haystack %s: %d bytes (mmap=%s)", mf.path, haystack.size, mf.mapped)
        hits: list[tuple[int, int]] = []
        for pos in iter_hits(haystack, needle, args.start, reverse=args.reverse):
            hits.append((pos, byte_offset(haystack, pos)))
            if not args.all:
                break

    if not hits:
        console.print("no match", style="yellow")
        return EXIT_NOT_FOUND

    table = Table(show_header=True, header_style="bold")
    table.add_column("position", justify="right")
    table.add_column("offset", justify="right")
    for pos, off in hits:
        table.add_row(str(pos), f"0x{off:08X}")
    console.print(table)
    return EXIT_FOUND


def _cell(value: object) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return value.hex(" ").upper()
    return str(value)


def cmd_sql(args: argparse.Namespace, console: Console) -> int:
    try:
        profile = resolve_profile(args.profile)
    except ProfileError as e:
        for err in e.errors:
            console.print(f"profile: {err}", style="red")
        return EXIT_USAGE

    conn = sqlite3.connect(args.database)
    try:
        names = register(conn, profile)
        log.debug("functions: %s", ", ".join(names))
        try:
            cur = conn.execute(args.query)
        except sqlite3.Error as e:
            console.print(f"bytefind: {e}", style="red")
            return EXIT_USAGE
        columns = [d[0] for d in cur.description or ()]
        table = Table(*columns, show_header=bool(columns), header_style="bold")
        for row in cur.fetchall():
            table.add_row(*(_cell(v) for v in row))
        console.print(table)
    finally:
        conn.close()
    return EXIT_FOUND


def cmd_browse(args: argparse.Namespace, console: Console) -> int:
    # Imported lazily; the search commands do not need textual
    from bytefind.app import BytefindApp

    app = BytefindApp(args.path, encoding=normalize_encoding(args.encoding))
    app.run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytefind", description="Forward/backward substring search over bytes, UTF-8 and UTF-16"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_find = sub.add_parser("find", help="Search a file")
    p_find.add_argument("path", help="Path to the haystack file")
    p_find.add_argument("needle", help="Text to find (or hex bytes with --hex)")
    p_find.add_argument("--hex", action="store_true", help="Needle is hex bytes")
    p_find.add_argument(
        "-e", "--encoding", default="raw", choices=["raw", "utf-8", "utf-16"], help="Haystack encoding"
    )
    p_find.add_argument("-s", "--start", type=int, default=None, help="1-based start position")
    p_find.add_argument("-r", "--reverse", action="store_true", help="Search backward")
    p_find.add_argument("-a", "--all", action="store_true", help="Report every match")
    p_find.set_defaults(handler=cmd_find)

    p_sql = sub.add_parser("sql", help="Run a query with the search functions registered")
    p_sql.add_argument("database", help="SQLite database path (or :memory:)")
    p_sql.add_argument("query", help="SQL to execute")
    p_sql.add_argument("--profile", default=None, help="Registration profile (YAML)")
    p_sql.set_defaults(handler=cmd_sql)

    p_browse = sub.add_parser("browse", help="Interactive hex browser")
    p_browse.add_argument("path", help="Path to binary file")
    p_browse.add_argument(
        "-e", "--encoding", default="raw", choices=["raw", "utf-8", "utf-16"], help="Haystack encoding"
    )
    p_browse.set_defaults(handler=cmd_browse)
    return parser


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    console = console or Console()

    path = getattr(args, "path", None)
    if path is not None and not os.path.exists(path):
        print(f"bytefind: file not found: {path}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return args.handler(args, console)
    except MalformedText as e:
        print(f"bytefind: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    except SearchError as e:
        print(f"bytefind: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
