"""
Command line interface for TaDa Search.

Runs the same batched search as the desktop window, prints the ranked
files and optionally writes the CSV summary.
"""

import argparse
import logging
import sys
from pathlib import Path

from core import export, scanner
from core.engine import BatchScheduler
from core.errors import SearchRunError
from core.models import FileStatus, MatchType, SearchConfiguration, SearchOptions
from core.store import ResultStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tada-search-cli",
                                     description="Search a folder of text, PDF and Word files")
    parser.add_argument("folder", help="Folder to search (searched recursively)")
    parser.add_argument("terms", nargs="+", help="Search terms")
    parser.add_argument("--any", action="store_true", help="Match lines containing any term (default: all)")
    parser.add_argument("--case-sensitive", action="store_true")
    parser.add_argument("--whole-word", action="store_true")
    parser.add_argument("--literal", action="store_true", help="Treat terms as plain text, not patterns")
    parser.add_argument("--preserve-patterns", action="store_true",
                        help="Do not lowercase terms; --whole-word anchors the whole pattern")
    parser.add_argument("--merge-highlights", action="store_true",
                        help="Mark overlapping term hits once instead of term by term")
    parser.add_argument("--csv", metavar="PATH", help="Write the CSV summary to PATH (a directory gets the default name)")
    parser.add_argument("--detailed", action="store_true", help="Add type, match count and line columns to the CSV")
    parser.add_argument("--limit", type=int, default=20, help="Number of files to print")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _print_progress(processed: int, total: int) -> None:
    print(f"Processing files: {processed} / {total}", file=sys.stderr)


def search_cli(args: argparse.Namespace) -> int:
    options = SearchOptions(match_type=MatchType.ANY if args.any else MatchType.ALL,
                            case_sensitive=args.case_sensitive,
                            whole_word=args.whole_word,
                            literal=args.literal,
                            merge_highlights=args.merge_highlights,
                            preserve_pattern=args.preserve_patterns)

    try:
        config = SearchConfiguration(terms=tuple(term.strip() for term in args.terms if term.strip()),
                                     options=options)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        files = scanner.scan_folder(args.folder)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    store = ResultStore()
    scheduler = BatchScheduler(store, on_progress=_print_progress)

    try:
        summary = scheduler.run(files, config)
    except SearchRunError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stats = summary.stats
    print(f"\nSearch Results ({len(store)} files): {stats.total_matches} matches, "
          f"{stats.total_occurrences} occurrences, {stats.error} errors, {stats.unsupported} unsupported")
    print("-" * 60)

    for record in store.records()[:args.limit]:
        if record.status is FileStatus.SUCCESS:
            print(f"{record.match_count:>5} matches  {record.file_path}")
        else:
            print(f"{record.status.value:>13}  {record.file_path}: {record.error}")

    if summary.no_results:
        print("No matches found in any of the selected files.")

    if args.csv and not summary.no_results:
        out = Path(args.csv)
        if out.is_dir():
            out = out / export.export_filename(config.terms)
        out.write_text(export.export_csv(store, config.terms, options, detailed=args.detailed),
                       encoding="utf-8")
        print(f"CSV written to {out}")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(message)s")
    return search_cli(args)


if __name__ == "__main__":
    sys.exit(main())
