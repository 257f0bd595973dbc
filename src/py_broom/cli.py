"""CLI entry point for py-broom (pybr)."""

import argparse
import logging
import sys
from pathlib import Path

import duckdb

from .analyzer import run_analysis
from .models import AnalysisConfig, DefinitionFilter, UsageFilter
from .printers import PRINTER_KINDS, ConsolePrinter, get_printer
from .search import ENGINE_NAMES, SearchToolNotFound
from .store import ReportStore

log = logging.getLogger(__name__)

PROG = "pybr"


def _error(message: str) -> int:
    print(f"{PROG}: {message}", file=sys.stderr)
    return 1


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Analyze Python method usages across a repository",
    )
    parser.add_argument("-d", "--dir", default=".", help="Directory to search for Python files")
    parser.add_argument("-o", "--output", help="Output file (default: stdout; *.duckdb saves a report database)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed information during execution")
    parser.add_argument("--format", default="console", choices=PRINTER_KINDS, help="How to output results")
    parser.add_argument("--skip-imports", action="store_true", help="Skip import statements in usage results")
    parser.add_argument("--skip-private", action="store_true", help="Skip private methods (starting with _)")
    parser.add_argument(
        "--skip-tests", action=argparse.BooleanOptionalAction, default=True,
        help="Skip usages in test files (test_*.py, *_test.py)",
    )
    parser.add_argument("--skip-definitions", action="store_true", help="Skip the defining line of each method")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--min-usages", type=int, default=-1, help="Keep methods with at least N usages (-1 = no filter)")
    parser.add_argument("--max-usages", type=int, default=-1, help="Keep methods with at most N usages (-1 = no filter)")
    parser.add_argument("--sort", default="file", help="Sort results by: name, file, usages, usages-desc")
    parser.add_argument("--desc", action="store_true", help="Sort in descending order")
    parser.add_argument("--summary", action="store_true", help="Print a usage summary after the results")
    parser.add_argument("--engine", default="ripgrep", choices=ENGINE_NAMES, help="Search engine (default: ripgrep)")
    parser.add_argument("--workers", type=_positive_int, default=None, help="Maximum concurrent workers")
    parser.add_argument("--gitignore", action="store_true", help="Skip files matched by the root .gitignore")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    sort_by = args.sort
    ascending = not args.desc
    if sort_by.lower() == "usages-desc":
        sort_by, ascending = "usages", False

    return AnalysisConfig(
        root=args.dir,
        definition_filter=DefinitionFilter(skip_private=args.skip_private),
        usage_filter=UsageFilter(
            skip_imports=args.skip_imports,
            skip_tests=args.skip_tests,
            skip_definitions=args.skip_definitions,
        ),
        min_usages=args.min_usages,
        max_usages=args.max_usages,
        sort_by=sort_by,
        ascending=ascending,
        engine=args.engine,
        max_workers=args.workers,
        respect_gitignore=args.gitignore,
    )


def run(args: argparse.Namespace) -> int:
    config = config_from_args(args)

    try:
        result = run_analysis(config)
    except SearchToolNotFound as e:
        return _error(f"Error {e}")
    except OSError as e:
        return _error(f"Error reading directory: {e}")

    if result.total_files == 0:
        print(f"{PROG}: No Python files found in the specified directory")
        return 0
    if result.total_definitions == 0:
        print(f"{PROG}: No method definitions found")
        return 0
    if not result.records:
        print(f"{PROG}: No methods found matching the filter criteria")
        return 0

    if args.output and args.output.endswith(".duckdb"):
        try:
            with ReportStore(args.output) as store:
                store.save(result, str(Path(config.root).resolve()))
        except (duckdb.Error, OSError) as e:
            return _error(f"Error saving results: {e}")
        print(f"Results saved to: {args.output}", file=sys.stderr)
        return 0

    if args.output:
        printer = get_printer(args.format, no_color=True)
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                printer.print(result, f)
                if args.summary and isinstance(printer, ConsolePrinter):
                    printer.print_summary(result, f)
        except OSError as e:
            return _error(f"Error saving results: {e}")
        print(f"Results saved to: {args.output}", file=sys.stderr)
        return 0

    printer = get_printer(args.format, no_color=args.no_color)
    printer.print(result, sys.stdout)
    if args.summary and isinstance(printer, ConsolePrinter):
        printer.print_summary(result, sys.stdout)
    return 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger("py_broom").setLevel(logging.DEBUG)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
