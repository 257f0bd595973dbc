"""
Main analysis pipeline: wires discover → scan → usages → filter → sort.
"""

import logging
import os

from .discover import walk_tree
from .models import AnalysisConfig, AnalysisResult
from .results import filter_by_usage_count, sort_records
from .scan import find_definitions
from .search import get_engine
from .usages import analyze_usages

log = logging.getLogger(__name__)


def _check_root(root: str) -> None:
    if not os.path.exists(root):
        raise FileNotFoundError(f"No such directory: {root}")
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Not a directory: {root}")


def run_analysis(config: AnalysisConfig, engine=None) -> AnalysisResult:
    """
    Run the full analysis for config.root.

    Setup problems (missing root, missing search tool) raise before any work
    starts. Empty trees, trees without definitions and filters that leave
    nothing are returned as results with the matching zero counts.
    """
    root = config.root
    _check_root(root)

    if engine is None:
        engine = get_engine(
            config.engine,
            exclude_dirs=config.exclude_dirs,
            respect_gitignore=config.respect_gitignore,
        )
    engine.ensure_available()

    log.info("Searching for Python files in: %s", root)
    files = walk_tree(
        root,
        exclude_dirs=config.exclude_dirs,
        respect_gitignore=config.respect_gitignore,
    )
    if not files:
        log.info("No Python files found under %s", root)
        return AnalysisResult(total_files=0, total_definitions=0)

    definitions = find_definitions(files, config.definition_filter, config.max_workers)
    if not definitions:
        log.info("No definitions found in %d files", len(files))
        return AnalysisResult(total_files=len(files), total_definitions=0)

    log.info("Analyzing usages with %s engine...", engine.name)
    records = analyze_usages(
        definitions, root, config.usage_filter, engine, config.max_workers,
    )

    if config.min_usages >= 0 or config.max_usages >= 0:
        records = filter_by_usage_count(records, config.min_usages, config.max_usages)
        log.info("Filtered to %d definitions based on usage count", len(records))

    records = sort_records(records, config.sort_by, config.ascending)
    log.info(
        "Results sorted by: %s (%s)",
        config.sort_by, "ascending" if config.ascending else "descending",
    )

    return AnalysisResult(
        total_files=len(files),
        total_definitions=len(definitions),
        records=records,
    )
