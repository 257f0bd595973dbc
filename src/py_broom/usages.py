"""
Usage search orchestration: one search per definition, classified line by line.

Each definition is an independent unit of work: a failing search for one name
is logged and yields an empty UsageRecord, it never stops the run.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed

from .classify import classify, is_import_line
from .models import CallType, Definition, Usage, UsageFilter, UsageRecord
from .search import PYTHON_GLOBS, TEST_GLOBS, SearchError, build_usage_pattern

log = logging.getLogger(__name__)


def _same_file(a: str, b: str) -> bool:
    return os.path.normpath(a) == os.path.normpath(b)


def parse_usages(
    raw_lines: list[str],
    name: str,
    filters: UsageFilter,
    defined_file: str,
) -> list[Usage]:
    """
    Turn raw "path:line:col:content" hits into classified Usages.

    Lines with fewer than four fields are dropped. With skip_definitions, a
    definition hit is dropped only when it sits in the definition's own file.
    """
    usages: list[Usage] = []

    for raw in raw_lines:
        parts = raw.split(":", 3)
        if len(parts) < 4:
            continue
        path, line_no, col_no, content = parts
        content = content.rstrip("\r\n")

        if filters.skip_imports and is_import_line(content):
            continue

        call_type = classify(content, name)
        if call_type is None:
            continue

        if (
            filters.skip_definitions
            and call_type is CallType.DEFINITION
            and _same_file(path, defined_file)
        ):
            continue

        usages.append(Usage(
            location=f"{path}:{line_no}:{col_no}",
            call_type=call_type,
            context=content.strip(),
        ))

    return usages


def search_usages(
    definition: Definition,
    root: str,
    filters: UsageFilter,
    engine,
) -> UsageRecord:
    """Search and classify usages of a single definition."""
    exclude = TEST_GLOBS if filters.skip_tests else ()
    try:
        raw = engine.search(
            build_usage_pattern(definition.name),
            root,
            include_globs=PYTHON_GLOBS,
            exclude_globs=exclude,
        )
    except SearchError as e:
        log.warning("Error searching for %s: %s", definition.name, e)
        return UsageRecord.empty(definition)

    usages = parse_usages(raw, definition.name, filters, definition.filename)
    log.debug(
        "%s (%s:%d): %d raw hits, %d usages",
        definition.name, definition.filename, definition.line_number, len(raw), len(usages),
    )
    return UsageRecord.from_usages(definition, usages)


def analyze_usages(
    definitions: list[Definition],
    root: str,
    filters: UsageFilter,
    engine,
    max_workers: int | None = None,
) -> list[UsageRecord]:
    """
    Search usages for every definition concurrently.

    Returns one UsageRecord per definition, in completion order.
    """
    if not definitions:
        return []

    records: list[UsageRecord] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="usages") as executor:
        futures = [
            executor.submit(search_usages, d, root, filters, engine)
            for d in definitions
        ]
        for future in as_completed(futures):
            records.append(future.result())

    log.info("Analyzed usages of %d definitions", len(records))
    return records
