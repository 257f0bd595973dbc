"""Definition scanning, one thread-pool task per file, merged after all complete."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from .models import Definition, DefinitionFilter, SourceFile

log = logging.getLogger(__name__)

_DEF_RE = re.compile(r"^\s*(?:async\s+)?def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(")


def is_private(name: str) -> bool:
    return name.startswith("_")


def scan_file(file: SourceFile, filters: DefinitionFilter) -> list[Definition]:
    """Return the definitions in a single file. An unreadable file yields []."""
    try:
        text = Path(file.path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("Cannot read %s: %s", file.path, e)
        return []

    definitions: list[Definition] = []
    # split on "\n" only so line numbers agree with the search engine
    for line_no, line in enumerate(text.split("\n"), start=1):
        m = _DEF_RE.match(line)
        if m is None:
            continue
        name = m.group(1)
        if filters.skip_private and is_private(name):
            continue
        definitions.append(Definition(name=name, filename=file.path, line_number=line_no))
    return definitions


def find_definitions(
    files: list[SourceFile],
    filters: DefinitionFilter,
    max_workers: int | None = None,
) -> list[Definition]:
    """
    Scan every file concurrently and return all definitions found.

    Order is unspecified; callers needing determinism must sort.
    """
    if not files:
        return []

    all_definitions: list[Definition] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="scan") as executor:
        futures = [executor.submit(scan_file, f, filters) for f in files]
        for future in as_completed(futures):
            all_definitions.extend(future.result())

    log.info("Found %d definitions in %d files", len(all_definitions), len(files))
    return all_definitions
