"""File discovery: walk a source tree, prune ignored directories, return SourceFiles."""

import logging
import os
from pathlib import Path

import pathspec

from .models import DEFAULT_EXCLUDE_DIRS, SourceFile

log = logging.getLogger(__name__)

PYTHON_SUFFIX = ".py"


def _load_gitignore_spec(root: Path) -> pathspec.PathSpec | None:
    gitignore = root / ".gitignore"
    if gitignore.exists():
        patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return None


def _raise(err: OSError) -> None:
    raise err


def walk_tree(
    root: str,
    exclude_dirs=DEFAULT_EXCLUDE_DIRS,
    suffix: str = PYTHON_SUFFIX,
    respect_gitignore: bool = False,
) -> list[SourceFile]:
    """
    Return every file under root whose name ends with suffix.

    Directories named in exclude_dirs are pruned before descending, so nothing
    below them is visited. Any walk error (unreadable directory, missing root)
    is raised to the caller. Paths keep the root prefix as given.
    """
    if not os.path.isdir(root):
        if not os.path.exists(root):
            raise FileNotFoundError(f"No such directory: {root}")
        raise NotADirectoryError(f"Not a directory: {root}")

    excluded = set(exclude_dirs)
    gitignore_spec = _load_gitignore_spec(Path(root)) if respect_gitignore else None

    results: list[SourceFile] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        rel_dir = os.path.relpath(dirpath, root)

        kept = []
        for name in dirnames:
            if name in excluded:
                continue
            if gitignore_spec is not None:
                rel = Path(rel_dir, name).as_posix() + "/"
                if gitignore_spec.match_file(rel.removeprefix("./")):
                    continue
            kept.append(name)
        dirnames[:] = kept

        for name in filenames:
            if not name.endswith(suffix):
                continue
            if gitignore_spec is not None:
                rel = Path(rel_dir, name).as_posix().removeprefix("./")
                if gitignore_spec.match_file(rel):
                    continue
            results.append(SourceFile(
                directory=dirpath,
                basename=name,
                path=os.path.join(dirpath, name),
            ))

    log.info("Discovered %d files under %s", len(results), root)
    return results
