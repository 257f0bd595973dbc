"""
Line-oriented pattern search over a source tree.

Engines return raw hits as "path:line:col:content" strings, one per match,
the ripgrep --vimgrep format. "No matches" is an empty list, never an error.

    RipgrepSearch  shells out to `rg` (the default)
    BuiltinSearch  pure-Python fallback using re + pathspec
"""

import logging
import re
import shutil
import subprocess
import threading
from pathlib import Path

import pathspec

from .discover import walk_tree
from .models import DEFAULT_EXCLUDE_DIRS, SourceFile

log = logging.getLogger(__name__)

PYTHON_GLOBS: tuple[str, ...] = ("*.py",)
TEST_GLOBS: tuple[str, ...] = ("test_*.py", "*_test.py")

# rg exit status for "ran fine, nothing matched"
_RG_NO_MATCHES = 1


class SearchError(Exception):
    """A search invocation failed for reasons other than "no matches"."""


class SearchToolNotFound(SearchError):
    """The external search binary is not installed."""


def build_usage_pattern(name: str) -> str:
    return r"\b" + re.escape(name) + r"\s*\("


class RipgrepSearch:
    """
    Runs `rg --vimgrep`, configured to see the same files walk_tree sees.

    rg skips hidden and ignored paths by default; --hidden and --no-ignore
    undo that, and excluded directories are pruned with "!dir/" globs. With
    respect_gitignore only .gitignore files are honored, even outside a repo.
    """

    name = "ripgrep"

    def __init__(
        self,
        binary: str = "rg",
        timeout: float | None = None,
        exclude_dirs=DEFAULT_EXCLUDE_DIRS,
        respect_gitignore: bool = False,
    ) -> None:
        self.binary = binary
        self.timeout = timeout
        self.exclude_dirs = tuple(exclude_dirs)
        self.respect_gitignore = respect_gitignore

    def ensure_available(self) -> None:
        if shutil.which(self.binary) is None:
            raise SearchToolNotFound(
                f"ripgrep ({self.binary}) is not installed. Please install it first."
            )

    def build_args(
        self,
        pattern: str,
        root: str,
        include_globs=PYTHON_GLOBS,
        exclude_globs=(),
    ) -> list[str]:
        args = [self.binary, "--vimgrep", "--hidden"]
        if self.respect_gitignore:
            args += [
                "--no-require-git",
                "--no-ignore-dot",
                "--no-ignore-exclude",
                "--no-ignore-global",
                "--no-ignore-parent",
            ]
        else:
            args.append("--no-ignore")
        for g in include_globs:
            args += ["--glob", g]
        for g in exclude_globs:
            args += ["--glob", f"!{g}"]
        for d in self.exclude_dirs:
            args += ["--glob", f"!{d}/"]
        # "--" so patterns starting with "-" are not read as flags
        args += ["--", pattern, root]
        return args

    def search(
        self,
        pattern: str,
        root: str,
        include_globs=PYTHON_GLOBS,
        exclude_globs=(),
    ) -> list[str]:
        args = self.build_args(pattern, root, include_globs, exclude_globs)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise SearchToolNotFound(f"{self.binary} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise SearchError(f"{self.binary} timed out after {self.timeout}s") from e

        if result.returncode == _RG_NO_MATCHES:
            return []
        if result.returncode != 0:
            raise SearchError(
                f"{self.binary} failed (rc={result.returncode}): {result.stderr.strip()[:200]}"
            )

        return [line for line in result.stdout.split("\n") if line]


class BuiltinSearch:
    """
    Pure-Python engine with the same output contract as RipgrepSearch.

    The tree is walked once per root and the file list reused for every
    search, so files created after the first search are not seen. Meant for
    small projects, machines without ripgrep, and tests.
    """

    name = "builtin"

    def __init__(self, exclude_dirs=DEFAULT_EXCLUDE_DIRS, respect_gitignore: bool = False) -> None:
        self.exclude_dirs = tuple(exclude_dirs)
        self.respect_gitignore = respect_gitignore
        self._files: dict[str, list[SourceFile]] = {}
        self._lock = threading.Lock()

    def ensure_available(self) -> None:
        return None

    def _files_under(self, root: str) -> list[SourceFile]:
        with self._lock:
            files = self._files.get(root)
            if files is None:
                try:
                    files = walk_tree(
                        root,
                        exclude_dirs=self.exclude_dirs,
                        suffix="",
                        respect_gitignore=self.respect_gitignore,
                    )
                except OSError as e:
                    raise SearchError(f"cannot walk {root}: {e}") from e
                self._files[root] = files
            return files

    def search(
        self,
        pattern: str,
        root: str,
        include_globs=PYTHON_GLOBS,
        exclude_globs=(),
    ) -> list[str]:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise SearchError(f"invalid pattern {pattern!r}: {e}") from e

        lines = list(include_globs) + [f"!{g}" for g in exclude_globs]
        matcher = pathspec.PathSpec.from_lines("gitwildmatch", lines)

        hits: list[str] = []
        for f in self._files_under(root):
            rel = Path(f.path).relative_to(root).as_posix()
            if not matcher.match_file(rel):
                continue
            try:
                text = Path(f.path).read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                log.warning("Cannot read %s: %s", f.path, e)
                continue
            for line_no, line in enumerate(text.split("\n"), start=1):
                for m in regex.finditer(line):
                    hits.append(f"{f.path}:{line_no}:{m.start() + 1}:{line}")
        return hits


_ENGINES = {
    RipgrepSearch.name: RipgrepSearch,
    BuiltinSearch.name: BuiltinSearch,
}

ENGINE_NAMES: tuple[str, ...] = tuple(_ENGINES)


def get_engine(name: str, **kwargs):
    """Instantiate the search engine registered under `name`."""
    try:
        cls = _ENGINES[name]
    except KeyError:
        raise ValueError(
            f"unknown search engine {name!r} (expected one of {', '.join(ENGINE_NAMES)})"
        ) from None
    return cls(**kwargs)
