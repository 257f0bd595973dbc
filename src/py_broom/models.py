"""Core data structures for py-broom."""

from dataclasses import dataclass, field
from enum import Enum


class CallType(str, Enum):
    DEFINITION = "definition"   # def method(
    INSTANCE = "instance"       # self.method(
    CLASS = "class"             # cls.method(
    STATIC = "static"           # ClassName.method(
    FUNCTION = "function"       # method(
    DECORATOR = "decorator"     # @method / @pkg.method

    @property
    def label(self) -> str:
        return CALL_TYPE_LABELS[self]


# Display grouping order; classification precedence is defined in classify.py
CALL_TYPE_ORDER: tuple[CallType, ...] = (
    CallType.DEFINITION,
    CallType.INSTANCE,
    CallType.CLASS,
    CallType.STATIC,
    CallType.FUNCTION,
    CallType.DECORATOR,
)

CALL_TYPE_LABELS: dict[CallType, str] = {
    CallType.DEFINITION: "Definition",
    CallType.INSTANCE: "Instance calls",
    CallType.CLASS: "Class calls",
    CallType.STATIC: "Static calls",
    CallType.FUNCTION: "Function calls",
    CallType.DECORATOR: "Decorator usage",
}

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    ".git", "__pycache__", ".venv", "venv", "node_modules",
    "build", "dist", ".mypy_cache", ".pytest_cache", ".tox",
)


@dataclass(frozen=True)
class SourceFile:
    directory: str
    basename: str
    path: str                   # as produced by the walk, root-prefixed


@dataclass(frozen=True)
class Definition:
    name: str                   # simple name, e.g. "normalize_gene"
    filename: str               # path of the defining file
    line_number: int            # 1-based

    def to_dict(self) -> dict:
        return {"name": self.name, "filename": self.filename, "line_number": self.line_number}


@dataclass(frozen=True)
class Usage:
    location: str               # "path:line:col"
    call_type: CallType
    context: str                # stripped source line

    @property
    def path(self) -> str:
        # rsplit keeps paths that contain ':' intact
        return self.location.rsplit(":", 2)[0]

    def to_dict(self) -> dict:
        return {
            "location": self.location,
            "call_type": self.call_type.value,
            "context": self.context,
        }


@dataclass
class UsageRecord:
    definition: Definition
    usages: list[Usage]
    usages_by_type: dict[CallType, int]
    total_usages: int

    @classmethod
    def from_usages(cls, definition: Definition, usages: list[Usage]) -> "UsageRecord":
        by_type: dict[CallType, int] = {}
        for usage in usages:
            by_type[usage.call_type] = by_type.get(usage.call_type, 0) + 1
        return cls(
            definition=definition,
            usages=list(usages),
            usages_by_type=by_type,
            total_usages=len(usages),
        )

    @classmethod
    def empty(cls, definition: Definition) -> "UsageRecord":
        return cls.from_usages(definition, [])

    def to_dict(self) -> dict:
        return {
            "definition": self.definition.to_dict(),
            "usages": [u.to_dict() for u in self.usages],
            "usages_by_type": {
                ct.value: self.usages_by_type[ct]
                for ct in CALL_TYPE_ORDER if ct in self.usages_by_type
            },
            "total_usages": self.total_usages,
        }


@dataclass
class AnalysisResult:
    total_files: int
    total_definitions: int      # discovered, before usage-count filtering
    records: list[UsageRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_files": self.total_files,
            "total_definitions": self.total_definitions,
            "results": [r.to_dict() for r in self.records],
        }


@dataclass(frozen=True)
class DefinitionFilter:
    skip_private: bool = False


@dataclass(frozen=True)
class UsageFilter:
    skip_imports: bool = False
    skip_tests: bool = False
    skip_definitions: bool = False


@dataclass
class AnalysisConfig:
    root: str
    definition_filter: DefinitionFilter = field(default_factory=DefinitionFilter)
    usage_filter: UsageFilter = field(default_factory=UsageFilter)
    min_usages: int = -1        # -1 = unbounded
    max_usages: int = -1        # -1 = unbounded
    sort_by: str = "file"       # "name" | "file" | "usages"
    ascending: bool = True
    engine: str = "ripgrep"     # "ripgrep" | "builtin"
    max_workers: int | None = None
    respect_gitignore: bool = False
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
