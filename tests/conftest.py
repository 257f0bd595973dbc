"""Pytest configuration and fixtures for py-broom tests."""

from pathlib import Path

import pytest

from py_broom.models import CallType, Definition, Usage, UsageRecord
from py_broom.search import BuiltinSearch

APP_SOURCE = """def helper():
    return 1


class Worker:
    def run(self):
        helper()
        return self.helper()
"""


def write_file(root: Path, rel: str, contents: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents)
    return path


def make_record(name: str, filename: str = "a.py", line: int = 1, total: int = 0,
                call_type: CallType = CallType.FUNCTION) -> UsageRecord:
    definition = Definition(name=name, filename=filename, line_number=line)
    usages = [
        Usage(location=f"caller.py:{i + 1}:1", call_type=call_type, context=f"{name}()")
        for i in range(total)
    ]
    return UsageRecord.from_usages(definition, usages)


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A one-file project: helper() defined, called bare and via self."""
    write_file(tmp_path, "app.py", APP_SOURCE)
    return tmp_path


@pytest.fixture
def builtin_engine() -> BuiltinSearch:
    return BuiltinSearch()
