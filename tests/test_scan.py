"""Tests for concurrent definition scanning."""

from pathlib import Path

from py_broom.discover import walk_tree
from py_broom.models import Definition, DefinitionFilter, SourceFile
from py_broom.scan import find_definitions, scan_file

from conftest import write_file

MAIN_SOURCE = """
def public_fn():
    pass

def _private_fn():
    pass

class C:
    def method_in_class(self):
        pass

    async def fetch(self):
        pass
"""

OTHER_SOURCE = """# comment
def another_fn(a, b):
    return a + b
x = "not def here()"
"""


def _source_file(path: Path) -> SourceFile:
    return SourceFile(directory=str(path.parent), basename=path.name, path=str(path))


def _key(d: Definition):
    return (d.filename, d.line_number, d.name)


def test_scan_file_reports_one_based_lines(tmp_path: Path):
    p = write_file(tmp_path, "main.py", MAIN_SOURCE)

    defs = scan_file(_source_file(p), DefinitionFilter())

    assert sorted(defs, key=_key) == [
        Definition("public_fn", str(p), 2),
        Definition("_private_fn", str(p), 5),
        Definition("method_in_class", str(p), 9),
        Definition("fetch", str(p), 12),
    ]


def test_scan_file_line_one(tmp_path: Path):
    p = write_file(tmp_path, "one.py", "def foo():\n    return 1\n")

    assert scan_file(_source_file(p), DefinitionFilter()) == [Definition("foo", str(p), 1)]


def test_skip_private_partitions_definitions(tmp_path: Path):
    write_file(tmp_path, "main.py", MAIN_SOURCE)
    write_file(tmp_path, "mock/b.py", OTHER_SOURCE)
    files = walk_tree(str(tmp_path))

    everything = set(find_definitions(files, DefinitionFilter(skip_private=False)))
    public = set(find_definitions(files, DefinitionFilter(skip_private=True)))

    private = {d for d in everything if d.name.startswith("_")}
    assert private == {d for d in everything if d.name == "_private_fn"}
    assert public == everything - private
    assert not any(d.name.startswith("_") for d in public)


def test_find_definitions_across_files(tmp_path: Path):
    p1 = write_file(tmp_path, "main.py", MAIN_SOURCE)
    p2 = write_file(tmp_path, "mock/b.py", OTHER_SOURCE)
    files = [_source_file(p1), _source_file(p2)]

    defs = sorted(find_definitions(files, DefinitionFilter(), max_workers=2), key=_key)

    names = [(Path(d.filename).name, d.name, d.line_number) for d in defs]
    assert ("b.py", "another_fn", 2) in names
    assert ("main.py", "public_fn", 2) in names
    assert len(defs) == 5


def test_unreadable_file_yields_nothing_and_does_not_abort(tmp_path: Path, caplog):
    p1 = write_file(tmp_path, "main.py", "def ok():\n    pass\n")
    missing = tmp_path / "does_not_exist.py"
    files = [_source_file(p1), _source_file(missing)]

    defs = find_definitions(files, DefinitionFilter())

    assert defs == [Definition("ok", str(p1), 1)]
    assert "does_not_exist.py" in caplog.text


def test_find_definitions_empty_input():
    assert find_definitions([], DefinitionFilter()) == []
