"""Tests for the output printers."""

import io
import json

import pytest

from py_broom.models import AnalysisResult, CallType, Definition, Usage, UsageRecord
from py_broom.printers import (
    ConsolePrinter,
    GraphvizPrinter,
    JSONPrinter,
    VimPrinter,
    build_call_graph,
    get_printer,
    sanitize_context,
    usage_count_style,
)


@pytest.fixture
def result() -> AnalysisResult:
    helper = Definition("helper", "pkg/app.py", 1)
    unused = Definition("unused", "pkg/app.py", 20)
    usages = [
        Usage("pkg/app.py:1:5", CallType.DEFINITION, "def helper():"),
        Usage("pkg/app.py:7:9", CallType.FUNCTION, "helper()"),
        Usage("pkg/worker.py:8:16", CallType.INSTANCE, "return self.helper()"),
    ]
    return AnalysisResult(
        total_files=2,
        total_definitions=2,
        records=[
            UsageRecord.from_usages(helper, usages),
            UsageRecord.empty(unused),
        ],
    )


def _render(printer, result) -> str:
    buf = io.StringIO()
    printer.print(result, buf)
    return buf.getvalue()


def test_console_groups_by_call_type(result):
    out = _render(ConsolePrinter(no_color=True), result)

    assert "Method: helper" in out
    assert "Defined in: pkg/app.py:1" in out
    assert "Total usages: 3" in out
    assert "Usage breakdown:" in out
    assert "  - Instance calls: 1" in out
    assert "  - Function calls: 1" in out
    # display follows the fixed call type order
    assert out.index("Definition:") < out.index("Instance calls:\n") < out.index("Function calls:\n")
    assert "  - pkg/worker.py:8:16" in out
    assert "    return self.helper()" in out


def test_console_marks_unused(result):
    out = _render(ConsolePrinter(no_color=True), result)

    unused_block = out[out.index("Method: unused"):]
    assert "Total usages: 0" in unused_block
    assert "(No usages found)" in unused_block
    assert "-" * 80 in unused_block


def test_console_summary(result):
    buf = io.StringIO()
    ConsolePrinter(no_color=True).print_summary(result, buf)
    out = buf.getvalue()

    assert "SUMMARY" in out
    assert "Total methods analyzed: 2" in out
    assert "Unused (0 usages): 1 (50.0%)" in out
    assert "Medium (3-5 usages): 1 (50.0%)" in out
    assert "Instance calls: 1" in out
    assert "Decorator usage: 0" in out


def test_console_summary_empty():
    buf = io.StringIO()
    ConsolePrinter(no_color=True).print_summary(AnalysisResult(0, 0), buf)
    assert "Unused (0 usages): 0 (0.0%)" in buf.getvalue()


@pytest.mark.parametrize("count, style", [(0, "yellow"), (1, "red"), (2, "red"), (5, "yellow"), (6, "green")])
def test_usage_count_style(count, style):
    assert usage_count_style(count) == style


def test_json_output(result):
    data = json.loads(_render(JSONPrinter(), result))

    assert data["total_definitions"] == 2
    first = data["results"][0]
    assert first["definition"] == {"name": "helper", "filename": "pkg/app.py", "line_number": 1}
    assert first["usages_by_type"] == {"definition": 1, "instance": 1, "function": 1}
    assert first["total_usages"] == 3
    assert first["usages"][1] == {
        "location": "pkg/app.py:7:9", "call_type": "function", "context": "helper()",
    }
    assert data["results"][1]["usages"] == []


def test_vimgrep_output(result):
    lines = _render(VimPrinter(), result).splitlines()

    assert lines == [
        "pkg/app.py:1:5:def helper():",
        "pkg/app.py:7:9:helper()",
        "pkg/worker.py:8:16:return self.helper()",
    ]


def test_vimgrep_empty_context_falls_back_to_name():
    d = Definition("f", "a.py", 1)
    record = UsageRecord.from_usages(d, [Usage("a.py:2:1", CallType.FUNCTION, "")])
    out = _render(VimPrinter(), AnalysisResult(1, 1, [record]))
    assert out == "a.py:2:1:f [function]\n"


def test_sanitize_context():
    assert sanitize_context("  a\tb\r\n  c  ") == "a b c"


def test_call_graph_edges(result):
    g = build_call_graph(result)

    assert ("app:<module>", "app:helper") in g.edges
    assert ("worker:<module>", "app:helper") in g.edges
    assert "app:unused" in g.nodes
    assert g.in_degree("app:unused") == 0


def test_graphviz_output(result):
    out = _render(GraphvizPrinter(), result)

    assert out.startswith("digraph G {\n")
    assert '  "worker:<module>" -> "app:helper";\n' in out
    assert '  "app:unused";\n' in out
    assert out.endswith("}\n")


def test_get_printer():
    assert isinstance(get_printer("console"), ConsolePrinter)
    assert isinstance(get_printer("json"), JSONPrinter)
    assert isinstance(get_printer("vimgrep"), VimPrinter)
    assert isinstance(get_printer("graphviz"), GraphvizPrinter)
    with pytest.raises(ValueError):
        get_printer("xml")
