"""
Output formats for an AnalysisResult.

    console   colored, grouped by call type (rich)
    json      the AnalysisResult as indented JSON
    vimgrep   path:line:col:context, one line per usage (quickfix friendly)
    graphviz  DOT digraph of calling file → definition
"""

import json
import logging
import re
from pathlib import Path

import networkx as nx
from rich.console import Console
from rich.markup import escape

from .models import CALL_TYPE_ORDER, AnalysisResult, CallType, UsageRecord

log = logging.getLogger(__name__)

SEPARATOR_WIDTH = 80

_CALL_TYPE_STYLES: dict[CallType, str] = {
    CallType.DEFINITION: "magenta",
    CallType.INSTANCE: "green",
    CallType.CLASS: "cyan",
    CallType.STATIC: "blue",
    CallType.FUNCTION: "yellow",
    CallType.DECORATOR: "magenta",
}


def usage_count_style(count: int) -> str:
    if count == 0:
        return "yellow"
    if count <= 2:
        return "red"
    if count <= 5:
        return "yellow"
    return "green"


def _console(stream, no_color: bool) -> Console:
    return Console(
        file=stream,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
        emoji=False,
    )


class ConsolePrinter:
    def __init__(self, no_color: bool = False) -> None:
        self.no_color = no_color

    def print(self, result: AnalysisResult, stream) -> None:
        console = _console(stream, self.no_color)
        for record in result.records:
            self._print_record(console, record)

    def _print_record(self, console: Console, record: UsageRecord) -> None:
        d = record.definition
        console.print(f"Method: [bold cyan]{escape(d.name)}[/]")
        console.print(f"Defined in: [blue]{escape(d.filename)}:{d.line_number}[/]")
        style = usage_count_style(record.total_usages)
        console.print(f"Total usages: [{style}]{record.total_usages}[/]")

        separator = "-" * SEPARATOR_WIDTH
        if record.total_usages == 0:
            console.print("[yellow]  (No usages found)[/]")
            console.print(separator)
            return

        console.print("[bold]Usage breakdown:[/]")
        for call_type in CALL_TYPE_ORDER:
            count = record.usages_by_type.get(call_type, 0)
            if count > 0:
                ct_style = _CALL_TYPE_STYLES[call_type]
                console.print(f"  - [{ct_style}]{call_type.label}[/]: [{ct_style}]{count}[/]")

        for call_type in CALL_TYPE_ORDER:
            usages = [u for u in record.usages if u.call_type is call_type]
            if not usages:
                continue
            ct_style = _CALL_TYPE_STYLES[call_type]
            console.print()
            console.print(f"[bold {ct_style}]{call_type.label}:[/]")
            for usage in usages:
                console.print(f"  - [white]{escape(usage.location)}[/]")
                console.print(f"    {escape(usage.context)}")

        console.print(separator)

    def print_summary(self, result: AnalysisResult, stream) -> None:
        """Print usage-band and call-type totals over all records."""
        console = _console(stream, self.no_color)
        records = result.records
        total = len(records)

        bands = {"unused": 0, "low": 0, "medium": 0, "high": 0}
        by_type = {ct: 0 for ct in CALL_TYPE_ORDER}
        for r in records:
            if r.total_usages == 0:
                bands["unused"] += 1
            elif r.total_usages <= 2:
                bands["low"] += 1
            elif r.total_usages <= 5:
                bands["medium"] += 1
            else:
                bands["high"] += 1
            for ct, n in r.usages_by_type.items():
                by_type[ct] += n

        def pct(n: int) -> str:
            return f"{(n / total * 100) if total else 0.0:.1f}%"

        separator = "=" * SEPARATOR_WIDTH
        console.print()
        console.print(f"[bold]{separator}[/]")
        console.print("[bold cyan]SUMMARY[/]")
        console.print(f"[bold]{separator}[/]")
        console.print(f"Total methods analyzed: [bold green]{total}[/]")
        console.print()
        console.print("[bold]Methods by usage count:[/]")
        rows = (
            ("Unused (0 usages)", bands["unused"], "yellow"),
            ("Low usage (1-2 usages)", bands["low"], "red"),
            ("Medium (3-5 usages)", bands["medium"], "yellow"),
            ("High usage (6+ usages)", bands["high"], "green"),
        )
        for label, n, style in rows:
            console.print(f"  - [{style}]{label}[/]: [{style}]{n}[/] ([{style}]{pct(n)}[/])")
        console.print()
        console.print("[bold]Call type distribution:[/]")
        for ct in CALL_TYPE_ORDER:
            if ct is CallType.DEFINITION:
                continue
            style = _CALL_TYPE_STYLES[ct]
            console.print(f"  - [{style}]{ct.label}[/]: [{style}]{by_type[ct]}[/]")
        console.print(f"[bold]{separator}[/]")


class JSONPrinter:
    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def print(self, result: AnalysisResult, stream) -> None:
        stream.write(json.dumps(result.to_dict(), indent=self.indent))
        stream.write("\n")


def sanitize_context(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class VimPrinter:
    def print(self, result: AnalysisResult, stream) -> None:
        for record in result.records:
            for usage in record.usages:
                ctx = sanitize_context(usage.context)
                if not ctx:
                    ctx = f"{record.definition.name} [{usage.call_type.value}]"
                stream.write(f"{usage.location.strip()}:{ctx}\n")


def _node_name(path: str, name: str) -> str:
    return f"{Path(path).stem}:{name}"


def _dot_quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_call_graph(result: AnalysisResult) -> nx.DiGraph:
    """Directed graph with an edge from each calling file to each definition it uses."""
    g: nx.DiGraph = nx.DiGraph()
    for record in result.records:
        d = record.definition
        callee = _node_name(d.filename, d.name)
        g.add_node(callee, kind="definition", file=d.filename)
        for usage in record.usages:
            if usage.call_type is CallType.DEFINITION:
                continue
            caller = _node_name(usage.path, "<module>")
            g.add_node(caller, kind="module", file=usage.path)
            g.add_edge(caller, callee, call_type=usage.call_type.value)
    log.debug("Graph: %d nodes, %d edges", g.number_of_nodes(), g.number_of_edges())
    return g


class GraphvizPrinter:
    def print(self, result: AnalysisResult, stream) -> None:
        g = build_call_graph(result)
        stream.write("digraph G {\n")
        stream.write("  rankdir=LR;\n")
        stream.write("  node [shape=box, fontsize=10];\n")
        for node in sorted(g.nodes()):
            stream.write(f"  {_dot_quote(node)};\n")
        for u, v in sorted(g.edges()):
            stream.write(f"  {_dot_quote(u)} -> {_dot_quote(v)};\n")
        stream.write("}\n")


PRINTER_KINDS: tuple[str, ...] = ("console", "json", "vimgrep", "graphviz")


def get_printer(kind: str, no_color: bool = False):
    if kind == "console":
        return ConsolePrinter(no_color=no_color)
    if kind == "json":
        return JSONPrinter()
    if kind == "vimgrep":
        return VimPrinter()
    if kind == "graphviz":
        return GraphvizPrinter()
    raise ValueError(f"invalid output format {kind!r} (expected one of {', '.join(PRINTER_KINDS)})")
