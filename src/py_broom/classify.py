"""
Line-level call classification.

classify(line, name) decides how a raw search hit references `name`. Patterns
are tried in a fixed precedence order and the first one that matches wins:

    definition  def name(
    decorator   @name / @pkg.mod.name        (whole line)
    instance    self.name(
    class       cls.name(
    static      ClassName.name(              (identifier starting uppercase)
    function    name(                        (not preceded by a dot)

This is a lexical approximation; nothing here resolves scopes or types.
"""

import functools
import re

from .models import CallType

COMMENT_MARKER = "#"


@functools.lru_cache(maxsize=4096)
def _call_patterns(name: str) -> tuple[tuple[CallType, re.Pattern], ...]:
    escaped = re.escape(name)
    return (
        (CallType.DEFINITION, re.compile(r"^\s*(?:async\s+)?def\s+" + escaped + r"\s*\(")),
        (CallType.DECORATOR, re.compile(r"^\s*@(\w+\.)*" + escaped + r"\s*$")),
        (CallType.INSTANCE, re.compile(r"\bself\." + escaped + r"\s*\(")),
        (CallType.CLASS, re.compile(r"\bcls\." + escaped + r"\s*\(")),
        (CallType.STATIC, re.compile(r"\b[A-Z][A-Za-z0-9_]*\." + escaped + r"\s*\(")),
        # group 1 is the character before the name, or "" at line start
        (CallType.FUNCTION, re.compile(r"(^|[^\w])" + escaped + r"\s*\(")),
    )


def is_import_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("import ") or stripped.startswith("from ")


def classify(line: str, name: str) -> CallType | None:
    """Return the CallType for `line` as a reference to `name`, or None."""
    if line.strip().startswith(COMMENT_MARKER):
        return None

    idx = line.find(COMMENT_MARKER)
    if idx != -1:
        code = line[:idx]
        # Only drop the comment when the code part still mentions the name;
        # otherwise the whole line is tested.
        if name in code:
            line = code

    for call_type, pattern in _call_patterns(name):
        m = pattern.search(line)
        if m is None:
            continue
        if call_type is CallType.FUNCTION and m.group(1) == ".":
            # a qualified call none of the receiver patterns accepted
            return None
        return call_type
    return None
