"""Placeholder scanning for SQL text.

Finds ``?``, ``?NNN``, ``:name``, ``@name`` and ``$name`` parameters outside
string literals, quoted identifiers and comments, and numbers them the way
SQLite does: ``?NNN`` takes NNN, a bare ``?`` takes one more than the largest
index so far, and a named parameter takes the next index on its first
appearance and reuses it afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Largest parameter number the engine accepts (SQLITE_MAX_VARIABLE_NUMBER).
MAX_PARAMETER_NUMBER = 32766

_TOKEN_RE = re.compile(
    r"""
    (?P<skip>
        '(?:[^']|'')*'
      | "(?:[^"]|"")*"
      | `(?:[^`]|``)*`
      | \[[^\]]*\]
      | --[^\n]*
      | /\*.*?(?:\*/|\Z)
    )
  | \?(?P<number>\d+)?
  | (?<![\w$])(?P<name>[:@$]\w+)
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class PlaceholderPlan:
    """SQL rewritten into numbered ``?NNN`` form plus its parameter map."""

    sql: str
    parameter_count: int = 0
    names: dict[str, int] = field(default_factory=dict)

    def index_of(self, name: str) -> int:
        """Return the 1-based index for a parameter name (with sigil), or 0."""
        return self.names.get(name, 0)


def scan_placeholders(sql: str) -> PlaceholderPlan:
    """Number every placeholder in ``sql`` and rewrite it as ``?NNN``.

    The rewritten text binds purely by position, so named parameters never
    need to be passed to the driver by name.
    """
    names: dict[str, int] = {}
    highest = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal highest
        if match.group("skip") is not None:
            return match.group(0)

        number = match.group("number")
        name = match.group("name")
        if number is not None:
            index = int(number)
            if not 1 <= index <= MAX_PARAMETER_NUMBER:
                # Left untouched so the engine rejects it at prepare time
                return match.group(0)
            names.setdefault(f"?{number}", index)
        elif name is not None:
            if name in names:
                return f"?{names[name]}"
            index = highest + 1
            names[name] = index
        else:
            index = highest + 1

        highest = max(highest, index)
        return f"?{index}"

    rewritten = _TOKEN_RE.sub(_replace, sql)
    return PlaceholderPlan(sql=rewritten, parameter_count=highest, names=names)
