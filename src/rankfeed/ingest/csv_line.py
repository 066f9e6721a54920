"""Split a single CSV line into trimmed fields."""

from __future__ import annotations

from typing import List


def parse_csv_line(line: str) -> List[str]:
    """Tokenize ``line`` honoring double-quoted segments.

    A ``"`` only toggles the quoting state; there is no escape handling, so
    unbalanced quotes merge or split fields instead of raising.
    """

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields
