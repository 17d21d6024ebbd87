"""Outline text parser.

Each non-blank line becomes one point. Nesting depth comes from leading whitespace only:
two characters per level, with a tab counting as two characters. Bullets and numbering are
kept in the point text.
"""

from __future__ import annotations

from collections.abc import Callable

from outlinewriter.models.outline import OutlinePoint
from outlinewriter.utils.ids import new_point_id

INDENT_WIDTH = 2


def _indent_width(line: str) -> int:
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += INDENT_WIDTH
        else:
            break
    return width


def parse_outline(raw_text: str, *, id_factory: Callable[[], str] = new_point_id) -> list[OutlinePoint]:
    """Parse raw outline text into ordered, pending points.

    Args:
        raw_text: Text pasted by the user.
        id_factory: Id source, injectable for deterministic tests.

    Returns:
        Points in source order, each with empty content.
    """

    points: list[OutlinePoint] = []
    for line in raw_text.splitlines():
        if not line.strip():
            continue
        points.append(
            OutlinePoint(
                id=id_factory(),
                text=line.strip(),
                level=_indent_width(line) // INDENT_WIDTH,
            )
        )
    return points
