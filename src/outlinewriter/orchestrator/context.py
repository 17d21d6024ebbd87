"""Context assembly for generation prompts.

Pure functions over an ordered point sequence; nothing here mutates the points.
"""

from __future__ import annotations

from collections.abc import Sequence

from outlinewriter.models.outline import OutlinePoint, find_index

CONTENT_SEPARATOR = "\n\n"
DEFAULT_LOOK_AHEAD = 3


def accumulated_text(point_id: str, points: Sequence[OutlinePoint]) -> str:
    """Prose committed before ``point_id``.

    Every earlier point counts regardless of its level; empty contents are skipped.
    Returns an empty string for the first point and for unknown ids.
    """

    idx = find_index(points, point_id)
    if idx <= 0:
        return ""
    return CONTENT_SEPARATOR.join(p.content for p in points[:idx] if p.content.strip())


def look_ahead_points(point_id: str, points: Sequence[OutlinePoint], count: int = DEFAULT_LOOK_AHEAD) -> list[str]:
    """Text of up to ``count`` points that follow ``point_id``."""

    idx = find_index(points, point_id)
    if idx == -1 or count <= 0:
        return []
    return [p.text for p in points[idx + 1 : idx + 1 + count]]
