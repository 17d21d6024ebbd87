"""Outline models.

An outline is a flat, ordered list of points. Order is fixed when the outline is parsed and
never changes afterwards; ``level`` only affects how a point is framed in prompts.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, Field


class PointState(str, Enum):
    """Generation lifecycle of a single outline point."""

    PENDING = "pending"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[PointState, frozenset[PointState]] = {
    PointState.PENDING: frozenset({PointState.GENERATING}),
    # GENERATING -> GENERATING restarts a point left over from an interrupted call.
    PointState.GENERATING: frozenset({PointState.GENERATING, PointState.DONE, PointState.FAILED}),
    PointState.DONE: frozenset({PointState.GENERATING}),
    PointState.FAILED: frozenset({PointState.GENERATING}),
}


class InvalidTransition(ValueError):
    pass


class OutlinePoint(BaseModel):
    """One line of the user's outline together with its generated prose."""

    id: str
    text: str
    level: int = Field(default=0, ge=0)

    content: str = ""
    state: PointState = PointState.PENDING
    error_detail: str | None = None

    def _move(self, target: PointState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"point {self.id}: {self.state.value} -> {target.value} is not allowed")
        self.state = target

    def mark_generating(self) -> None:
        self._move(PointState.GENERATING)
        self.error_detail = None

    def mark_done(self, content: str) -> None:
        self._move(PointState.DONE)
        self.content = content
        self.error_detail = None

    def mark_failed(self, message: str) -> None:
        """Fail the point; previously committed ``content`` is kept as-is."""

        self._move(PointState.FAILED)
        self.error_detail = message


def find_index(points: Sequence[OutlinePoint], point_id: str) -> int:
    """Position of ``point_id`` in ``points``, or -1 when absent."""

    for i, p in enumerate(points):
        if p.id == point_id:
            return i
    return -1


def compose_document(points: Sequence[OutlinePoint]) -> str:
    """Join every non-empty ``content`` in outline order, separated by a blank line."""

    return "\n\n".join(p.content for p in points if p.content.strip())


def progress(points: Sequence[OutlinePoint]) -> int:
    """Percentage (0-100) of points in ``DONE`` state."""

    if not points:
        return 0
    done = sum(1 for p in points if p.state == PointState.DONE)
    return round(done * 100 / len(points))


SAMPLE_OUTLINE = """Chủ đề: Lợi ích của việc đọc sách

1. Mở bài
- Giới thiệu chung về văn hóa đọc
- Dẫn dắt vào tầm quan trọng của sách

2. Thân bài
- Luận điểm 1: Đọc sách mở mang kiến thức
-- Sách là kho tàng tri thức nhân loại
-- Giúp ta hiểu về lịch sử, văn hóa, khoa học
- Luận điểm 2: Đọc sách rèn luyện tư duy
-- Tăng khả năng tập trung
-- Kích thích trí tưởng tượng phong phú
- Luận điểm 3: Đọc sách nuôi dưỡng tâm hồn
-- Giúp giảm căng thẳng sau giờ làm việc
-- Hình thành nhân cách tốt đẹp qua các bài học đạo đức

3. Kết bài
- Khẳng định lại giá trị của việc đọc sách
- Lời khuyên cho mọi người nên duy trì thói quen đọc"""
