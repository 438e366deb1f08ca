"""Events published after a write commits."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class QuestionCreated:
    question_id: str
    title: str
    description: str
    ending_date: datetime | None
    answer_titles: tuple[str, ...] = field(default_factory=tuple)
    author_name: str = ""
