"""Question creation and lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pollbox.core.errors import EmptyAnswersError, NotFoundError
from pollbox.storage.repository import PollRepository

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

    from pollbox.storage.models import Question


class QuestionBook:
    """Creates, reads and deletes questions within one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._repo = PollRepository(session)

    async def create_question(
        self,
        title: str,
        description: str,
        ending_date: datetime | None,
        answers: Sequence[tuple[str, str]],
    ) -> Question:
        """Persist a question with its answers (flushed, not committed).

        Raises EmptyAnswersError before touching the session when
        *answers* is empty.
        """
        if not answers:
            raise EmptyAnswersError
        return await self._repo.create_question(title, description, ending_date, answers)

    async def list_questions(self) -> list[Question]:
        return await self._repo.list_questions()

    async def get_question(self, question_id: str) -> Question:
        question = await self._repo.get_question(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return question

    async def delete_question(self, question_id: str) -> None:
        await self._repo.delete_question(question_id)
