"""Poll repository: questions, answers, votes.

All mutating methods add objects to the session and flush, but do NOT
commit.  The caller controls transaction boundaries via
``session.commit()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from pollbox.core.errors import NotFoundError
from pollbox.storage.models import Answer, Question, Vote

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession


class PollRepository:
    """Async repository for questions, answers and votes."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ── Question ─────────────────────────────────────────────────

    async def create_question(
        self,
        title: str,
        description: str,
        ending_date: datetime | None,
        answers: Sequence[tuple[str, str]],
    ) -> Question:
        """Create a question together with its ordered answers."""
        question = Question(
            title=title,
            description=description,
            ending_date=ending_date,
            answers=[
                Answer(title=a_title, description=a_description, position=i)
                for i, (a_title, a_description) in enumerate(answers)
            ],
        )
        self._session.add(question)
        await self._session.flush()
        return question

    async def get_question(self, question_id: str) -> Question | None:
        """Load a question with its answers."""
        stmt = (
            select(Question)
            .where(Question.id == question_id)
            .options(selectinload(Question.answers))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_questions(self) -> list[Question]:
        """List questions with answers, most recent first."""
        stmt = (
            select(Question)
            .options(selectinload(Question.answers))
            .order_by(Question.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def delete_question(self, question_id: str) -> None:
        """Delete a question, its answers and their votes (via cascade).

        Raises NotFoundError if the question does not exist.
        """
        stmt = (
            select(Question)
            .where(Question.id == question_id)
            .options(selectinload(Question.answers).selectinload(Answer.votes))
        )
        question = (await self._session.execute(stmt)).scalar_one_or_none()
        if question is None:
            raise NotFoundError("Question", question_id)
        await self._session.delete(question)
        await self._session.flush()

    # ── Answer ───────────────────────────────────────────────────

    async def get_answer(self, answer_id: str) -> Answer | None:
        stmt = select(Answer).where(Answer.id == answer_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # ── Vote ─────────────────────────────────────────────────────

    async def find_vote(
        self,
        user_id: str,
        *,
        answer_id: str | None = None,
        question_id: str | None = None,
    ) -> Vote | None:
        """Find a user's vote on one answer, or on any answer of a question."""
        stmt = select(Vote).where(Vote.user_id == user_id)
        if answer_id is not None:
            stmt = stmt.where(Vote.answer_id == answer_id)
        if question_id is not None:
            stmt = stmt.where(
                Vote.answer_id.in_(
                    select(Answer.id).where(Answer.question_id == question_id)
                )
            )
        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def add_vote(self, answer: Answer, user_id: str, user_name: str) -> Vote:
        """Insert a vote for *answer*. Uniqueness violations raise on flush."""
        vote = Vote(
            answer_id=answer.id,
            question_id=answer.question_id,
            user_id=user_id,
            user_name=user_name,
        )
        self._session.add(vote)
        await self._session.flush()
        return vote

    async def move_vote(self, vote: Vote, answer: Answer, user_name: str) -> Vote:
        """Point an existing vote at another answer of the same question."""
        vote.answer_id = answer.id
        vote.question_id = answer.question_id
        vote.user_name = user_name
        await self._session.flush()
        return vote

    async def list_votes(self, question_id: str) -> list[Vote]:
        """All votes on answers of a question, oldest first."""
        stmt = (
            select(Vote)
            .join(Answer, Vote.answer_id == Answer.id)
            .where(Answer.question_id == question_id)
            .order_by(Vote.created_at, Vote.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_votes(self, question_id: str) -> list[tuple[Answer, int]]:
        """Vote count per answer of a question, in answer order."""
        stmt = (
            select(Answer, func.count(Vote.id))
            .outerjoin(Vote, Vote.answer_id == Answer.id)
            .where(Answer.question_id == question_id)
            .group_by(Answer.id)
            .order_by(Answer.position)
        )
        result = await self._session.execute(stmt)
        return [(answer, count) for answer, count in result.all()]
