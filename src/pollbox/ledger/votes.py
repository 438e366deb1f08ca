"""Vote ledger: one vote per user per question.

A user's vote is keyed by (user, question) even though the row points at
an answer.  Submitting again for another answer of the same question
moves the existing row; submitting again for the same answer is refused.

The pre-write check runs explicitly in :func:`check_vote` and reports
which rule a submission would break.  The store backs the check with
unique constraints on (user_id, answer_id) and (user_id, question_id),
so two racing inserts cannot both land.  The losing write is rolled back
to its SAVEPOINT, re-evaluated once, and ends up as an update or a
duplicate.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from pollbox.core.errors import NotFoundError, StorageError, ValidationError
from pollbox.storage.repository import PollRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from pollbox.storage.models import Answer, Vote

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 2


class VoteStatus(enum.Enum):
    """Outcome of the pre-write check."""

    OK = "ok"
    ANSWER_TAKEN = "answer_taken"
    QUESTION_TAKEN = "question_taken"


VOTE_MESSAGES: dict[VoteStatus, str] = {
    VoteStatus.ANSWER_TAKEN: "should vote for an answer once",
    VoteStatus.QUESTION_TAKEN: "should vote for a question once",
}


@dataclass(frozen=True, slots=True)
class VoteCheck:
    """Result of :func:`check_vote`: the status and the conflicting row."""

    status: VoteStatus
    existing: Vote | None = None

    @property
    def ok(self) -> bool:
        return self.status is VoteStatus.OK

    @property
    def message(self) -> str | None:
        return VOTE_MESSAGES.get(self.status)


@dataclass(frozen=True, slots=True)
class CastResult:
    """What a successful cast did."""

    vote_id: str
    answer_id: str
    created: bool


@dataclass(frozen=True, slots=True)
class AnswerTally:
    answer_id: str
    title: str
    votes: int


async def check_vote(repo: PollRepository, user_id: str, answer: Answer) -> VoteCheck:
    """Check a prospective vote of *user_id* for *answer*.

    The same-answer rule is evaluated before the same-question rule, so a
    repeated vote for one answer reports ANSWER_TAKEN even though it also
    breaks the question rule.
    """
    same_answer = await repo.find_vote(user_id, answer_id=answer.id)
    if same_answer is not None:
        return VoteCheck(VoteStatus.ANSWER_TAKEN, same_answer)

    same_question = await repo.find_vote(user_id, question_id=answer.question_id)
    if same_question is not None:
        return VoteCheck(VoteStatus.QUESTION_TAKEN, same_question)

    return VoteCheck(VoteStatus.OK)


class VoteLedger:
    """Casts and reads votes within one session.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo = PollRepository(session)

    async def cast_vote(
        self,
        user_id: str,
        user_name: str,
        answer_id: str,
        *,
        question_id: str | None = None,
        allow_update: bool = True,
    ) -> CastResult:
        """Record *user_id*'s choice of *answer_id*.

        Args:
            user_id: Stable identifier from the identity resolver.
            user_name: Display name, copied onto the row.
            answer_id: The chosen answer.
            question_id: When given, the answer must belong to it.
            allow_update: When false, an existing vote on another answer of
                the question is refused instead of moved.

        Returns:
            CastResult with ``created=True`` for a new row, ``False`` when
            an existing row was moved to *answer_id*.

        Raises:
            ValidationError: Blank identity, or a rule in :func:`check_vote`
                refused the vote.
            NotFoundError: Unknown answer, or answer outside *question_id*.
            StorageError: The uniqueness race repeated after re-evaluation.
        """
        if not user_id:
            raise ValidationError("userId", "can't be blank")
        if user_name is None:
            raise ValidationError("userName", "can't be blank")

        for _attempt in range(_MAX_ATTEMPTS):
            answer = await self._resolve_answer(answer_id, question_id)
            owning_question = answer.question_id
            check = await check_vote(self._repo, user_id, answer)

            if check.status is VoteStatus.ANSWER_TAKEN:
                raise ValidationError("userId", VOTE_MESSAGES[check.status])
            if check.status is VoteStatus.QUESTION_TAKEN and not allow_update:
                raise ValidationError("userId", VOTE_MESSAGES[check.status])

            # The write runs in a SAVEPOINT: a conflict undoes only this write,
            # never the caller's other pending work.
            try:
                async with self._session.begin_nested():
                    if check.existing is not None:
                        vote = await self._repo.move_vote(
                            check.existing, answer, user_name
                        )
                        created = False
                    else:
                        vote = await self._repo.add_vote(answer, user_id, user_name)
                        created = True
            except IntegrityError:
                logger.warning(
                    "Concurrent vote by %s on question %s, re-checking",
                    user_id,
                    owning_question,
                )
                continue

            logger.info(
                "Vote %s %s by %s on question %s",
                vote.id,
                "created" if created else "moved",
                user_id,
                owning_question,
            )
            return CastResult(vote_id=vote.id, answer_id=answer_id, created=created)

        msg = f"Vote by {user_id} for answer {answer_id} kept conflicting"
        raise StorageError(msg)

    async def list_votes(self, question_id: str) -> list[Vote]:
        """Votes on every answer of a question, in insertion order."""
        await self._require_question(question_id)
        return await self._repo.list_votes(question_id)

    async def tally(self, question_id: str) -> list[AnswerTally]:
        """Vote count per answer, in answer order."""
        await self._require_question(question_id)
        rows = await self._repo.count_votes(question_id)
        return [
            AnswerTally(answer_id=answer.id, title=answer.title, votes=count)
            for answer, count in rows
        ]

    async def _resolve_answer(self, answer_id: str, question_id: str | None) -> Answer:
        answer = await self._repo.get_answer(answer_id)
        if answer is None:
            raise NotFoundError("Answer", answer_id)
        if question_id is not None and answer.question_id != question_id:
            raise NotFoundError("Answer", answer_id)
        return answer

    async def _require_question(self, question_id: str) -> None:
        if await self._repo.get_question(question_id) is None:
            raise NotFoundError("Question", question_id)
