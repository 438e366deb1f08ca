"""Question endpoints: list, show, create, results."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from pollbox.api.auth import Identity, get_current_user
from pollbox.api.schemas import (
    AnswerResult,
    QuestionCreate,
    QuestionResponse,
    ResultsResponse,
)
from pollbox.ledger import QuestionBook, VoteLedger
from pollbox.notify.events import QuestionCreated

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/questions",
    tags=["questions"],
    dependencies=[Depends(get_current_user)],
)


# -- GET /api/v1/questions -----------------------------------------------------


@router.get("", response_model=list[QuestionResponse])
async def list_questions(request: Request) -> list[QuestionResponse]:
    """All questions with their answers, newest first."""
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        questions = await QuestionBook(session).list_questions()
        return [QuestionResponse.model_validate(q) for q in questions]


# -- POST /api/v1/questions ----------------------------------------------------


@router.post("", response_model=QuestionResponse, status_code=201)
async def create_question(
    body: QuestionCreate,
    request: Request,
    user: Identity = Depends(get_current_user),  # noqa: B008
) -> QuestionResponse:
    """Create a question with its answers and announce it."""
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        question = await QuestionBook(session).create_question(
            body.title,
            body.description,
            body.ending_date,
            [(a.title, a.description) for a in body.answers],
        )
        await session.commit()
        response = QuestionResponse.model_validate(question)

    logger.info("Question %s created by %s", response.id, user.id)

    # Post-commit; the dispatcher only enqueues
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is not None:
        notifier.publish(
            QuestionCreated(
                question_id=response.id,
                title=response.title,
                description=response.description,
                ending_date=response.ending_date,
                answer_titles=tuple(a.title for a in response.answers),
                author_name=user.name,
            )
        )
    return response


# -- GET /api/v1/questions/{question_id} ---------------------------------------


@router.get("/{question_id}", response_model=QuestionResponse)
async def get_question(question_id: str, request: Request) -> QuestionResponse:
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        question = await QuestionBook(session).get_question(question_id)
        return QuestionResponse.model_validate(question)


# -- GET /api/v1/questions/{question_id}/results -------------------------------


@router.get("/{question_id}/results", response_model=ResultsResponse)
async def question_results(question_id: str, request: Request) -> ResultsResponse:
    """Vote count per answer."""
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        tallies = await VoteLedger(session).tally(question_id)

    return ResultsResponse(
        question_id=question_id,
        total=sum(t.votes for t in tallies),
        answers=[
            AnswerResult(answer_id=t.answer_id, title=t.title, votes=t.votes)
            for t in tallies
        ],
    )
