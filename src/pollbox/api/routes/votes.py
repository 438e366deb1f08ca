"""Vote endpoints: list, create, upsert."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from pollbox.api.auth import Identity, get_current_user
from pollbox.api.schemas import VoteCreatedResponse, VoteRequest, VoteResponse
from pollbox.ledger import CastResult, VoteLedger

router = APIRouter(prefix="/api/v1/questions", tags=["votes"])


def _render(result: CastResult) -> JSONResponse:
    if result.created:
        body = VoteCreatedResponse(id=result.vote_id)
        return JSONResponse(status_code=201, content=body.model_dump(by_alias=True))
    updated = VoteResponse(id=result.vote_id, answer_id=result.answer_id)
    return JSONResponse(status_code=200, content=updated.model_dump(by_alias=True))


# -- GET /api/v1/questions/{question_id}/votes ---------------------------------


@router.get(
    "/{question_id}/votes",
    response_model=list[VoteResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_votes(question_id: str, request: Request) -> list[VoteResponse]:
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        votes = await VoteLedger(session).list_votes(question_id)
        return [VoteResponse.model_validate(v) for v in votes]


# -- POST /api/v1/questions/{question_id}/votes --------------------------------


@router.post("/{question_id}/votes", response_model=VoteCreatedResponse, status_code=201)
async def create_vote(
    question_id: str,
    body: VoteRequest,
    request: Request,
    user: Identity = Depends(get_current_user),  # noqa: B008
) -> JSONResponse:
    """Cast a first vote. Any earlier vote on the question is an error."""
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        result = await VoteLedger(session).cast_vote(
            user.id,
            user.name,
            body.answer_id,
            question_id=question_id,
            allow_update=False,
        )
        await session.commit()
    return _render(result)


# -- PUT /api/v1/questions/{question_id}/votes ---------------------------------


@router.put("/{question_id}/votes", response_model=VoteResponse)
async def upsert_vote(
    question_id: str,
    body: VoteRequest,
    request: Request,
    user: Identity = Depends(get_current_user),  # noqa: B008
) -> JSONResponse:
    """Cast a vote or move the caller's existing vote to another answer."""
    db_factory = request.app.state.db_factory
    async with db_factory() as session:
        result = await VoteLedger(session).cast_vote(
            user.id,
            user.name,
            body.answer_id,
            question_id=question_id,
        )
        await session.commit()
    return _render(result)
