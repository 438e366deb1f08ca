"""Request/response models shared by the v1 routes.

Fields are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# -- Questions -----------------------------------------------------------------


class AnswerCreate(CamelModel):
    title: str
    description: str = ""


class QuestionCreate(CamelModel):
    title: str
    description: str = ""
    ending_date: datetime | None = None
    answers: list[AnswerCreate] = Field(default_factory=list)


class AnswerResponse(CamelModel):
    id: str
    question_id: str
    title: str
    description: str
    position: int


class QuestionResponse(CamelModel):
    id: str
    title: str
    description: str
    ending_date: datetime | None = None
    created_at: datetime
    answers: list[AnswerResponse] = Field(default_factory=list)


# -- Votes ---------------------------------------------------------------------


class VoteRequest(CamelModel):
    answer_id: str


class VoteCreatedResponse(CamelModel):
    id: str


class VoteResponse(CamelModel):
    id: str
    answer_id: str


# -- Results -------------------------------------------------------------------


class AnswerResult(CamelModel):
    answer_id: str
    title: str
    votes: int


class ResultsResponse(CamelModel):
    question_id: str
    total: int
    answers: list[AnswerResult]
