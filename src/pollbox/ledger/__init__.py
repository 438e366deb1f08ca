"""Domain operations: question creation and the vote ledger."""

from pollbox.ledger.questions import QuestionBook
from pollbox.ledger.votes import (
    VOTE_MESSAGES,
    AnswerTally,
    CastResult,
    VoteCheck,
    VoteLedger,
    VoteStatus,
    check_vote,
)

__all__ = [
    "VOTE_MESSAGES",
    "AnswerTally",
    "CastResult",
    "QuestionBook",
    "VoteCheck",
    "VoteLedger",
    "VoteStatus",
    "check_vote",
]
