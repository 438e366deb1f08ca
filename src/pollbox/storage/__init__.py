"""Persistence for questions, answers and votes."""

from pollbox.storage.database import create_db
from pollbox.storage.models import Answer, Base, Question, Vote
from pollbox.storage.repository import PollRepository

__all__ = [
    "Answer",
    "Base",
    "PollRepository",
    "Question",
    "Vote",
    "create_db",
]
