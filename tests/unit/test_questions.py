"""Tests for QuestionBook."""

from __future__ import annotations

from datetime import datetime

import pytest

from pollbox.core.errors import EmptyAnswersError, NotFoundError
from pollbox.ledger import QuestionBook, VoteLedger


class TestQuestionBook:
    async def test_create_and_get(self, db_session):
        book = QuestionBook(db_session)
        ending = datetime(2026, 12, 1, 9, 0)
        created = await book.create_question(
            "Holiday party venue?", "Vote by Friday", ending, [("Bowling", ""), ("Karaoke", "")]
        )
        await db_session.commit()

        loaded = await book.get_question(created.id)
        assert loaded.title == "Holiday party venue?"
        assert loaded.description == "Vote by Friday"
        assert loaded.ending_date == ending
        assert [a.title for a in loaded.answers] == ["Bowling", "Karaoke"]

    async def test_empty_answers_rejected_before_write(self, db_session):
        book = QuestionBook(db_session)
        with pytest.raises(EmptyAnswersError):
            await book.create_question("No options?", "", None, [])
        assert await book.list_questions() == []

    async def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError, match="Question not found: nope"):
            await QuestionBook(db_session).get_question("nope")

    async def test_list(self, db_session):
        book = QuestionBook(db_session)
        await book.create_question("A?", "", None, [("x", "")])
        await book.create_question("B?", "", None, [("y", "")])
        await db_session.commit()
        assert {q.title for q in await book.list_questions()} == {"A?", "B?"}

    async def test_delete_removes_votes(self, db_session):
        book = QuestionBook(db_session)
        q = await book.create_question("Temp?", "", None, [("x", ""), ("y", "")])
        ledger = VoteLedger(db_session)
        await ledger.cast_vote("alice", "Alice", q.answers[0].id)
        await db_session.commit()

        await book.delete_question(q.id)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await ledger.list_votes(q.id)
        assert await book.list_questions() == []

    async def test_delete_missing(self, db_session):
        with pytest.raises(NotFoundError):
            await QuestionBook(db_session).delete_question("nope")
