"""Tests for the core error hierarchy."""

from pollbox.core.errors import (
    ConfigError,
    EmptyAnswersError,
    NotFoundError,
    NotificationError,
    PollboxError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)


class TestHierarchy:
    """All errors inherit from PollboxError."""

    def test_all_are_pollbox_errors(self):
        errors = [
            UnauthorizedError("no token"),
            NotFoundError("Question", "q1"),
            ValidationError("userId", "can't be blank"),
            EmptyAnswersError(),
            ConfigError("bad"),
            StorageError("db down"),
            NotificationError("smtp down"),
        ]
        for err in errors:
            assert isinstance(err, PollboxError)

    def test_empty_answers_is_validation_error(self):
        assert isinstance(EmptyAnswersError(), ValidationError)


class TestNotFoundError:
    def test_attributes(self):
        err = NotFoundError("Answer", "a-42")
        assert err.kind == "Answer"
        assert err.identifier == "a-42"
        assert str(err) == "Answer not found: a-42"


class TestValidationError:
    def test_attributes(self):
        err = ValidationError("userId", "should vote for an answer once")
        assert err.field == "userId"
        assert err.message == "should vote for an answer once"
        assert err.status_code == 422
        assert str(err) == "userId should vote for an answer once"

    def test_empty_answers(self):
        err = EmptyAnswersError()
        assert err.field == "answers"
        assert err.message == "Answers should be filled"
        assert err.status_code == 400


class TestHandlers:
    def _client(self):
        from fastapi import FastAPI
        from fastapi.testclient import TestClient

        from pollbox.api.errors import register_error_handlers

        app = FastAPI()
        register_error_handlers(app)

        @app.get("/duplicate")
        async def duplicate():
            raise ValidationError("userId", "should vote for an answer once")

        @app.get("/empty")
        async def empty():
            raise EmptyAnswersError

        @app.get("/storage")
        async def storage():
            raise StorageError("db down")

        return TestClient(app)

    def test_validation_body(self):
        resp = self._client().get("/duplicate")
        assert resp.status_code == 422
        assert resp.json() == {
            "errors": [{"field": "userId", "message": "should vote for an answer once"}]
        }

    def test_subclass_status_code(self):
        resp = self._client().get("/empty")
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "answers"

    def test_other_errors_are_internal(self):
        resp = self._client().get("/storage")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}
