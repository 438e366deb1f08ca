"""Tests for notification rendering, transports and the dispatcher."""

from __future__ import annotations

import asyncio
import smtplib
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from pollbox.config.schema import MailConfig
from pollbox.core.errors import NotificationError
from pollbox.notify import (
    LogMailer,
    NotificationDispatcher,
    QuestionCreated,
    SmtpMailer,
    build_dispatcher,
    render_question_created,
)


class _Recorder:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[QuestionCreated] = []

    def send_question_created(self, event: QuestionCreated) -> None:
        if self.fail:
            msg = "relay down"
            raise OSError(msg)
        self.sent.append(event)


def _event(question_id: str = "q-1", **kwargs: object) -> QuestionCreated:
    fields: dict[str, object] = {
        "title": "Tea or coffee?",
        "description": "Kitchen restock",
        "ending_date": None,
        "answer_titles": ("Tea", "Coffee"),
        "author_name": "Alice",
    }
    fields.update(kwargs)
    return QuestionCreated(question_id=question_id, **fields)  # type: ignore[arg-type]


# ── Rendering ────────────────────────────────────────────────────


class TestRender:
    def test_subject_and_sender(self) -> None:
        msg = render_question_created(_event(), "polls@example.com")
        assert msg["Subject"] == "New question: Tea or coffee?"
        assert msg["From"] == "polls@example.com"
        assert msg["To"] is None

    def test_body_lists_answers(self) -> None:
        body = render_question_created(_event(), "x@example.com").get_content()
        assert "Alice asked: Tea or coffee?" in body
        assert "Kitchen restock" in body
        assert "  - Tea" in body
        assert "  - Coffee" in body
        assert "Voting closes" not in body

    def test_body_mentions_ending_date(self) -> None:
        ending = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
        body = render_question_created(
            _event(ending_date=ending, author_name=""), "x@example.com"
        ).get_content()
        assert "Someone asked" in body
        assert "Voting closes 2026-05-01T12:00:00+00:00." in body


# ── Transports ───────────────────────────────────────────────────


class TestSmtpMailer:
    def _config(self, **kwargs: object) -> MailConfig:
        base: dict[str, object] = {
            "enabled": True,
            "smtp_host": "mail.example.com",
            "smtp_port": 2525,
            "recipients": ["team@example.com", "ops@example.com"],
        }
        base.update(kwargs)
        return MailConfig.model_validate(base)

    def test_sends_with_tls_and_login(self) -> None:
        config = self._config(username="bot", password="hunter2")
        with patch("pollbox.notify.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            SmtpMailer(config).send_question_created(_event())

        smtp_cls.assert_called_once_with("mail.example.com", 2525, timeout=10.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot", "hunter2")
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "team@example.com, ops@example.com"

    def test_plain_relay_without_login(self) -> None:
        config = self._config(use_tls=False)
        with patch("pollbox.notify.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            SmtpMailer(config).send_question_created(_event())

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    def test_no_recipients_skips_connection(self) -> None:
        config = self._config(recipients=[])
        with patch("pollbox.notify.mailer.smtplib.SMTP") as smtp_cls:
            SmtpMailer(config).send_question_created(_event())
        smtp_cls.assert_not_called()

    def test_smtp_error_wrapped(self) -> None:
        config = self._config()
        with patch("pollbox.notify.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            with pytest.raises(NotificationError, match="q-1"):
                SmtpMailer(config).send_question_created(_event())

    def test_connection_error_wrapped(self) -> None:
        config = self._config()
        with (
            patch(
                "pollbox.notify.mailer.smtplib.SMTP",
                side_effect=ConnectionRefusedError("nope"),
            ),
            pytest.raises(NotificationError),
        ):
            SmtpMailer(config).send_question_created(_event())


# ── Dispatcher ───────────────────────────────────────────────────


class TestDispatcher:
    async def test_delivers_published_events(self) -> None:
        mailer = _Recorder()
        dispatcher = NotificationDispatcher(mailer)
        dispatcher.start()
        try:
            assert dispatcher.publish(_event("q-1"))
            assert dispatcher.publish(_event("q-2"))
            await dispatcher.drain()
        finally:
            await dispatcher.stop()

        assert [e.question_id for e in mailer.sent] == ["q-1", "q-2"]
        assert dispatcher.delivered == 2
        assert dispatcher.failed == 0

    async def test_failure_is_counted_and_worker_survives(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        mailer = _Recorder(fail=True)
        dispatcher = NotificationDispatcher(mailer)
        dispatcher.start()
        try:
            dispatcher.publish(_event("q-1"))
            await dispatcher.drain()
            assert dispatcher.failed == 1
            assert dispatcher.running

            mailer.fail = False
            dispatcher.publish(_event("q-2"))
            await dispatcher.drain()
        finally:
            await dispatcher.stop()

        assert dispatcher.delivered == 1
        assert "Notification for question q-1 failed" in caplog.text

    async def test_full_queue_drops(self) -> None:
        dispatcher = NotificationDispatcher(_Recorder(), maxsize=1)
        # Not started, so nothing drains the queue
        assert dispatcher.publish(_event("q-1"))
        assert not dispatcher.publish(_event("q-2"))
        assert dispatcher.dropped == 1
        assert dispatcher.pending == 1

    async def test_start_is_idempotent(self) -> None:
        dispatcher = NotificationDispatcher(_Recorder())
        dispatcher.start()
        task = dispatcher._task
        dispatcher.start()
        assert dispatcher._task is task
        await dispatcher.stop()
        assert not dispatcher.running

    async def test_stop_without_start(self) -> None:
        dispatcher = NotificationDispatcher(_Recorder())
        await dispatcher.stop()
        assert not dispatcher.running

    async def test_stop_discards_pending(self, caplog: pytest.LogCaptureFixture) -> None:
        dispatcher = NotificationDispatcher(_Recorder())
        for i in range(3):
            dispatcher.publish(_event(f"q-{i}"))
        dispatcher._task = asyncio.create_task(asyncio.sleep(3600))  # type: ignore[assignment]
        await dispatcher.stop()

        assert dispatcher.pending == 3
        assert "Discarding 3 undelivered notifications" in caplog.text


# ── Wiring ───────────────────────────────────────────────────────


class TestBuildDispatcher:
    def test_disabled_uses_log_mailer(self) -> None:
        dispatcher = build_dispatcher(MailConfig())
        assert isinstance(dispatcher._mailer, LogMailer)

    def test_enabled_uses_smtp(self) -> None:
        dispatcher = build_dispatcher(MailConfig(enabled=True, queue_size=5))
        assert isinstance(dispatcher._mailer, SmtpMailer)
        assert dispatcher._queue.maxsize == 5

    def test_log_mailer_never_raises(self) -> None:
        LogMailer().send_question_created(_event())

    def test_mock_mailer_satisfies_protocol(self) -> None:
        mailer = MagicMock()
        dispatcher = NotificationDispatcher(mailer)
        assert dispatcher.publish(_event())
