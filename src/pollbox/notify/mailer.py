"""Mail transports for notification events."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol

from pollbox.core.errors import NotificationError

if TYPE_CHECKING:
    from pollbox.config.schema import MailConfig
    from pollbox.notify.events import QuestionCreated

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Blocking transport; the dispatcher runs it in a worker thread."""

    def send_question_created(self, event: QuestionCreated) -> None: ...


def render_question_created(event: QuestionCreated, sender: str) -> EmailMessage:
    """Build the announcement mail for a new question (no recipients set)."""
    msg = EmailMessage()
    msg["Subject"] = f"New question: {event.title}"
    msg["From"] = sender

    lines = [f"{event.author_name or 'Someone'} asked: {event.title}", ""]
    if event.description:
        lines += [event.description, ""]
    if event.answer_titles:
        lines.append("Answers:")
        lines += [f"  - {title}" for title in event.answer_titles]
        lines.append("")
    if event.ending_date is not None:
        lines.append(f"Voting closes {event.ending_date.isoformat()}.")
    msg.set_content("\n".join(lines))
    return msg


class SmtpMailer:
    """Send notification mail through an SMTP relay."""

    def __init__(self, config: MailConfig) -> None:
        self._config = config

    def send_question_created(self, event: QuestionCreated) -> None:
        config = self._config
        if not config.recipients:
            logger.info("No mail recipients configured, skipping %s", event.question_id)
            return

        msg = render_question_created(event, config.sender)
        msg["To"] = ", ".join(config.recipients)

        try:
            with smtplib.SMTP(
                config.smtp_host, config.smtp_port, timeout=config.timeout
            ) as server:
                if config.use_tls:
                    server.starttls()
                if config.username:
                    server.login(config.username, config.password or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            msg_text = f"Mail for question {event.question_id} failed: {e}"
            raise NotificationError(msg_text) from e

        logger.info(
            "Question mail for %s sent to %d recipients",
            event.question_id,
            len(config.recipients),
        )


class LogMailer:
    """Stand-in transport used while mail is disabled."""

    def send_question_created(self, event: QuestionCreated) -> None:
        logger.debug("Mail disabled, not announcing question %s", event.question_id)
