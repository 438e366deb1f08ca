"""Post-commit notifications."""

from pollbox.notify.dispatcher import NotificationDispatcher, build_dispatcher
from pollbox.notify.events import QuestionCreated
from pollbox.notify.mailer import LogMailer, SmtpMailer, render_question_created

__all__ = [
    "LogMailer",
    "NotificationDispatcher",
    "QuestionCreated",
    "SmtpMailer",
    "build_dispatcher",
    "render_question_created",
]
