"""Fire-and-forget notification dispatch.

``publish`` only enqueues; a worker task started with the application
drains the queue and hands each event to a blocking mailer in a thread.
Nothing the mailer does can reach the request that published the event.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from pollbox.notify.mailer import LogMailer, SmtpMailer

if TYPE_CHECKING:
    from pollbox.config.schema import MailConfig
    from pollbox.notify.events import QuestionCreated
    from pollbox.notify.mailer import Mailer

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Bounded in-process queue with a single delivery worker."""

    def __init__(self, mailer: Mailer, *, maxsize: int = 100) -> None:
        self._mailer = mailer
        self._queue: asyncio.Queue[QuestionCreated] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task[None] | None = None
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker on the running loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="pollbox-notifier")

    async def stop(self) -> None:
        """Cancel the worker. Undelivered events are discarded."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        if self.pending:
            logger.warning("Discarding %d undelivered notifications", self.pending)

    def publish(self, event: QuestionCreated) -> bool:
        """Enqueue *event*. Returns False when it had to be dropped."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Notification queue full, dropping event for %s", event.question_id
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await asyncio.to_thread(self._mailer.send_question_created, event)
                self.delivered += 1
            except Exception:
                self.failed += 1
                logger.exception(
                    "Notification for question %s failed", event.question_id
                )
            finally:
                self._queue.task_done()


def build_dispatcher(config: MailConfig) -> NotificationDispatcher:
    """Dispatcher wired to SMTP when mail is enabled, to the log otherwise."""
    mailer: Mailer = SmtpMailer(config) if config.enabled else LogMailer()
    return NotificationDispatcher(mailer, maxsize=config.queue_size)
