"""Rich tables for CLI output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pollbox.ledger.votes import AnswerTally
    from pollbox.storage.models import Question


class PollDisplay:
    """Renders questions and results.

    Accepts an optional :class:`~rich.console.Console` for dependency
    injection in tests.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def questions(self, questions: Sequence[Question]) -> None:
        if not questions:
            self._console.print("No questions yet.")
            return

        table = Table(title="Questions")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("Answers", justify="right")
        table.add_column("Closes")
        for q in questions:
            closes = q.ending_date.strftime("%Y-%m-%d %H:%M") if q.ending_date else "-"
            table.add_row(q.id[:8], q.title, str(len(q.answers)), closes)
        self._console.print(table)

    def results(self, question: Question, tallies: Sequence[AnswerTally]) -> None:
        total = sum(t.votes for t in tallies)
        table = Table(title=question.title)
        table.add_column("Answer")
        table.add_column("Votes", justify="right")
        table.add_column("Share", justify="right")
        for t in tallies:
            share = f"{t.votes / total * 100:.1f}%" if total else "-"
            table.add_row(t.title, str(t.votes), share)
        self._console.print(table)
        self._console.print(f"Total votes: {total}")
