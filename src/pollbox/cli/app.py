"""Main CLI application.

Click commands for pollbox: serve, token, questions, results,
delete-question.
"""

from __future__ import annotations

import asyncio
import sys
import uuid
from typing import TYPE_CHECKING

import click

from pollbox import __version__
from pollbox.config.loader import load_config
from pollbox.core.errors import ConfigError, PollboxError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from pollbox.config.schema import PollboxConfig
    from pollbox.ledger.votes import AnswerTally
    from pollbox.storage.models import Question


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> PollboxConfig:
    """Load config with user-friendly error handling."""
    try:
        return load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


async def _resolve_question_id(session: AsyncSession, prefix: str) -> str:
    """Expand a unique id prefix to a full question id."""
    from pollbox.storage.repository import PollRepository

    if len(prefix) >= 36:
        return prefix
    repo = PollRepository(session)
    matches = [q.id for q in await repo.list_questions() if q.id.startswith(prefix)]
    if not matches:
        msg = f"No question matching '{prefix}'"
        raise click.ClickException(msg)
    if len(matches) > 1:
        msg = f"Ambiguous prefix '{prefix}'"
        raise click.ClickException(msg)
    return matches[0]


# ── CLI group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="pollbox")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """pollbox - Questions, answers and one vote per user.

    Serve the REST API and inspect polls from the terminal.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── serve ────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config).")
@click.option("--port", type=int, default=None, help="Port (default from config).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on change.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    from pollbox.api.app import create_app

    config = _load_config(ctx.obj["config_path"])

    effective_host = host or config.api.host
    effective_port = port or config.api.port

    app = create_app(config)
    uvicorn.run(
        app,
        host=effective_host,
        port=effective_port,
        reload=reload,
    )


# ── token ────────────────────────────────────────────────────────


@cli.command()
@click.option("--sub", "user_id", default=None, help="User id (default: random).")
@click.option("--name", default="", help="Display name claim.")
@click.option("--email", default="", help="Email claim.")
@click.option("--hours", type=int, default=None, help="Expiry in hours.")
@click.pass_context
def token(
    ctx: click.Context,
    user_id: str | None,
    name: str,
    email: str,
    hours: int | None,
) -> None:
    """Issue a development bearer token signed with auth.jwt_secret."""
    from pollbox.api.auth import create_token

    config = _load_config(ctx.obj["config_path"])
    if not config.auth.jwt_secret:
        _error("auth.jwt_secret is not configured (set POLLBOX_JWT_SECRET).")

    click.echo(
        create_token(
            user_id or str(uuid.uuid4()),
            config.auth.jwt_secret,
            name=name,
            email=email,
            expiry_hours=hours or config.auth.token_expiry_hours,
        )
    )


# ── questions ────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def questions(ctx: click.Context) -> None:
    """List questions."""
    config = _load_config(ctx.obj["config_path"])
    try:
        rows = asyncio.run(_questions_async(config))
    except PollboxError as e:
        _error(str(e))
        return

    from pollbox.cli.display import PollDisplay

    PollDisplay().questions(rows)


async def _questions_async(config: PollboxConfig) -> list[Question]:
    from pollbox.ledger.questions import QuestionBook
    from pollbox.storage.database import create_db

    factory, engine = await create_db(config.database)
    try:
        async with factory() as session:
            return await QuestionBook(session).list_questions()
    finally:
        await engine.dispose()


# ── results ──────────────────────────────────────────────────────


@cli.command()
@click.argument("question_id")
@click.pass_context
def results(ctx: click.Context, question_id: str) -> None:
    """Show vote counts for a question (id or unique prefix)."""
    config = _load_config(ctx.obj["config_path"])
    try:
        question, tallies = asyncio.run(_results_async(config, question_id))
    except PollboxError as e:
        _error(str(e))
        return

    from pollbox.cli.display import PollDisplay

    PollDisplay().results(question, tallies)


async def _results_async(
    config: PollboxConfig, question_id: str
) -> tuple[Question, list[AnswerTally]]:
    from pollbox.ledger import QuestionBook, VoteLedger
    from pollbox.storage.database import create_db

    factory, engine = await create_db(config.database)
    try:
        async with factory() as session:
            resolved = await _resolve_question_id(session, question_id)
            question = await QuestionBook(session).get_question(resolved)
            tallies = await VoteLedger(session).tally(resolved)
            return question, tallies
    finally:
        await engine.dispose()


# ── delete-question ──────────────────────────────────────────────


@cli.command("delete-question")
@click.argument("question_id")
@click.option("--yes", is_flag=True, default=False, help="Skip confirmation.")
@click.pass_context
def delete_question(ctx: click.Context, question_id: str, yes: bool) -> None:
    """Delete a question with its answers and votes."""
    if not yes:
        click.confirm(f"Delete question {question_id} and all its votes?", abort=True)
    config = _load_config(ctx.obj["config_path"])
    try:
        deleted = asyncio.run(_delete_async(config, question_id))
    except PollboxError as e:
        _error(str(e))
        return
    click.echo(f"Deleted question {deleted}.")


async def _delete_async(config: PollboxConfig, question_id: str) -> str:
    from pollbox.ledger.questions import QuestionBook
    from pollbox.storage.database import create_db

    factory, engine = await create_db(config.database)
    try:
        async with factory() as session:
            resolved = await _resolve_question_id(session, question_id)
            await QuestionBook(session).delete_question(resolved)
            await session.commit()
            return resolved
    finally:
        await engine.dispose()
