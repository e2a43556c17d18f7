"""
NotiApp Backend CLI Interface
Command line interface implemented using Typer
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from notiapp_backend.config.loader import get_config
from notiapp_backend.core.errors import NotiAppError
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import FILTER_ALL, Schedule
from notiapp_backend.system.runtime import AppRuntime, start_runtime, stop_runtime

logger = get_logger(__name__)

T = TypeVar("T")

EMAIL_OPTION = typer.Option(..., envvar="NOTIAPP_EMAIL", help="Account email")
PASSWORD_OPTION = typer.Option(
    ..., envvar="NOTIAPP_PASSWORD", help="Account password", hide_input=True
)
CONFIG_OPTION = typer.Option(None, help="Configuration file path")


def _run_signed_in(
    config_file: Optional[str],
    email: str,
    password: str,
    action: Callable[[AppRuntime], Awaitable[T]],
) -> T:
    """Start the runtime, sign in, wait for the first fetch, then run `action`"""

    async def runner() -> T:
        runtime = await start_runtime(config_file)
        try:
            await runtime.session.sign_in(email, password)
            await runtime.engine.drain()
            return await action(runtime)
        finally:
            await stop_runtime(quiet=True)

    try:
        return asyncio.run(runner())
    except NotiAppError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(1)


def _format_schedule(schedule: Schedule) -> str:
    mark = "x" if schedule.is_completed else " "
    when = f"{schedule.date} {schedule.time}".strip()
    line = (
        f"[{mark}] {schedule.id}  {when:<16}  {schedule.title}"
        f"  ({schedule.priority.label}, {schedule.category.label}, {schedule.status.label})"
    )
    if schedule.is_overdue():
        line += "  OVERDUE"
    return line


def serve(
    host: Optional[str] = typer.Option(None, help="Server host address"),
    port: Optional[int] = typer.Option(None, help="Server port"),
    config_file: Optional[str] = CONFIG_OPTION,
    debug: bool = typer.Option(False, help="Enable debug mode"),
):
    """Start NotiApp Backend service"""
    from notiapp_backend.app import run_server

    try:
        config = get_config(config_file)
        run_server(
            host or config.get("server.host", "127.0.0.1"),
            port or config.get("server.port", 8000),
            debug or config.get("server.debug", False),
        )
    except Exception as e:
        logger.error(f"Failed to start service: {e}")
        raise typer.Exit(1)


def list_schedules(
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
    search: str = typer.Option("", help="Search title, description and category"),
    status: str = typer.Option(FILTER_ALL, help="Status filter"),
    priority: str = typer.Option(FILTER_ALL, help="Priority filter"),
    config_file: Optional[str] = CONFIG_OPTION,
):
    """List your schedules"""

    async def action(runtime: AppRuntime) -> None:
        engine = runtime.engine
        engine.set_search_text(search)
        engine.set_status_filter(status)
        engine.set_priority_filter(priority)
        view = engine.view()

        if view.error:
            typer.echo(view.error, err=True)
            raise typer.Exit(1)
        for schedule in view.schedules:
            typer.echo(_format_schedule(schedule))
        typer.echo(view.count_label)
        if view.empty_hint:
            typer.echo(view.empty_hint)

    _run_signed_in(config_file, email, password, action)


def add(
    title: str = typer.Argument(..., help="Schedule title"),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
    date: Optional[str] = typer.Option(None, help="YYYY-MM-DD (default today)"),
    time: Optional[str] = typer.Option(None, help="HH:MM"),
    description: Optional[str] = typer.Option(None, help="Description"),
    priority: Optional[str] = typer.Option(None, help="low | medium | high"),
    category: Optional[str] = typer.Option(None, help="Category"),
    config_file: Optional[str] = CONFIG_OPTION,
):
    """Create a schedule"""
    fields = {
        "title": title,
        "date": date,
        "time": time,
        "description": description,
        "priority": priority,
        "category": category,
    }

    async def action(runtime: AppRuntime) -> str:
        return await runtime.engine.add_schedule(fields)

    schedule_id = _run_signed_in(config_file, email, password, action)
    typer.echo(f"Created {schedule_id}")


def complete(
    schedule_id: str = typer.Argument(..., help="Schedule ID"),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
    config_file: Optional[str] = CONFIG_OPTION,
):
    """Mark a schedule as completed"""

    async def action(runtime: AppRuntime) -> None:
        await runtime.engine.mark_completed(schedule_id)

    _run_signed_in(config_file, email, password, action)
    typer.echo(f"Completed {schedule_id}")


def remove(
    schedule_id: str = typer.Argument(..., help="Schedule ID"),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
    config_file: Optional[str] = CONFIG_OPTION,
):
    """Delete a schedule"""

    async def action(runtime: AppRuntime) -> None:
        await runtime.engine.delete_schedule(schedule_id)

    _run_signed_in(config_file, email, password, action)
    typer.echo(f"Deleted {schedule_id}")


def create_cli() -> typer.Typer:
    app = typer.Typer(help="NotiApp schedule backend")

    app.command()(serve)  # Start FastAPI server
    app.command("list")(list_schedules)
    app.command()(add)
    app.command()(complete)
    app.command()(remove)

    return app


def main():
    """Main function"""
    create_cli()()


if __name__ == "__main__":
    main()
