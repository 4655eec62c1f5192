"""CLI commands for invitation management."""

import asyncio
from datetime import datetime

import typer
import uvicorn

from src.config.logging import setup_logging
from src.config.settings import settings
from src.invitations.dtos import ConfirmOffset, InvitationError
from src.invitations.features.create_invitation.write_model import StoreInvitationCreateWriteModel
from src.invitations.features.get_snapshot.read_model import StoreSnapshotReadModel
from src.invitations.features.record_view.write_model import StoreRecordViewWriteModel
from src.invitations.features.submit_response.write_model import StoreSubmitResponseWriteModel
from src.invitations.finalizer import ClosureFinalizer
from src.invitations.locks import invitation_locks
from src.invitations.repository.sql_store import SqlTableStore
from src.invitations.utils import utc_now

app = typer.Typer(help="CLI commands for invitation management")


@app.callback()
def main():
    setup_logging()


def _fail(error: InvitationError):
    typer.secho(f"{error.code}: {error.message}", fg=typer.colors.RED)
    raise typer.Exit(1)


@app.command()
def create_invitation(
    title: str = typer.Argument(..., help="What is proposed"),
    event_at: datetime = typer.Argument(
        ...,
        formats=["%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M%z"],
        help="Event time with its UTC offset, e.g. 2026-05-04T19:30+0200",
    ),
    organizer_name: str = typer.Option("Organizer", "--organizer", "-o"),
    confirm_offset: ConfirmOffset = typer.Option(
        ConfirmOffset.HOUR_1,
        "--confirm-offset",
        "-c",
        help="How long before the event answers close",
    ),
    capacity_min: int = typer.Option(None, "--min", help="Quorum needed for the plan to go ahead"),
    capacity_max: int = typer.Option(None, "--max", help="Maximum number of YES answers"),
):
    """Create an invitation with the organizer as the first YES."""
    write_model = StoreInvitationCreateWriteModel(store=SqlTableStore())
    try:
        created = asyncio.run(
            write_model.create_invitation(
                title=title,
                event_at=event_at,
                organizer_name=organizer_name,
                confirm_offset=confirm_offset,
                capacity_min=capacity_min,
                capacity_max=capacity_max,
            )
        )
    except InvitationError as e:
        _fail(e)

    typer.secho("Invitation created!", fg=typer.colors.GREEN)
    typer.secho(f"  ID: {created.invitation.id}", fg=typer.colors.CYAN)
    typer.secho(f"  Share link: {created.share_link}", fg=typer.colors.CYAN)
    typer.secho(f"  Answers close at: {created.invitation.confirm_by}", fg=typer.colors.BLUE)
    typer.secho(f"  Organizer device: {created.organizer_device_id}", fg=typer.colors.MAGENTA)
    for warning in created.warnings:
        typer.secho(f"  Warning: {warning}", fg=typer.colors.YELLOW)


@app.command()
def respond(
    invitation_id: str = typer.Argument(..., help="Invitation ID"),
    device_id: str = typer.Argument(..., help="Device answering"),
    name: str = typer.Argument(..., help="Display name"),
    choice: str = typer.Argument(..., help="YES, NO or MAYBE"),
):
    """Answer an invitation on behalf of a device."""
    write_model = StoreSubmitResponseWriteModel(store=SqlTableStore(), locks=invitation_locks)
    try:
        submitted = asyncio.run(
            write_model.submit_response(invitation_id, device_id, name, choice)
        )
    except InvitationError as e:
        _fail(e)

    verb = "changed to" if submitted.modified else "answered"
    typer.secho(f"{name} {verb} {submitted.choice.value}", fg=typer.colors.GREEN)
    typer.secho(f"  Invitation is {submitted.state.status.value}", fg=typer.colors.BLUE)


@app.command()
def view(
    invitation_id: str = typer.Argument(..., help="Invitation ID"),
    device_id: str = typer.Argument(..., help="Device opening the invitation"),
):
    """Record a device opening an invitation."""
    write_model = StoreRecordViewWriteModel(store=SqlTableStore(), locks=invitation_locks)
    try:
        recorded = asyncio.run(write_model.record_view(invitation_id, device_id))
    except InvitationError as e:
        _fail(e)

    if recorded.recorded:
        typer.secho("First view recorded", fg=typer.colors.GREEN)
    else:
        typer.secho("Already seen by this device", fg=typer.colors.YELLOW)


@app.command()
def snapshot(
    invitation_id: str = typer.Argument(..., help="Invitation ID"),
    device_id: str = typer.Option(None, "--device", "-d", help="Look as this device"),
    organizer: bool = typer.Option(False, "--organizer", help="Look as the organizer"),
):
    """Show an invitation as a given device sees it."""
    read_model = StoreSnapshotReadModel(store=SqlTableStore())
    try:
        result = asyncio.run(
            read_model.get_snapshot(invitation_id, device_id=device_id, is_organizer=organizer)
        )
    except InvitationError as e:
        _fail(e)

    invitation = result.invitation
    typer.secho(f"{invitation.title}", fg=typer.colors.GREEN)
    typer.secho(f"  Event: {invitation.event_at}", fg=typer.colors.BLUE)
    typer.secho(f"  Answers close at: {invitation.confirm_by}", fg=typer.colors.BLUE)
    status = result.state.status.value
    if result.state.closure_cause:
        status = f"{status} ({result.state.closure_cause.value})"
    typer.secho(f"  Status: {status}", fg=typer.colors.CYAN)
    if result.verdict:
        typer.secho(f"  Verdict: {result.verdict.value}", fg=typer.colors.MAGENTA)
    if result.total_positions is not None:
        typer.secho(f"  Answers so far: {result.total_positions}", fg=typer.colors.BLUE)
    if result.my_response:
        typer.secho(f"  You answered: {result.my_response.choice.value}", fg=typer.colors.BLUE)
    if result.counts:
        counts = result.counts
        typer.secho(
            f"  YES {counts.yes} / NO {counts.no} / MAYBE {counts.maybe} / views {counts.views}",
            fg=typer.colors.BLUE,
        )
    if result.participants is not None:
        typer.echo()
        typer.secho("Going:", fg=typer.colors.GREEN)
        for participant in result.participants:
            typer.secho(f"  - {participant}", fg=typer.colors.BLUE)
    if result.maybe_names:
        typer.secho("Maybe:", fg=typer.colors.YELLOW)
        for participant in result.maybe_names:
            typer.secho(f"  - {participant}", fg=typer.colors.BLUE)
    if result.no_names:
        typer.secho("Not going:", fg=typer.colors.RED)
        for participant in result.no_names:
            typer.secho(f"  - {participant}", fg=typer.colors.BLUE)


@app.command()
def refresh(
    invitation_id: str = typer.Argument(..., help="Invitation ID"),
):
    """Recompute the cached counters of an invitation and finalize it if due."""
    finalizer = ClosureFinalizer(SqlTableStore())

    async def _refresh():
        async with invitation_locks.hold(invitation_id):
            return await finalizer.refresh(invitation_id, utc_now())

    try:
        result = asyncio.run(_refresh())
    except InvitationError as e:
        _fail(e)

    typer.secho("Invitation refreshed!", fg=typer.colors.GREEN)
    typer.secho(f"  Status: {result.state.status.value}", fg=typer.colors.CYAN)
    typer.secho(
        f"  YES {result.counts.yes} / NO {result.counts.no} / MAYBE {result.counts.maybe}",
        fg=typer.colors.BLUE,
    )
    if result.verdict:
        typer.secho(f"  Verdict: {result.verdict.value}", fg=typer.colors.MAGENTA)
    if result.finalized:
        typer.secho("  Closed just now", fg=typer.colors.YELLOW)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the API server."""
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
