"""CLI commands for clients."""

from __future__ import annotations

import asyncio

import click

from printshop.application.add_client import AddClientHandler
from printshop.domain.exceptions import DomainException
from printshop.infrastructure.bootstrap import build_services
from printshop.infrastructure.config import get_settings


@click.command("add")
@click.option("--name", required=True, help="Client name.")
@click.option("--nuit", required=True, help="Tax identification number.")
@click.option("--contact", required=True, help="Phone or e-mail.")
@click.option("--category", default="", help="Client category.")
@click.option("--observations", default="", help="Free-text notes.")
def client_add(name: str, nuit: str, contact: str, category: str, observations: str) -> None:
    """Register a new client."""
    handler = AddClientHandler(build_services().api)

    try:
        client = asyncio.run(handler.handle(name, nuit, contact, category, observations))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Client {client.id} '{client.name}' added")


@click.command("list")
@click.option("--all", "show_all", is_flag=True, default=False, help="Include placeholder clients.")
def client_list(show_all: bool) -> None:
    """List clients."""
    services = build_services()
    marker = get_settings().placeholder_marker

    try:
        clients = asyncio.run(services.cache.clients())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not show_all:
        clients = [c for c in clients if not c.is_placeholder(marker)]
    if not clients:
        click.echo("No clients found.")
        return

    click.echo(f"{'ID':<38} {'Name':<24} {'NUIT':<12} {'Contact':<16} {'Debt':>14}")
    click.echo("-" * 108)
    for c in clients:
        click.echo(
            f"{c.id:<38} {c.name:<24} {c.nuit:<12} {c.contact:<16} {str(c.debt):>14}"
        )
