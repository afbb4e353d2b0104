import logging

import click

from printshop.infrastructure.cli.client_commands import client_add, client_list
from printshop.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_pay,
    order_show,
    order_status,
)
from printshop.infrastructure.config import get_settings


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at INFO level.")
def cli(verbose: bool) -> None:
    """Print shop: orders, garments and impressions"""
    level = "INFO" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def client() -> None:
    """Manage clients."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_show)
order.add_command(order_status)
client.add_command(client_add)
client.add_command(client_list)
