"""CLI commands for orders."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

import click

from printshop.application.dto import (
    GarmentLineSpec,
    ImpressionSpec,
    OrderDTO,
    OrderFields,
    ServiceChargeSpec,
)
from printshop.application.pay_order import PayOrderDebtHandler
from printshop.application.show_order import ShowOrderHandler
from printshop.application.update_status import UpdateOrderStatusHandler
from printshop.domain.exceptions import DomainException, PersistenceError
from printshop.domain.model.kinds import parse_enum
from printshop.domain.model.order import ORDER_STATUS_LABELS, OrderStatus
from printshop.infrastructure.bootstrap import build_services

logger = logging.getLogger(__name__)

_STATUS_CHOICES = [s.value for s in OrderStatus]


def _split_kind(raw: str) -> tuple[str, str | None]:
    """'custom=Polo' -> ('custom', 'Polo'); 'with_collar' -> ('with_collar', None)."""
    if "=" in raw:
        kind, label = raw.split("=", 1)
        return kind.strip(), label.strip()
    return raw.strip(), None


def _parse_sizes(raw: str) -> dict[str, int]:
    """Parse 'S=2,M=3' into a size map."""
    sizes: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise click.BadParameter(f"Invalid size '{pair}'. Expected 'SIZE=QTY'.")
        size, qty = pair.split("=", 1)
        try:
            sizes[size.strip()] = int(qty)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty}' for size '{size}'.")
    return sizes


def _parse_services(raw: str) -> list[ServiceChargeSpec]:
    """Parse 'stamping@front_right=50;embroidery@back=80'."""
    services: list[ServiceChargeSpec] = []
    for item in raw.split(";"):
        item = item.strip()
        if not item:
            continue
        if "@" not in item or "=" not in item:
            raise click.BadParameter(
                f"Invalid service '{item}'. Expected 'TYPE@LOCATION=PRICE'."
            )
        service_type, rest = item.split("@", 1)
        location, price = rest.rsplit("=", 1)
        services.append(ServiceChargeSpec(service_type.strip(), location.strip(), price.strip()))
    return services


def _parse_garment(raw: str) -> GarmentLineSpec:
    """Parse 'TYPE:PRICE:SIZES:COLOR[:SERVICES]'."""
    parts = raw.split(":")
    if len(parts) not in (4, 5):
        raise click.BadParameter(
            f"Invalid garment '{raw}'. Expected 'TYPE:PRICE:S=1,M=2:COLOR[:SERVICES]'."
        )
    garment_type, custom_type = _split_kind(parts[0])
    return GarmentLineSpec(
        garment_type=garment_type,
        custom_type=custom_type,
        unit_price=parts[1].strip(),
        sizes=_parse_sizes(parts[2]),
        color=parts[3].strip(),
        services=_parse_services(parts[4]) if len(parts) == 5 else [],
    )


def _parse_impression(raw: str) -> ImpressionSpec:
    """Parse 'NAME:SIZE:MATERIAL:PRICE[:DESCRIPTION]'."""
    parts = raw.split(":")
    if len(parts) not in (4, 5):
        raise click.BadParameter(
            f"Invalid impression '{raw}'. Expected 'NAME:SIZE:MATERIAL:PRICE[:DESCRIPTION]'."
        )
    material, custom_material = _split_kind(parts[2])
    return ImpressionSpec(
        name=parts[0].strip(),
        size=parts[1].strip(),
        material=material,
        custom_material=custom_material,
        price=parts[3].strip(),
        description=parts[4].strip() if len(parts) == 5 else None,
    )


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    draft = "  [draft]" if dto.is_draft else ""
    click.echo(f"Order {dto.id}  {dto.name}  ({dto.status}){draft}")
    click.echo(f"Client:   {dto.client_name}")
    click.echo(f"Due date: {dto.due_date}")
    click.echo()

    if dto.garments:
        click.echo(f"  {'Garment':<22} {'Color':<10} {'Qty':>5} {'Unit':>14} {'Total':>16}")
        click.echo(f"  {'-'*71}")
        for g in dto.garments:
            click.echo(
                f"  {g.garment:<22} {g.color:<10} {g.quantity:>5} {g.unit_price:>14} {g.line_total:>16}"
            )
            click.echo(f"    sizes: {g.sizes}")
            for service in g.services:
                click.echo(f"    + {service}")
        click.echo()

    if dto.impressions:
        click.echo(f"  {'Impression':<22} {'Size':<10} {'Material':<22} {'Price':>14}")
        click.echo(f"  {'-'*71}")
        for i in dto.impressions:
            click.echo(f"  {i.name:<22} {i.size:<10} {i.material:<22} {i.price:>14}")
        click.echo()

    t = dto.totals
    click.echo(f"  {'Pieces':<20} {t.pieces:>20}")
    click.echo(f"  {'Subtotal':<20} {t.subtotal:>20}")
    click.echo(f"  {'IVA (' + dto.iva + ')':<20} {t.tax:>20}")
    click.echo(f"  {'Discount':<20} {t.discount:>20}")
    click.echo(f"  {'Total':<20} {t.total:>20}")
    click.echo(f"  {'Debt':<20} {dto.debt:>20}")


async def _create(
    fields: OrderFields,
    client_id: str,
    garments: list[GarmentLineSpec],
    impressions: list[ImpressionSpec],
) -> OrderDTO:
    services = build_services()
    editor = services.editor()
    await editor.begin()
    try:
        editor.select_client(client_id)
        editor.update_fields(
            name=fields.name,
            due_date=fields.due_date,
            iva=fields.iva,
            discount=fields.discount,
            status=fields.status,
        )
        for spec in garments:
            await editor.add_garment_line(spec)
        for spec in impressions:
            await editor.add_impression_line(spec)
        order = await editor.save()
    except DomainException:
        await editor.cancel()
        raise

    if order is None:
        raise DomainException("Order was already closed")
    try:
        await editor.discard_placeholder_client()
    except PersistenceError as exc:
        logger.warning("Placeholder client left behind: %s", exc)
    return await ShowOrderHandler(services.api, services.lines).handle(order.id)  # type: ignore[arg-type]


@click.command("create")
@click.option("--name", required=True, help="Order name.")
@click.option("--client-id", required=True, help="Client the order belongs to.")
@click.option(
    "--due-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Due date (YYYY-MM-DD). Defaults to today.",
)
@click.option("--iva", default="16", show_default=True, help="IVA percentage.")
@click.option("--discount", default="0", show_default=True, help="Discount amount.")
@click.option("--status", type=click.Choice(_STATUS_CHOICES), default="received")
@click.option(
    "--garment",
    "garments",
    multiple=True,
    help="Garment as 'TYPE:PRICE:S=1,M=2:COLOR[:TYPE@LOCATION=PRICE;...]'.",
)
@click.option(
    "--impression",
    "impressions",
    multiple=True,
    help="Impression as 'NAME:SIZE:MATERIAL:PRICE[:DESCRIPTION]'.",
)
def order_create(
    name: str,
    client_id: str,
    due_date,
    iva: str,
    discount: str,
    status: str,
    garments: tuple[str, ...],
    impressions: tuple[str, ...],
) -> None:
    """Create an order with its garments and impressions."""
    fields = OrderFields(
        name=name,
        due_date=due_date.date() if due_date else date.today(),
        iva=iva,
        discount=discount,
        status=status,
    )
    garment_specs = [_parse_garment(g) for g in garments]
    impression_specs = [_parse_impression(i) for i in impressions]

    try:
        dto = asyncio.run(_create(fields, client_id, garment_specs, impression_specs))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show an order with freshly computed totals."""
    services = build_services()
    handler = ShowOrderHandler(services.api, services.lines)

    try:
        dto = asyncio.run(handler.handle(order_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--search", default="", help="Filter by order or client name.")
@click.option("--status", type=click.Choice(_STATUS_CHOICES), default=None)
@click.option("--drafts", is_flag=True, default=False, help="Include draft orders.")
def order_list(search: str, status: str | None, drafts: bool) -> None:
    """List orders."""
    services = build_services()
    wanted = parse_enum(OrderStatus, status, "order status") if status else None

    async def _run():
        orders = await services.cache.search_orders(search, wanted, include_drafts=drafts)
        clients = {c.id: c for c in await services.cache.clients()}
        return orders, clients

    try:
        orders, clients = asyncio.run(_run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<38} {'Name':<24} {'Client':<20} {'Status':<26} {'Total':>16}")
    click.echo("-" * 128)
    for o in orders:
        client = clients.get(o.client_id)
        click.echo(
            f"{o.id:<38} {o.name:<24} {(client.name if client else '?'):<20} "
            f"{ORDER_STATUS_LABELS[o.status]:<26} {str(o.total):>16}"
        )


@click.command("pay")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--amount", required=True, help="Amount paid (e.g. 500.00).")
def order_pay(order_id: str, amount: str) -> None:
    """Register a payment against an order's debt."""
    handler = PayOrderDebtHandler(build_services().api)

    try:
        order = asyncio.run(handler.handle(order_id, amount))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment registered. Remaining debt: {order.debt}")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", required=True, type=click.Choice(_STATUS_CHOICES))
def order_status(order_id: str, status: str) -> None:
    """Change an order's production status."""
    handler = UpdateOrderStatusHandler(build_services().api)

    try:
        order = asyncio.run(handler.handle(order_id, status))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} is now: {ORDER_STATUS_LABELS[order.status]}")
