"""Application service: draft provisioning.

Line items need an order id the moment the editor opens, before the user
has typed a name or picked a client.  The provisioner creates a
placeholder client plus a draft order referencing it, and later either
commits the draft into a real order or discards it again.

Discarding is compensation, not a transaction: every delete is attempted
independently and failures are logged, never raised.  A placeholder that
survives a failed discard is an accepted, logged inconsistency.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from printshop.application.calls import guarded
from printshop.application.dto import OrderFields
from printshop.application.line_items import LineItemAggregator
from printshop.domain.exceptions import (
    CleanupError,
    EntityNotFoundError,
    ProvisioningError,
    ValidationError,
)
from printshop.domain.model.client import Client
from printshop.domain.model.kinds import parse_enum
from printshop.domain.model.order import DEFAULT_IVA, Order, OrderStatus
from printshop.domain.model.value_objects import Money, parse_rate
from printshop.domain.repository.command_api import CommandApi

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_MARKER = "__draft_placeholder__"


class DraftState(Enum):
    DRAFT = "DRAFT"
    COMMITTED = "COMMITTED"
    DISCARDED = "DISCARDED"


@dataclass
class DraftHandle:
    """Identifies one draft order and the client it was created with."""

    order_id: str
    client_id: str
    client_is_placeholder: bool = True
    state: DraftState = DraftState.DRAFT
    busy: bool = False
    committed_client_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self.state is DraftState.DRAFT


@dataclass(frozen=True)
class ResolvedFields:
    name: str
    due_date: date
    iva: Decimal
    discount: Money
    status: OrderStatus


def resolve_fields(fields: OrderFields, client_id: str | None) -> ResolvedFields:
    """Validate the details form before anything is sent anywhere."""
    if not client_id:
        raise ValidationError("A client must be selected before saving the order")
    if not fields.name or not fields.name.strip():
        raise ValidationError("Order name is required")
    return ResolvedFields(
        name=fields.name.strip(),
        due_date=fields.due_date,
        iva=parse_rate(fields.iva),
        discount=Money.of(fields.discount),
        status=parse_enum(OrderStatus, fields.status, "order status"),
    )


class DraftProvisioner:

    def __init__(
        self,
        api: CommandApi,
        lines: LineItemAggregator,
        placeholder_marker: str = DEFAULT_PLACEHOLDER_MARKER,
        default_iva: Decimal = DEFAULT_IVA,
        verify: bool = True,
    ) -> None:
        self._api = api
        self._lines = lines
        self._marker = placeholder_marker
        self._default_iva = default_iva
        self._verify = verify

    @property
    def placeholder_marker(self) -> str:
        return self._marker

    # --- Begin ----------------------------------------------------------------

    async def begin_draft(self) -> DraftHandle:
        """Create a placeholder client and a draft order referencing it.

        Raises ProvisioningError; no draft order exists if the client could
        not be created.
        """
        try:
            client = await self._api.create_client(Client.placeholder(self._marker))
        except Exception as exc:
            logger.error("Placeholder client creation failed: %s", exc)
            raise ProvisioningError(f"Could not create placeholder client: {exc}") from exc

        try:
            order = await self._api.create_order(
                Order.draft(client_id=client.id, iva=self._default_iva)  # type: ignore[arg-type]
            )
        except Exception as exc:
            logger.error("Draft order creation failed: %s", exc)
            await self._delete_quietly("placeholder client", client.id, self._api.delete_client)
            raise ProvisioningError(f"Could not create draft order: {exc}") from exc

        if self._verify:
            await self._verify_visible(order.id)  # type: ignore[arg-type]

        logger.info("Draft order %s provisioned with placeholder client %s", order.id, client.id)
        return DraftHandle(order_id=order.id, client_id=client.id)  # type: ignore[arg-type]

    async def _verify_visible(self, order_id: str) -> None:
        # Best effort: surfaces store visibility problems early, never blocks.
        try:
            found = await self._api.get_order_by_id(order_id)
        except Exception as exc:
            logger.warning("Could not read back draft order %s: %s", order_id, exc)
            return
        if found is None:
            logger.warning("Draft order %s not visible right after creation", order_id)

    # --- Commit ---------------------------------------------------------------

    async def commit_draft(
        self,
        handle: DraftHandle | None,
        fields: OrderFields,
        chosen_client_id: str | None,
    ) -> Order | None:
        """Turn the draft into a real order.

        The placeholder client is left in place even when another client
        was chosen; use ``discard_placeholder_client`` to remove it.
        Returns None when the handle is no longer an open draft.
        """
        if handle is None or not handle.is_open:
            logger.info("Commit ignored: draft is not open")
            return None
        if handle.busy:
            logger.info("Commit ignored: draft %s is busy", handle.order_id)
            return None

        resolved = resolve_fields(fields, chosen_client_id)

        handle.busy = True
        try:
            order = await guarded("load draft order", self._api.get_order_by_id(handle.order_id))
            if order is None:
                raise EntityNotFoundError(f"Draft order {handle.order_id} no longer exists")

            order.finalize(
                name=resolved.name,
                client_id=chosen_client_id,  # type: ignore[arg-type]
                due_date=resolved.due_date,
                iva=resolved.iva,
                discount=resolved.discount,
                status=resolved.status,
            )
            order.apply_totals(await self._lines.totals_for(order))
            updated = await guarded("save order", self._api.update_order(handle.order_id, order))
        finally:
            handle.busy = False

        handle.state = DraftState.COMMITTED
        handle.committed_client_id = chosen_client_id
        if handle.client_is_placeholder and chosen_client_id != handle.client_id:
            logger.info(
                "Order %s committed to client %s; placeholder client %s retained",
                handle.order_id,
                chosen_client_id,
                handle.client_id,
            )
        return updated

    async def discard_placeholder_client(self, handle: DraftHandle) -> bool:
        """Delete the placeholder client left behind by a commit.

        Only applies once the draft was committed to a different client.
        """
        if handle.state is not DraftState.COMMITTED or not handle.client_is_placeholder:
            return False
        if handle.committed_client_id == handle.client_id:
            return False
        deleted = await guarded(
            "delete placeholder client", self._api.delete_client(handle.client_id)
        )
        handle.client_is_placeholder = False
        return deleted

    # --- Discard --------------------------------------------------------------

    async def discard_draft(self, handle: DraftHandle | None) -> list[CleanupError]:
        """Delete the draft order (lines first) and its placeholder client.

        Safe to call repeatedly.  Returns the cleanup failures, which have
        already been logged.
        """
        if handle is None or not handle.is_open:
            return []
        if handle.busy:
            logger.info("Discard ignored: draft %s is busy", handle.order_id)
            return []

        handle.busy = True
        failures: list[CleanupError] = []
        try:
            try:
                await self._lines.delete_all_for(handle.order_id)
            except Exception as exc:
                failures.append(self._cleanup_failed("line items of order", handle.order_id, exc))

            error = await self._delete_quietly("draft order", handle.order_id, self._api.delete_order)
            if error is not None:
                failures.append(error)

            if handle.client_is_placeholder:
                error = await self._delete_quietly(
                    "placeholder client", handle.client_id, self._api.delete_client
                )
                if error is not None:
                    failures.append(error)
        finally:
            handle.busy = False

        handle.state = DraftState.DISCARDED
        logger.info("Draft order %s discarded (%d cleanup failures)", handle.order_id, len(failures))
        return failures

    async def _delete_quietly(self, what: str, record_id: str, delete) -> CleanupError | None:
        try:
            await delete(record_id)
        except Exception as exc:
            return self._cleanup_failed(what, record_id, exc)
        return None

    @staticmethod
    def _cleanup_failed(what: str, record_id: str, exc: Exception) -> CleanupError:
        error = CleanupError(f"Could not delete {what} {record_id}: {exc}")
        error.__cause__ = exc
        logger.warning("%s", error)
        return error
