"""Application service: order editor lifecycle.

Binds what the user does in the order editor (open, switch tab, add or
remove lines, save, cancel, close) to the draft provisioner and the
line-item aggregator, and re-prices the order after every change.

State machine for one editor session::

    NO_DRAFT -> PROVISIONING -> DRAFT -> COMMITTING -> COMMITTED
                     |            +----> DISCARDING -> DISCARDED
                     +-> DEGRADED (provisioning failed; order created on save)

    EDITING (opened on an existing order) -> COMMITTED | DISCARDED

All command API work is awaited sequentially on one event loop.  A
cancel arriving while provisioning is in flight is remembered and
carried out as soon as provisioning resolves.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum

from printshop.application.cache import ShopCache
from printshop.application.calls import guarded
from printshop.application.dto import (
    GarmentLineSpec,
    ImpressionSpec,
    OrderFields,
    ServiceChargeSpec,
)
from printshop.application.line_items import LineItemAggregator
from printshop.application.provisioning import (
    DraftHandle,
    DraftProvisioner,
    resolve_fields,
)
from printshop.application.update_client_debt import UpdateClientDebtHandler
from printshop.domain.exceptions import (
    EntityNotFoundError,
    PersistenceError,
    ProvisioningError,
    ValidationError,
)
from printshop.domain.model.kinds import ServiceLocation, ServiceType, parse_enum
from printshop.domain.model.line_items import GarmentLine, ImpressionLine, ServiceCharge
from printshop.domain.model.order import Order
from printshop.domain.model.value_objects import Money, parse_rate
from printshop.domain.repository.command_api import CommandApi
from printshop.domain.service.pricing import Totals, compute_totals

logger = logging.getLogger(__name__)


class EditorState(Enum):
    NO_DRAFT = "NO_DRAFT"
    PROVISIONING = "PROVISIONING"
    DRAFT = "DRAFT"
    DEGRADED = "DEGRADED"
    EDITING = "EDITING"
    COMMITTING = "COMMITTING"
    COMMITTED = "COMMITTED"
    DISCARDING = "DISCARDING"
    DISCARDED = "DISCARDED"


class EditorTab(Enum):
    DETAILS = "details"
    PRODUCTS = "products"
    IMPRESSIONS = "impressions"


_EDITABLE = (EditorState.DRAFT, EditorState.EDITING, EditorState.DEGRADED)
_CLOSED = (EditorState.COMMITTED, EditorState.DISCARDED)


@dataclass
class ProvisioningContext:
    """Mutable record of one editor session's draft.

    Handed explicitly to the teardown handler so a late discard always
    sees the current handle.
    """

    state: EditorState = EditorState.NO_DRAFT
    handle: DraftHandle | None = None
    order_id: str | None = None
    busy: bool = False
    cancel_requested: bool = False


async def discard_context(
    context: ProvisioningContext,
    provisioner: DraftProvisioner,
    cache: ShopCache,
) -> None:
    """Discard the draft held by ``context``, if any. Never raises."""
    if context.state is EditorState.PROVISIONING:
        context.cancel_requested = True
        return
    if context.state is not EditorState.DRAFT or context.busy:
        return

    context.state = EditorState.DISCARDING
    context.busy = True
    try:
        await provisioner.discard_draft(context.handle)
    finally:
        context.busy = False
    context.state = EditorState.DISCARDED
    context.handle = None
    if context.order_id is not None:
        cache.forget_order(context.order_id)


class LifecycleCoordinator:

    def __init__(
        self,
        api: CommandApi,
        provisioner: DraftProvisioner,
        lines: LineItemAggregator,
        cache: ShopCache,
    ) -> None:
        self._api = api
        self._provisioner = provisioner
        self._lines = lines
        self._cache = cache
        self._background: set[asyncio.Task] = set()
        self._pending_seq = 0
        self._debt = UpdateClientDebtHandler(api)
        self._opened_client_id: str | None = None

        self.context = ProvisioningContext()
        self.fields = OrderFields()
        self.client_id: str | None = None
        self.active_tab = EditorTab.DETAILS
        self.garment_lines: list[GarmentLine] = []
        self.impression_lines: list[ImpressionLine] = []
        self.totals: Totals = self.recompute()

    # --- State ----------------------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self.context.state

    @property
    def order_id(self) -> str | None:
        return self.context.order_id

    # --- Opening --------------------------------------------------------------

    async def open(self, order_id: str | None = None) -> EditorState:
        """Open the editor on an existing order, or on a fresh draft."""
        if order_id is None:
            return await self.begin()

        if self.context.state is not EditorState.NO_DRAFT:
            logger.info("Editor already open (%s); open ignored", self.context.state.value)
            return self.context.state

        order = await guarded("load order", self._api.get_order_by_id(order_id))
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        self.context.state = EditorState.EDITING
        self.context.order_id = order.id
        self.client_id = order.client_id
        self._opened_client_id = order.client_id
        self.fields = OrderFields(
            name=order.name,
            due_date=order.due_date,
            iva=order.iva,
            discount=order.discount.amount,
            status=order.status.value,
        )
        await self._refresh_lines()
        return self.context.state

    async def begin(self) -> EditorState:
        """Provision a draft order. At most one draft per editor session."""
        ctx = self.context
        if ctx.state is not EditorState.NO_DRAFT or ctx.busy:
            logger.info("Draft already requested (%s); begin ignored", ctx.state.value)
            return ctx.state

        ctx.state = EditorState.PROVISIONING
        ctx.busy = True
        try:
            handle = await self._provisioner.begin_draft()
        except ProvisioningError as exc:
            logger.warning("Falling back to create-on-save: %s", exc)
            ctx.state = EditorState.DEGRADED
            handle = None
        finally:
            ctx.busy = False

        if handle is not None:
            ctx.handle = handle
            ctx.order_id = handle.order_id
            ctx.state = EditorState.DRAFT
            self.garment_lines = []
            self.impression_lines = []
            self.recompute()

        if ctx.cancel_requested:
            logger.info("Cancel was requested during provisioning; discarding now")
            await self.cancel()
        return ctx.state

    # --- Details form ---------------------------------------------------------

    def select_client(self, client_id: str) -> None:
        if not client_id:
            raise ValidationError("A client must be selected")
        self.client_id = client_id

    def update_fields(self, **changes) -> Totals:
        """Change details-form fields; IVA and discount re-price the order."""
        fields = replace(self.fields, **changes)
        totals = self._price(fields)
        self.fields = fields
        self.totals = totals
        return totals

    def switch_tab(self, tab: EditorTab | str) -> None:
        self.active_tab = EditorTab(tab)

    async def enter_tab(self, tab: EditorTab | str) -> None:
        """Switch tabs, reloading the tab's lines if none are held locally.

        The tab may have been opened before the first round trip finished.
        """
        self.switch_tab(tab)
        if self.context.state not in (EditorState.DRAFT, EditorState.EDITING):
            return
        empty = (
            (self.active_tab is EditorTab.PRODUCTS and not self.garment_lines)
            or (self.active_tab is EditorTab.IMPRESSIONS and not self.impression_lines)
        )
        if empty:
            await self._lines.reload(self.context.order_id)  # type: ignore[arg-type]
            await self._refresh_lines()

    # --- Pricing --------------------------------------------------------------

    def recompute(self) -> Totals:
        """Re-price from the lines currently held. Synchronous."""
        self.totals = self._price(self.fields)
        return self.totals

    def _price(self, fields: OrderFields) -> Totals:
        return compute_totals(
            self.garment_lines,
            self.impression_lines,
            parse_rate(fields.iva),
            Money.of(fields.discount),
        )

    async def _refresh_lines(self) -> None:
        order_id = self.context.order_id
        if order_id is None:
            self.recompute()
            return
        self.garment_lines = await self._lines.list_garment_lines(order_id)
        self.impression_lines = await self._lines.list_impression_lines(order_id)
        self.recompute()

    # --- Line items -----------------------------------------------------------

    def _require_editable(self) -> None:
        if self.context.state not in _EDITABLE:
            raise ValidationError(
                f"Line items cannot be changed while the editor is {self.context.state.value}"
            )

    def _next_pending_id(self) -> str:
        self._pending_seq += 1
        return f"pending-{self._pending_seq}"

    @property
    def _degraded(self) -> bool:
        return self.context.state is EditorState.DEGRADED

    def _is_stored(self, line: GarmentLine | ImpressionLine | None) -> bool:
        # While degraded, lines a failed save already attached carry the new
        # order id; everything else is still pending.
        order_id = self.context.order_id
        return line is not None and order_id is not None and line.order_id == order_id

    def _local_garment(self, line_id: str) -> GarmentLine | None:
        return next((g for g in self.garment_lines if g.id == line_id), None)

    def _local_impression(self, line_id: str) -> ImpressionLine | None:
        return next((i for i in self.impression_lines if i.id == line_id), None)

    async def add_garment_line(self, spec: GarmentLineSpec) -> GarmentLine:
        self._require_editable()
        if self._degraded:
            line = self._lines.build_garment_line("", spec)
            line.id = self._next_pending_id()
            self.garment_lines.append(line)
            self.recompute()
            return line

        stored = await self._lines.add_garment_line(self.context.order_id, spec)  # type: ignore[arg-type]
        await self._refresh_lines()
        return stored

    async def remove_garment_line(self, line_id: str) -> None:
        self._require_editable()
        if self._degraded:
            if self._is_stored(self._local_garment(line_id)):
                await self._lines.remove_garment_line(self.context.order_id, line_id)  # type: ignore[arg-type]
            self.garment_lines = [g for g in self.garment_lines if g.id != line_id]
            self.recompute()
            return
        await self._lines.remove_garment_line(self.context.order_id, line_id)  # type: ignore[arg-type]
        await self._refresh_lines()

    async def update_garment_line(self, line_id: str, spec: GarmentLineSpec) -> GarmentLine:
        self._require_editable()
        if self._degraded:
            existing = self._local_garment(line_id)
            if existing is None:
                raise EntityNotFoundError(f"Garment line {line_id} not found")
            if self._is_stored(existing):
                line = await self._lines.update_garment_line(
                    self.context.order_id, line_id, spec  # type: ignore[arg-type]
                )
            else:
                line = self._lines.build_garment_line("", spec)
                line.id = line_id
            self.garment_lines[self.garment_lines.index(existing)] = line
            self.recompute()
            return line

        stored = await self._lines.update_garment_line(
            self.context.order_id, line_id, spec  # type: ignore[arg-type]
        )
        await self._refresh_lines()
        return stored

    async def add_service_charge(
        self, line: GarmentLine, spec: ServiceChargeSpec
    ) -> ServiceCharge:
        self._require_editable()
        if self._degraded:
            if self._is_stored(line):
                charge = await self._lines.add_service_charge(line, spec)
            else:
                charge = self._lines.build_service_charge(spec)
                line.add_service(charge)
            self.recompute()
            return charge

        charge = await self._lines.add_service_charge(line, spec)
        await self._refresh_lines()
        return charge

    async def remove_service_charge(
        self,
        line: GarmentLine,
        service_type: ServiceType | str,
        location: ServiceLocation | str,
    ) -> None:
        self._require_editable()
        if self._degraded:
            if self._is_stored(line):
                await self._lines.remove_service_charge(line, service_type, location)
            else:
                line.remove_service(
                    parse_enum(ServiceType, service_type, "service type"),
                    parse_enum(ServiceLocation, location, "service location"),
                )
            self.recompute()
            return
        await self._lines.remove_service_charge(line, service_type, location)
        await self._refresh_lines()

    async def add_impression_line(self, spec: ImpressionSpec) -> ImpressionLine:
        self._require_editable()
        if self._degraded:
            line = self._lines.build_impression_line("", spec)
            line.id = self._next_pending_id()
            self.impression_lines.append(line)
            self.recompute()
            return line

        stored = await self._lines.add_impression_line(self.context.order_id, spec)  # type: ignore[arg-type]
        await self._refresh_lines()
        return stored

    async def update_impression_line(self, line_id: str, spec: ImpressionSpec) -> ImpressionLine:
        self._require_editable()
        if self._degraded:
            existing = self._local_impression(line_id)
            if existing is None:
                raise EntityNotFoundError(f"Impression {line_id} not found")
            if self._is_stored(existing):
                line = await self._lines.update_impression_line(
                    self.context.order_id, line_id, spec  # type: ignore[arg-type]
                )
            else:
                line = self._lines.build_impression_line("", spec)
                line.id = line_id
            self.impression_lines[self.impression_lines.index(existing)] = line
            self.recompute()
            return line

        stored = await self._lines.update_impression_line(
            self.context.order_id, line_id, spec  # type: ignore[arg-type]
        )
        await self._refresh_lines()
        return stored

    async def remove_impression_line(self, line_id: str) -> None:
        self._require_editable()
        if self._degraded:
            if self._is_stored(self._local_impression(line_id)):
                await self._lines.remove_impression_line(self.context.order_id, line_id)  # type: ignore[arg-type]
            self.impression_lines = [i for i in self.impression_lines if i.id != line_id]
            self.recompute()
            return
        await self._lines.remove_impression_line(self.context.order_id, line_id)  # type: ignore[arg-type]
        await self._refresh_lines()

    # --- Save -----------------------------------------------------------------

    async def save(self) -> Order | None:
        """Commit the order. A session that is already closed is a no-op."""
        ctx = self.context
        if ctx.state in _CLOSED:
            logger.info("Save ignored: editor already %s", ctx.state.value)
            return None
        if ctx.state not in _EDITABLE:
            raise ValidationError(f"Order cannot be saved while {ctx.state.value}")

        resolve_fields(self.fields, self.client_id)

        previous = ctx.state
        ctx.state = EditorState.COMMITTING
        try:
            if previous is EditorState.DRAFT:
                order = await self._provisioner.commit_draft(
                    ctx.handle, self.fields, self.client_id
                )
            elif previous is EditorState.DEGRADED and ctx.order_id is None:
                order = await self._create_directly()
            else:
                order = await self._update_existing()
        except Exception:
            # A direct create that already stored the order keeps its id, so
            # the next save only attaches what is still pending.
            ctx.state = previous
            raise

        if order is None:
            # The provisioner refused: the draft was busy or already closed.
            ctx.state = previous
            return None

        ctx.state = EditorState.COMMITTED
        self._cache.invalidate_orders()
        logger.info("Order %s saved", ctx.order_id)
        await self._roll_up_debt(order.client_id, self._opened_client_id)
        return order

    async def _roll_up_debt(self, *client_ids: str | None) -> None:
        # The order is already committed; a stale client total is only logged.
        for client_id in dict.fromkeys(c for c in client_ids if c):
            try:
                await self._debt.handle(client_id)
            except (EntityNotFoundError, PersistenceError) as exc:
                logger.warning("Debt of client %s not updated: %s", client_id, exc)

    async def _create_directly(self) -> Order:
        resolved = resolve_fields(self.fields, self.client_id)
        order = Order.create(
            name=resolved.name,
            client_id=self.client_id,  # type: ignore[arg-type]
            due_date=resolved.due_date,
            iva=resolved.iva,
            discount=resolved.discount,
            status=resolved.status,
        )
        created = await guarded("create order", self._api.create_order(order))
        self.context.order_id = created.id
        return await self._update_existing()

    async def _attach_pending(self, order_id: str) -> None:
        # Lines collected while degraded are not bound to any order yet.
        try:
            for garment in [g for g in self.garment_lines if g.order_id != order_id]:
                saved_garment = await guarded(
                    "save garment",
                    self._api.create_clothes(replace(garment, order_id=order_id, id=None)),
                )
                garment.order_id, garment.id = order_id, saved_garment.id
            for impression in [i for i in self.impression_lines if i.order_id != order_id]:
                saved_impression = await guarded(
                    "save impression",
                    self._api.create_impression(replace(impression, order_id=order_id, id=None)),
                )
                impression.order_id, impression.id = order_id, saved_impression.id
        finally:
            self._cache.invalidate_lines(order_id)

    async def _update_existing(self) -> Order:
        order_id = self.context.order_id
        await self._attach_pending(order_id)  # type: ignore[arg-type]

        order = await guarded("load order", self._api.get_order_by_id(order_id))  # type: ignore[arg-type]
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        resolved = resolve_fields(self.fields, self.client_id)
        order.finalize(
            name=resolved.name,
            client_id=self.client_id,  # type: ignore[arg-type]
            due_date=resolved.due_date,
            iva=resolved.iva,
            discount=resolved.discount,
            status=resolved.status,
        )
        order.apply_totals(await self._lines.totals_for(order))
        return await guarded("save order", self._api.update_order(order_id, order))  # type: ignore[arg-type]

    async def discard_placeholder_client(self) -> bool:
        """Remove the placeholder client retained by a commit to another client."""
        if self.context.handle is None:
            return False
        removed = await self._provisioner.discard_placeholder_client(self.context.handle)
        if removed:
            self._cache.invalidate_orders()
        return removed

    # --- Cancel / teardown ----------------------------------------------------

    async def cancel(self) -> EditorState:
        """Abandon the editor; a draft is discarded and the order list refreshed."""
        ctx = self.context
        if ctx.state is EditorState.PROVISIONING:
            ctx.cancel_requested = True
            logger.info("Cancel queued until provisioning finishes")
            return ctx.state

        if ctx.state is EditorState.DRAFT:
            await discard_context(ctx, self._provisioner, self._cache)
            try:
                await self._cache.reload()
            except PersistenceError as exc:
                logger.warning("Order list refresh after discard failed: %s", exc)
                self._cache.invalidate_orders()
        elif ctx.state in (EditorState.NO_DRAFT, EditorState.DEGRADED, EditorState.EDITING):
            ctx.state = EditorState.DISCARDED

        self.garment_lines = []
        self.impression_lines = []
        self.recompute()
        return ctx.state

    def teardown(self) -> asyncio.Task | None:
        """Best-effort discard when the editor goes away without cancel.

        Fire-and-forget: the returned task may not finish before the
        process exits, in which case the draft stays behind in the store.
        """
        ctx = self.context
        if ctx.state is EditorState.PROVISIONING:
            ctx.cancel_requested = True
            return None
        if ctx.state is not EditorState.DRAFT:
            return None

        logger.warning("Editor closed with open draft %s; discarding in background", ctx.order_id)
        task = asyncio.get_running_loop().create_task(
            discard_context(ctx, self._provisioner, self._cache)
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task
