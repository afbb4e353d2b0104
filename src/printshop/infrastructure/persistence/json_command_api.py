"""JSON-file-backed implementation of the command API.

One document holds four collections (clients, orders, clothes,
impressions).  Every write rewrites the whole file, which makes each
single-record write atomic from the caller's point of view.  Money is
stored as float and dates as ISO-8601 strings, matching the wire format
of the shop's command API.
"""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from printshop.domain.model.client import Client
from printshop.domain.model.kinds import GarmentKind, Material, ServiceLocation, ServiceType
from printshop.domain.model.line_items import GarmentLine, ImpressionLine, ServiceCharge
from printshop.domain.model.order import Order, OrderStatus
from printshop.domain.model.value_objects import Money, SizeQuantities
from printshop.domain.repository.command_api import CommandApi

_COLLECTIONS = ("clients", "orders", "clothes", "impressions")


class JsonCommandApi(CommandApi):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- Clients --------------------------------------------------------------

    async def create_client(self, client: Client) -> Client:
        raw = self._client_to_raw(client)
        raw["id"] = self._new_id()
        self._insert("clients", raw)
        return self._client_to_domain(raw)

    async def update_client(self, client_id: str, client: Client) -> Client | None:
        raw = self._client_to_raw(client)
        raw["id"] = client_id
        if not self._replace("clients", raw):
            return None
        return self._client_to_domain(raw)

    async def delete_client(self, client_id: str) -> bool:
        return self._delete("clients", client_id)

    async def get_client_by_id(self, client_id: str) -> Client | None:
        raw = self._find("clients", client_id)
        return self._client_to_domain(raw) if raw is not None else None

    async def list_clients(self) -> list[Client]:
        return [self._client_to_domain(r) for r in self._load_raw()["clients"]]

    # --- Orders ---------------------------------------------------------------

    async def create_order(self, order: Order) -> Order:
        data = self._load_raw()
        if not any(c["id"] == order.client_id for c in data["clients"]):
            raise ValueError(f"client {order.client_id} does not exist")
        raw = self._order_to_raw(order)
        raw["id"] = self._new_id()
        data["orders"].append(raw)
        self._persist_raw(data)
        return self._order_to_domain(raw)

    async def update_order(self, order_id: str, order: Order) -> Order:
        if self._find("clients", order.client_id) is None:
            raise ValueError(f"client {order.client_id} does not exist")
        raw = self._order_to_raw(order)
        raw["id"] = order_id
        if not self._replace("orders", raw):
            raise KeyError(f"order {order_id} does not exist")
        return self._order_to_domain(raw)

    async def delete_order(self, order_id: str) -> bool:
        return self._delete("orders", order_id)

    async def get_order_by_id(self, order_id: str) -> Order | None:
        raw = self._find("orders", order_id)
        return self._order_to_domain(raw) if raw is not None else None

    async def list_orders(self) -> list[Order]:
        return [self._order_to_domain(r) for r in self._load_raw()["orders"]]

    # --- Garment lines --------------------------------------------------------

    async def get_clothes_by_order_id(self, order_id: str) -> list[GarmentLine]:
        return [
            self._garment_to_domain(r)
            for r in self._load_raw()["clothes"]
            if r["order_id"] == order_id
        ]

    async def create_clothes(self, line: GarmentLine) -> GarmentLine:
        raw = self._garment_to_raw(line)
        raw["id"] = self._new_id()
        for service in raw["services"]:
            service["id"] = self._new_id()
        self._insert("clothes", raw)
        return self._garment_to_domain(raw)

    async def update_clothes(self, line_id: str, line: GarmentLine) -> GarmentLine | None:
        raw = self._garment_to_raw(line)
        raw["id"] = line_id
        for service in raw["services"]:
            service["id"] = service["id"] or self._new_id()
        if not self._replace("clothes", raw):
            return None
        return self._garment_to_domain(raw)

    async def delete_clothes(self, line_id: str) -> bool:
        return self._delete("clothes", line_id)

    # --- Impression lines -----------------------------------------------------

    async def get_impressions_by_order_id(self, order_id: str) -> list[ImpressionLine]:
        return [
            self._impression_to_domain(r)
            for r in self._load_raw()["impressions"]
            if r["order_id"] == order_id
        ]

    async def create_impression(self, line: ImpressionLine) -> ImpressionLine:
        raw = self._impression_to_raw(line)
        raw["id"] = self._new_id()
        self._insert("impressions", raw)
        return self._impression_to_domain(raw)

    async def update_impression(
        self, line_id: str, line: ImpressionLine
    ) -> ImpressionLine | None:
        raw = self._impression_to_raw(line)
        raw["id"] = line_id
        if not self._replace("impressions", raw):
            return None
        return self._impression_to_domain(raw)

    async def delete_impression(self, line_id: str) -> bool:
        return self._delete("impressions", line_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _client_to_raw(client: Client) -> dict:
        return {
            "id": client.id,
            "name": client.name,
            "nuit": client.nuit,
            "contact": client.contact,
            "category": client.category,
            "observations": client.observations,
            "debt": client.debt.to_float(),
            "created_at": client.created_at.isoformat(),
        }

    @staticmethod
    def _client_to_domain(raw: dict) -> Client:
        return Client(
            id=raw["id"],
            name=raw["name"],
            nuit=raw["nuit"],
            contact=raw["contact"],
            category=raw.get("category", ""),
            observations=raw.get("observations", ""),
            debt=Money.of(raw.get("debt", 0)),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    @staticmethod
    def _order_to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "name": order.name,
            "client_id": order.client_id,
            "due_date": order.due_date.isoformat(),
            "iva": float(order.iva),
            "discount": order.discount.to_float(),
            "status": order.status.value,
            "subtotal": order.subtotal.to_float(),
            "total": order.total.to_float(),
            "debt": order.debt.to_float(),
            "is_placeholder": order.is_placeholder,
            "created_at": order.created_at.isoformat(),
        }

    @staticmethod
    def _order_to_domain(raw: dict) -> Order:
        return Order(
            id=raw["id"],
            name=raw["name"],
            client_id=raw["client_id"],
            due_date=date.fromisoformat(raw["due_date"]),
            iva=Decimal(str(raw["iva"])),
            discount=Money.of(raw["discount"]),
            status=OrderStatus(raw["status"]),
            subtotal=Money.of(raw["subtotal"]),
            total=Money.of(raw["total"]),
            debt=Money.of(raw["debt"]),
            is_placeholder=raw.get("is_placeholder", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    @staticmethod
    def _garment_to_raw(line: GarmentLine) -> dict:
        return {
            "id": line.id,
            "order_id": line.order_id,
            "clothing_type": line.kind.kind.value,
            "custom_type": line.kind.label,
            "unit_price": line.unit_price.to_float(),
            "sizes": line.sizes.as_dict(),
            "color": line.color,
            "total_quantity": line.total_quantity,
            "services": [
                {
                    "id": s.id,
                    "service_type": s.service_type.value,
                    "location": s.location.value,
                    "description": s.description,
                    "unit_price": s.unit_price.to_float(),
                }
                for s in line.services
            ],
        }

    @staticmethod
    def _garment_to_domain(raw: dict) -> GarmentLine:
        # total_quantity is stored for other readers; it is re-derived here.
        return GarmentLine(
            id=raw["id"],
            order_id=raw["order_id"],
            kind=GarmentKind(raw["clothing_type"], raw.get("custom_type")),
            unit_price=Money.of(raw["unit_price"]),
            sizes=SizeQuantities(raw["sizes"]),
            color=raw["color"],
            services=[
                ServiceCharge(
                    id=s["id"],
                    service_type=ServiceType(s["service_type"]),
                    location=ServiceLocation(s["location"]),
                    description=s.get("description"),
                    unit_price=Money.of(s["unit_price"]),
                )
                for s in raw["services"]
            ],
        )

    @staticmethod
    def _impression_to_raw(line: ImpressionLine) -> dict:
        return {
            "id": line.id,
            "order_id": line.order_id,
            "name": line.name,
            "size": line.size,
            "material": line.material.kind.value,
            "custom_material": line.material.label,
            "description": line.description,
            "price": line.price.to_float(),
        }

    @staticmethod
    def _impression_to_domain(raw: dict) -> ImpressionLine:
        return ImpressionLine(
            id=raw["id"],
            order_id=raw["order_id"],
            name=raw["name"],
            size=raw["size"],
            material=Material(raw["material"], raw.get("custom_material")),
            description=raw.get("description", ""),
            price=Money.of(raw["price"]),
        )

    # --- Collection helpers ---------------------------------------------------

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def _find(self, collection: str, record_id: str) -> dict | None:
        for raw in self._load_raw()[collection]:
            if raw["id"] == record_id:
                return raw
        return None

    def _insert(self, collection: str, raw: dict) -> None:
        data = self._load_raw()
        data[collection].append(raw)
        self._persist_raw(data)

    def _replace(self, collection: str, raw: dict) -> bool:
        data = self._load_raw()
        for i, existing in enumerate(data[collection]):
            if existing["id"] == raw["id"]:
                data[collection][i] = raw
                self._persist_raw(data)
                return True
        return False

    def _delete(self, collection: str, record_id: str) -> bool:
        data = self._load_raw()
        kept = [r for r in data[collection] if r["id"] != record_id]
        if len(kept) == len(data[collection]):
            return False
        data[collection] = kept
        self._persist_raw(data)
        return True

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, list[dict]]:
        data = json.loads(self._file_path.read_text(encoding="utf-8"))
        for name in _COLLECTIONS:
            data.setdefault(name, [])
        return data

    def _persist_raw(self, data: dict[str, list[dict]]) -> None:
        self._file_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_raw({name: [] for name in _COLLECTIONS})
