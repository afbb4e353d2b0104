"""Abstract command API: the only way the core reaches stored records.

Defined in the domain layer so the domain never depends on
infrastructure.  Every command is a coroutine; implementations may fail
with any exception, which the application layer treats as an opaque
persistence failure.  Single-record writes are assumed atomic; deleting
an order is NOT assumed to cascade into its line items.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from printshop.domain.model.client import Client
from printshop.domain.model.line_items import GarmentLine, ImpressionLine
from printshop.domain.model.order import Order


class CommandApi(ABC):

    # --- Clients --------------------------------------------------------------

    @abstractmethod
    async def create_client(self, client: Client) -> Client:
        """Store a new client and return it with its id assigned."""

    @abstractmethod
    async def update_client(self, client_id: str, client: Client) -> Client | None:
        """Overwrite a stored client. Returns None if it does not exist."""

    @abstractmethod
    async def delete_client(self, client_id: str) -> bool:
        """Delete a client. Returns False if it did not exist."""

    @abstractmethod
    async def get_client_by_id(self, client_id: str) -> Client | None:
        """Return a client by id, or None."""

    @abstractmethod
    async def list_clients(self) -> list[Client]:
        """Return every client."""

    # --- Orders ---------------------------------------------------------------

    @abstractmethod
    async def create_order(self, order: Order) -> Order:
        """Store a new order and return it with its id assigned."""

    @abstractmethod
    async def update_order(self, order_id: str, order: Order) -> Order:
        """Overwrite the stored fields of an existing order."""

    @abstractmethod
    async def delete_order(self, order_id: str) -> bool:
        """Delete an order. Returns False if it did not exist."""

    @abstractmethod
    async def get_order_by_id(self, order_id: str) -> Order | None:
        """Return an order by id, or None."""

    @abstractmethod
    async def list_orders(self) -> list[Order]:
        """Return every order."""

    # --- Garment lines --------------------------------------------------------

    @abstractmethod
    async def get_clothes_by_order_id(self, order_id: str) -> list[GarmentLine]:
        """Return the garment lines (with their service charges) of an order."""

    @abstractmethod
    async def create_clothes(self, line: GarmentLine) -> GarmentLine:
        """Store a garment line together with its service charges."""

    @abstractmethod
    async def update_clothes(self, line_id: str, line: GarmentLine) -> GarmentLine | None:
        """Overwrite a stored garment line. Returns None if it does not exist."""

    @abstractmethod
    async def delete_clothes(self, line_id: str) -> bool:
        """Delete a garment line. Returns False if it did not exist."""

    # --- Impression lines -----------------------------------------------------

    @abstractmethod
    async def get_impressions_by_order_id(self, order_id: str) -> list[ImpressionLine]:
        """Return the impression lines of an order."""

    @abstractmethod
    async def create_impression(self, line: ImpressionLine) -> ImpressionLine:
        """Store an impression line."""

    @abstractmethod
    async def update_impression(
        self, line_id: str, line: ImpressionLine
    ) -> ImpressionLine | None:
        """Overwrite a stored impression line. Returns None if it does not exist."""

    @abstractmethod
    async def delete_impression(self, line_id: str) -> bool:
        """Delete an impression line. Returns False if it did not exist."""
