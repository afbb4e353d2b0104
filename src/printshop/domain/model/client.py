"""Client aggregate.

Clients normally come from the client screens.  The one exception is the
placeholder client: a throwaway record created only so a draft order has
something to reference before the user picks a real client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.value_objects import Money

PLACEHOLDER_NAME = "Cliente Temporário"
# Dummy values satisfying the store's required-field constraints.
PLACEHOLDER_NUIT = "000000000"
PLACEHOLDER_CONTACT = "000000000"


@dataclass
class Client:

    id: str | None
    name: str
    nuit: str
    contact: str
    category: str = ""
    observations: str = ""
    debt: Money = field(default_factory=Money.zero)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        name: str,
        nuit: str,
        contact: str,
        category: str = "",
        observations: str = "",
    ) -> Client:
        """Create a new client, enforcing required fields."""
        for label, value in (("name", name), ("NUIT", nuit), ("contact", contact)):
            if not value or not value.strip():
                raise ValidationError(f"Client {label} is required")
        return Client(
            id=None,
            name=name.strip(),
            nuit=nuit.strip(),
            contact=contact.strip(),
            category=category.strip(),
            observations=observations.strip(),
        )

    @staticmethod
    def placeholder(marker: str) -> Client:
        """Build the synthetic client that backs a draft order."""
        return Client(
            id=None,
            name=PLACEHOLDER_NAME,
            nuit=PLACEHOLDER_NUIT,
            contact=PLACEHOLDER_CONTACT,
            category=marker,
            observations=marker,
        )

    def is_placeholder(self, marker: str) -> bool:
        return self.category == marker and self.observations == marker
