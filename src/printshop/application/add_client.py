"""Application service: Add Client use case."""

from __future__ import annotations

from printshop.application.calls import guarded
from printshop.domain.model.client import Client
from printshop.domain.repository.command_api import CommandApi


class AddClientHandler:

    def __init__(self, api: CommandApi) -> None:
        self._api = api

    async def handle(
        self,
        name: str,
        nuit: str,
        contact: str,
        category: str = "",
        observations: str = "",
    ) -> Client:
        client = Client.create(name, nuit, contact, category, observations)
        return await guarded("save client", self._api.create_client(client))
