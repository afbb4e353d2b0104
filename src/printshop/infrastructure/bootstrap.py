"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from printshop.application.cache import ShopCache
from printshop.application.lifecycle import LifecycleCoordinator
from printshop.application.line_items import LineItemAggregator
from printshop.application.provisioning import DraftProvisioner
from printshop.domain.repository.command_api import CommandApi
from printshop.infrastructure.config import Settings, get_settings
from printshop.infrastructure.persistence.json_command_api import JsonCommandApi


@dataclass
class Services:
    """Everything one process needs, sharing a single cache."""

    api: CommandApi
    cache: ShopCache
    lines: LineItemAggregator
    provisioner: DraftProvisioner

    def editor(self) -> LifecycleCoordinator:
        return LifecycleCoordinator(self.api, self.provisioner, self.lines, self.cache)


def command_api(settings: Settings | None = None) -> JsonCommandApi:
    settings = settings or get_settings()
    return JsonCommandApi(settings.store_path)


def build_services(settings: Settings | None = None, api: CommandApi | None = None) -> Services:
    settings = settings or get_settings()
    api = api or command_api(settings)
    cache = ShopCache(api)
    lines = LineItemAggregator(api, cache)
    provisioner = DraftProvisioner(
        api,
        lines,
        placeholder_marker=settings.placeholder_marker,
        default_iva=settings.default_iva,
        verify=settings.verify_drafts,
    )
    return Services(api=api, cache=cache, lines=lines, provisioner=provisioner)
