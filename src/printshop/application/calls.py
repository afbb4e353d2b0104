"""Boundary helper for command API calls.

Domain errors pass through untouched; anything else coming out of the
command API is wrapped in ``PersistenceError`` so callers only ever deal
with domain exceptions.  Nothing here retries.
"""

from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

from printshop.domain.exceptions import DomainException, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def guarded(action: str, call: Awaitable[T]) -> T:
    try:
        return await call
    except DomainException:
        raise
    except Exception as exc:
        logger.error("Command API call failed while trying to %s: %s", action, exc)
        raise PersistenceError(f"Could not {action}: {exc}") from exc
