# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded fan-out that keeps results in input order."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from ..errors import BackendError, SnykError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    *,
    limit: int,
) -> list[R | SnykError]:
    """
    Run `func` over `items` with at most `limit` calls in flight.

    An exception raised for one item is returned in that item's slot so
    siblings keep running. Anything that is not a SnykError is wrapped in
    BackendError, with the original kept as `__cause__`.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(item: T) -> R | SnykError:
        async with semaphore:
            try:
                return await func(item)
            except SnykError as exc:
                return exc
            except Exception as exc:  # noqa: BLE001
                logger.debug("Unexpected error for %r", item, exc_info=True)
                error = BackendError(str(exc) or type(exc).__name__)
                error.__cause__ = exc
                return error

    return list(await asyncio.gather(*(run(item) for item in items)))


__all__ = ["map_bounded"]
