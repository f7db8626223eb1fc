"""
Concurrent fan-out with wait-for-all semantics.

Every awaitable runs to completion; failures come back as exception
instances in their slot instead of cancelling the siblings.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, TypeVar, Union

T = TypeVar("T")

Settled = Union[T, Exception]


async def settle(awaitables: Iterable[Awaitable[T]]) -> list[Settled[T]]:
    """Run awaitables concurrently and return results or exceptions, in order."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for outcome in results:
        # Cancellation must still propagate
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
    return list(results)


def failures(results: list[Settled[T]]) -> list[tuple[int, Exception]]:
    """Index and exception of every failed slot."""
    return [(i, r) for i, r in enumerate(results) if isinstance(r, Exception)]
