"""Bounded-concurrency gate for enrichment tasks.

Each domain gets a semaphore sized to its configured maximum. Requests over the
limit wait in FIFO order instead of polling. The counters are only touched
between suspension points on the event loop, so no extra lock is needed.
"""

import asyncio
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Dict, Mapping

from loguru import logger


class EnrichmentDomain(str, Enum):
    TEMPO = "tempo"
    ARTWORK = "artwork"


class AdmissionController:
    """Limits how many tasks of each domain run at the same time."""

    def __init__(self, limits: Mapping[EnrichmentDomain, int]) -> None:
        for domain, limit in limits.items():
            if limit < 1:
                raise ValueError(f"{domain.value} limit must be >= 1, got {limit}")

        self._limits: Dict[EnrichmentDomain, int] = dict(limits)
        self._semaphores = {d: asyncio.Semaphore(n) for d, n in self._limits.items()}
        self._in_flight = {d: 0 for d in self._limits}
        self._waiting = {d: 0 for d in self._limits}
        self._peak = {d: 0 for d in self._limits}

    @asynccontextmanager
    async def slot(self, domain: EnrichmentDomain) -> AsyncIterator[None]:
        """Hold one in-flight slot of ``domain`` for the duration of the block."""
        semaphore = self._semaphores[domain]

        if semaphore.locked():
            logger.trace(
                f"{domain.value} saturated ({self._in_flight[domain]}/"
                f"{self._limits[domain]}), waiting"
            )

        self._waiting[domain] += 1
        try:
            await semaphore.acquire()
        finally:
            self._waiting[domain] -= 1

        self._in_flight[domain] += 1
        self._peak[domain] = max(self._peak[domain], self._in_flight[domain])
        try:
            yield
        finally:
            self._in_flight[domain] -= 1
            semaphore.release()

    def limit(self, domain: EnrichmentDomain) -> int:
        return self._limits[domain]

    def in_flight(self, domain: EnrichmentDomain) -> int:
        return self._in_flight[domain]

    def waiting(self, domain: EnrichmentDomain) -> int:
        return self._waiting[domain]

    def peak(self, domain: EnrichmentDomain) -> int:
        """Highest in-flight count observed since construction."""
        return self._peak[domain]
