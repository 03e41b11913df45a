"""Background tempo and artwork enrichment.

Every request runs inside an admission slot for its domain. Results land in
the domain's cache; failures are logged and dropped so that one broken file
never affects other tracks or playback.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set

from loguru import logger

from amethyst import host as host_commands
from amethyst.domain.analysis.tempo import format_hint
from amethyst.host import HostBridge

from .admission import AdmissionController, EnrichmentDomain
from .cache import ResultCache

Analyzer = Callable[[HostBridge, str], Awaitable[Any]]


async def analyze_tempo(host: HostBridge, path: str) -> int:
    """Read, decode and beat-detect ``path`` through the host, in whole BPM."""
    data = await host.invoke(host_commands.READ_FILE, [path])
    buffer = await host.invoke(host_commands.DECODE_AUDIO, [data, format_hint(path)])
    bpm = await host.invoke(host_commands.DETECT_TEMPO, [buffer])
    return round(bpm)


async def fetch_artwork(host: HostBridge, path: str) -> str:
    return await host.invoke(host_commands.GET_COVER, [path])


DEFAULT_ANALYZERS: Dict[EnrichmentDomain, Analyzer] = {
    EnrichmentDomain.TEMPO: analyze_tempo,
    EnrichmentDomain.ARTWORK: fetch_artwork,
}


class EnrichmentPipeline:
    """Schedules best-effort enrichment tasks under admission control."""

    def __init__(
        self,
        host: HostBridge,
        admission: AdmissionController,
        caches: Dict[EnrichmentDomain, ResultCache],
        analyzers: Optional[Dict[EnrichmentDomain, Analyzer]] = None,
    ) -> None:
        self.host = host
        self.admission = admission
        self.caches = caches
        self.analyzers = dict(analyzers or DEFAULT_ANALYZERS)
        self._in_flight: Dict[EnrichmentDomain, Set[str]] = {d: set() for d in caches}
        self._tasks: Set[asyncio.Task] = set()

    async def enrich(self, domain: EnrichmentDomain, path: str) -> Optional[Any]:
        """Compute and cache one result. Never raises on analysis failure.

        Returns:
            The cached value, or None if the analysis failed
        """
        cache = self.caches[domain]

        async with self.admission.slot(domain):
            try:
                value = await self.analyzers[domain](self.host, path)
            except Exception as e:
                logger.debug(f"{domain.value} enrichment failed for {path}: {e}")
                return None

        cache.store(path, value)
        logger.trace(f"{domain.value} cached for {path}: {value!r:.60}")
        return value

    def submit(self, domain: EnrichmentDomain, path: str) -> Optional[asyncio.Task]:
        """Schedule ``enrich`` unless ``path`` is cached or already in flight."""
        if not path or path in self.caches[domain]:
            return None

        in_flight = self._in_flight[domain]
        if path in in_flight:
            return None
        in_flight.add(path)

        task = asyncio.create_task(self.enrich(domain, path))
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            in_flight.discard(path)

        task.add_done_callback(_done)
        return task

    def analyze_queue(
        self, domain: EnrichmentDomain, queue: Iterable[str]
    ) -> list[asyncio.Task]:
        tasks = []
        for path in self.caches[domain].missing(queue):
            task = self.submit(domain, path)
            if task is not None:
                tasks.append(task)

        if tasks:
            logger.debug(f"Submitted {len(tasks)} {domain.value} analyses")
        return tasks

    def analyze_queue_for_bpm(self, queue: Iterable[str]) -> list[asyncio.Task]:
        """Submit tempo analysis for every queued track without a cached BPM."""
        return self.analyze_queue(EnrichmentDomain.TEMPO, queue)

    def analyze_queue_for_covers(self, queue: Iterable[str]) -> list[asyncio.Task]:
        return self.analyze_queue(EnrichmentDomain.ARTWORK, queue)

    async def get_cover_art(self, path: str) -> Optional[str]:
        """Cached artwork for ``path``, extracting it first if needed."""
        cover = self.caches[EnrichmentDomain.ARTWORK].get(path)
        if cover is not None:
            return cover
        return await self.enrich(EnrichmentDomain.ARTWORK, path)

    def get_bpm(self, path: str) -> Optional[int]:
        return self.caches[EnrichmentDomain.TEMPO].get(path)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every submitted task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
