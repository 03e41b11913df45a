"""Application context for explicit state passing.

This module provides the PlayerContext dataclass that holds the process-wide
pieces shared by the player and the enrichment tasks (configuration,
persisted settings, host bridge, caches and admission counters), so nothing
is read from ambient globals.
"""

from dataclasses import dataclass
from typing import Dict

from amethyst.core.config import Config
from amethyst.core.settings import SettingsStore
from amethyst.domain.enrichment import AdmissionController, EnrichmentDomain, ResultCache
from amethyst.host import HostBridge


@dataclass
class PlayerContext:
    """Shared state passed to every component.

    Attributes:
        config: Application configuration
        settings: Persisted key-value settings (queue, current path, volume)
        host: Host command bridge for file access, analysis and presence
        caches: Enrichment results per domain
        admission: Per-domain in-flight limits and counters
    """

    config: Config
    settings: SettingsStore
    host: HostBridge
    caches: Dict[EnrichmentDomain, ResultCache]
    admission: AdmissionController

    @classmethod
    def create(
        cls, config: Config, settings: SettingsStore, host: HostBridge
    ) -> "PlayerContext":
        """Create a context with empty caches and limits taken from config."""
        return cls(
            config=config,
            settings=settings,
            host=host,
            caches={
                EnrichmentDomain.TEMPO: ResultCache("tempo"),
                EnrichmentDomain.ARTWORK: ResultCache("artwork"),
            },
            admission=AdmissionController(
                {
                    EnrichmentDomain.TEMPO: config.enrichment.bpm_concurrency,
                    EnrichmentDomain.ARTWORK: config.enrichment.cover_concurrency,
                }
            ),
        )

    @property
    def bpm_cache(self) -> ResultCache:
        return self.caches[EnrichmentDomain.TEMPO]

    @property
    def cover_cache(self) -> ResultCache:
        return self.caches[EnrichmentDomain.ARTWORK]
