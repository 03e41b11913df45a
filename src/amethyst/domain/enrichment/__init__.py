"""Enrichment domain - background tempo and artwork computation.

This domain handles:
- Per-domain result caches (tempo BPM, artwork data URIs)
- Admission control bounding simultaneous analyses per domain
- Batch triggers that analyze every uncached track in the queue
"""

from .admission import AdmissionController, EnrichmentDomain
from .cache import ResultCache
from .pipeline import EnrichmentPipeline, analyze_tempo, fetch_artwork

__all__ = [
    "AdmissionController",
    "EnrichmentDomain",
    "ResultCache",
    "EnrichmentPipeline",
    "analyze_tempo",
    "fetch_artwork",
]
