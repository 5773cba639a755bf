"""Reference source selection.

An HTTP URL wins over a file path when both are configured.
"""

from __future__ import annotations

from foodtrack.config import TrackerConfig
from foodtrack.domain.ports import ReferenceSource
from foodtrack.infrastructure.reference.sources import FileReferenceSource, HttpReferenceSource
from foodtrack.infrastructure.reference.store import NutritionReferenceStore


def create_reference_source(config: TrackerConfig) -> ReferenceSource:
    """Source for ``config.reference_url`` or ``config.reference_path``."""
    if config.reference_url:
        return HttpReferenceSource(config.reference_url, timeout_seconds=config.reference_timeout_s)
    return FileReferenceSource(config.reference_path)


def create_reference_store(config: TrackerConfig) -> NutritionReferenceStore:
    """Reference store over the configured source."""
    return NutritionReferenceStore(create_reference_source(config))
