"""
Nutrition reference store.

Lazily loads the reference table once and caches it for the lifetime of
the store. Concurrent first callers share a single in-flight load. Any
load failure installs the embedded fallback table, which is then cached
too: a source that becomes reachable later is not retried.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

import structlog

from foodtrack.domain.nutrition.models import NutritionData, NutritionReferenceTable
from foodtrack.domain.ports import ReferenceSource
from foodtrack.domain.shared.errors import ReferenceDataUnavailable

logger = structlog.get_logger(__name__)

# Per 100g.
FALLBACK_REFERENCE: Mapping[str, NutritionData] = {
    "apple": NutritionData(calories=52, protein=0.3, carbs=14, fat=0.2),
    "banana": NutritionData(calories=89, protein=1.1, carbs=23, fat=0.3),
    "bread": NutritionData(calories=265, protein=9, carbs=49, fat=3.2),
    "chicken breast": NutritionData(calories=165, protein=31, carbs=0, fat=3.6),
    "rice": NutritionData(calories=130, protein=2.7, carbs=28, fat=0.3),
}


def fallback_table() -> NutritionReferenceTable:
    """Embedded minimal table used when the source is unavailable."""
    return NutritionReferenceTable(FALLBACK_REFERENCE, is_fallback=True)


def parse_reference_document(document: Any) -> NutritionReferenceTable:
    """
    Build a reference table from a decoded JSON document.

    Entries that are not objects with non-negative numeric calories,
    protein, carbs and fat are skipped. Extra fields are ignored.

    Raises:
        ReferenceDataUnavailable: Document is not an object or has no
            usable entry
    """
    if not isinstance(document, Mapping):
        raise ReferenceDataUnavailable(
            "Invalid nutrition reference format",
            context={"document_type": type(document).__name__},
        )

    entries: dict[str, NutritionData] = {}
    skipped: list[str] = []

    for name, values in document.items():
        if not isinstance(name, str) or not name.strip() or not isinstance(values, Mapping):
            skipped.append(str(name))
            continue
        fields = {key: values.get(key) for key in ("calories", "protein", "carbs", "fat")}
        if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in fields.values()):
            skipped.append(name)
            continue
        try:
            entries[name] = NutritionData(**fields)
        except ValueError:
            skipped.append(name)

    if skipped:
        logger.warning("Skipped malformed reference entries", count=len(skipped), names=skipped[:10])

    if not entries:
        raise ReferenceDataUnavailable("Nutrition reference has no usable entries")

    return NutritionReferenceTable(entries)


class NutritionReferenceStore:
    """
    Lazily loaded, cached nutrition reference table.

    Owned by the caller (one per tracker context) rather than a process
    global, so tests can build fresh stores.

    Example:
        >>> store = NutritionReferenceStore(FileReferenceSource("nutrition.json"))
        >>> table = await store.load()
        >>> assert "apple" in table
    """

    def __init__(self, source: ReferenceSource) -> None:
        """Initialize store.

        Args:
            source: Where the reference document comes from
        """
        self.source = source
        self._table: Optional[NutritionReferenceTable] = None
        self._pending: Optional[asyncio.Task[NutritionReferenceTable]] = None

    @property
    def table(self) -> Optional[NutritionReferenceTable]:
        """Cached table, None until the first load completes."""
        return self._table

    def is_loaded(self) -> bool:
        """True once a table (loaded or fallback) is cached."""
        return self._table is not None

    async def load(self) -> NutritionReferenceTable:
        """
        Return the reference table, loading it on first call.

        Never raises for source failures: the fallback table is returned
        instead.
        """
        if self._table is not None:
            return self._table

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())

        # Shield so a cancelled caller does not cancel the shared load.
        return await asyncio.shield(self._pending)

    async def _load(self) -> NutritionReferenceTable:
        logger.info("Loading nutrition reference", source=type(self.source).__name__)
        try:
            document = await self.source.fetch()
            table = parse_reference_document(document)
            logger.info("Nutrition reference loaded", foods=len(table))
        except ReferenceDataUnavailable as e:
            logger.warning("Using fallback nutrition reference", reason=e.message, code=e.code)
            table = fallback_table()
        except Exception as e:
            logger.warning(
                "Using fallback nutrition reference",
                reason=str(e),
                error_type=type(e).__name__,
            )
            table = fallback_table()

        self._table = table
        return table
