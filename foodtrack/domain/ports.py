"""
Domain ports.

Protocols implemented by infrastructure adapters and by the excluded
image classification collaborator.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

MEALS = "meals"
SETTINGS = "settings"


@runtime_checkable
class ReferenceSource(Protocol):
    """
    Source of the nutrition reference document.

    Implementations return the decoded JSON document and raise
    ``ReferenceDataUnavailable`` when it cannot be obtained.

    Example:
        >>> source = HttpReferenceSource("https://example.com/nutrition.json")
        >>> document = await source.fetch()
    """

    async def fetch(self) -> Any:
        """Fetch and decode the reference document."""
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """
    Versioned local key/value storage with two collections.

    Collections:
    - ``meals``: key = meal id, ordered by a secondary timestamp path
    - ``settings``: singleton record under a fixed key

    Records are JSON-compatible dicts. Writes are full overwrites.
    Implementations raise ``StorageUnavailable`` on failure.
    """

    @property
    def schema_version(self) -> int:
        """Schema version after the last successful open (0 before)."""
        ...

    async def open(self) -> None:
        """
        Open and upgrade the store to the current schema.

        Idempotent: re-opening a current store changes nothing.
        """
        ...

    async def close(self) -> None:
        """Release resources."""
        ...

    async def put(self, collection: str, key: str, record: dict[str, Any]) -> None:
        """Upsert ``record`` under ``key`` (last write wins)."""
        ...

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        """Record under ``key`` or None."""
        ...

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        """All records; meals come newest first."""
        ...

    async def delete(self, collection: str, key: str) -> None:
        """Remove ``key``; missing keys are a no-op."""
        ...

    async def clear(self, collection: str) -> None:
        """Remove every record in ``collection``."""
        ...


@runtime_checkable
class ImageClassifier(Protocol):
    """
    Opaque image classification model.

    Returns ranked ``{label, confidence}`` pairs for an image.
    """

    async def classify(self, image: Any) -> Sequence[Any]:
        """Ranked predictions for ``image``."""
        ...
