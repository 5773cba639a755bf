"""
Nutrition reference sources.

Fetch the reference JSON document (food name -> per-100g macros) over
HTTP or from a local file.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional, Union

import httpx
import structlog

from foodtrack.domain.shared.errors import ReferenceDataUnavailable

logger = structlog.get_logger(__name__)


class HttpReferenceSource:
    """Reference document served over HTTP(S)."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize source.

        Args:
            url: Document URL
            timeout_seconds: Request timeout
            client: Optional pre-configured client (caller owns it)
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def fetch(self) -> Any:
        """Fetch and decode the document.

        Raises:
            ReferenceDataUnavailable: Network error, non-2xx status or bad JSON
        """
        try:
            if self._client is not None:
                response = await self._client.get(self.url, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(self.url)
        except httpx.HTTPError as e:
            raise ReferenceDataUnavailable(
                f"Reference source unreachable: {e}",
                context={"url": self.url, "original_error": type(e).__name__},
            ) from e

        if not response.is_success:
            raise ReferenceDataUnavailable(
                f"Failed to load nutrition reference: {response.status_code}",
                context={"url": self.url, "status": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise ReferenceDataUnavailable(
                "Reference document is not valid JSON",
                context={"url": self.url},
            ) from e


class FileReferenceSource:
    """Reference document stored on the local filesystem."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read(self) -> Any:
        with self.path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    async def fetch(self) -> Any:
        """Read and decode the document off the event loop.

        Raises:
            ReferenceDataUnavailable: Missing file or bad JSON
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._read)
        except OSError as e:
            raise ReferenceDataUnavailable(
                f"Reference file unreadable: {e}",
                context={"path": str(self.path)},
            ) from e
        except ValueError as e:
            raise ReferenceDataUnavailable(
                "Reference document is not valid JSON",
                context={"path": str(self.path)},
            ) from e
