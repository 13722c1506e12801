"""Product photo lookup for outfit items that are not in the user's closet."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, ValidationError

from chronowear_app.errors import ProductLookupError
from tools.http import http_client
from tools.observability import instrument_call

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"


class _PhotoUrls(BaseModel):
    regular: str


class _Photo(BaseModel):
    urls: _PhotoUrls


class _SearchResponse(BaseModel):
    results: List[_Photo] = []


def build_search_query(
    brand: str | None,
    model: str | None,
    item_type: str | None = None,
    color: str | None = None,
) -> str:
    """Join the known product facts into a photo search query."""

    parts = [item_type, color, brand, model, "fashion", "clothing"]
    return " ".join(part.strip() for part in parts if part and part.strip())


class ProductImageLookup(ABC):
    """Finds a representative photo for a branded product."""

    @abstractmethod
    async def find(
        self,
        brand: str,
        model: str,
        *,
        item_type: str | None = None,
        color: str | None = None,
    ) -> Optional[str]:
        """Return an image URL, ``None`` when nothing was found.

        Raises:
            ProductLookupError: when the search backend fails.
        """


class UnsplashProductImageLookup(ProductImageLookup):
    """Search Unsplash for a portrait product photo."""

    def __init__(
        self,
        access_key: str | None = None,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.access_key = access_key
        self.timeout_seconds = timeout_seconds
        self._client = client

    @instrument_call("product_image.find")
    async def find(
        self,
        brand: str,
        model: str,
        *,
        item_type: str | None = None,
        color: str | None = None,
    ) -> Optional[str]:
        if not self.access_key:
            logger.debug("Unsplash access key missing; skipping product image search")
            return None

        query = build_search_query(brand, model, item_type=item_type, color=color)
        params = {"query": query, "per_page": 3, "orientation": "portrait"}
        headers = {"Authorization": f"Client-ID {self.access_key}"}
        async with http_client(self._client, self.timeout_seconds) as client:
            try:
                response = await client.get(UNSPLASH_SEARCH_URL, params=params, headers=headers)
                response.raise_for_status()
                parsed = _SearchResponse.model_validate(response.json())
            except httpx.HTTPError as exc:
                raise ProductLookupError(f"Unsplash search failed: {exc}") from exc
            except (ValidationError, ValueError) as exc:
                raise ProductLookupError("Unsplash returned an unexpected payload") from exc

        if not parsed.results:
            return None
        return parsed.results[0].urls.regular


class MockProductImageLookup(ProductImageLookup):
    """Offline lookup backed by a ``(brand, model) -> url`` mapping."""

    def __init__(self, images: Dict[Tuple[str, str], str] | None = None, error: Exception | None = None) -> None:
        self.images = {(b.lower(), m.lower()): url for (b, m), url in (images or {}).items()}
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    async def find(
        self,
        brand: str,
        model: str,
        *,
        item_type: str | None = None,
        color: str | None = None,
    ) -> Optional[str]:
        self.calls.append((brand, model))
        if self.error is not None:
            raise self.error
        return self.images.get((brand.lower(), model.lower()))


__all__ = [
    "ProductImageLookup",
    "UnsplashProductImageLookup",
    "MockProductImageLookup",
    "build_search_query",
]
