"""
HTTP adapter for a hosted photo-lookup function.

Contract:
  Request:  POST <PHOTO_LOOKUP_URL>  {"brand": "...", "model": "...", "year": "..."}
  Response: {"photos": [url, ...], "source": "...", "count": n}   (or {"error": "...", "photos": []})
"""
import os

import httpx

from paddock.adapters.photos.base import PhotoLookup
from paddock.services.models import PhotoLookupResponse


class HttpPhotoLookup(PhotoLookup):
    def __init__(self, status_store, url: str | None = None, timeout: float = 15.0,
                 client: httpx.AsyncClient | None = None):
        self.status = status_store
        self.url = url or os.getenv("PHOTO_LOOKUP_URL", "http://127.0.0.1:9100/fetch-car-photos")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def lookup(self, brand: str, model: str, year: str | None = None) -> PhotoLookupResponse:
        self.status.log(f"http_photos: POST {self.url} {brand} {model} {year or ''}")
        resp = await self._client.post(self.url, json={"brand": brand, "model": model, "year": year})
        resp.raise_for_status()
        return PhotoLookupResponse.model_validate(resp.json())

    async def aclose(self):
        await self._client.aclose()
