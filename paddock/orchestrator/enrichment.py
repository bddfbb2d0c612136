"""
Attach real-car reference photos to analysis records.

Validate-or-refetch: a record whose first photo already looks like an
absolute http(s) URL keeps its photos; any other record gets whatever the
photo lookup returns, possibly nothing. Records are resolved concurrently,
the output keeps the input order, and no failure escapes enrich().
"""
import asyncio
from urllib.parse import urlsplit

from paddock.services.models import AnalysisRecord


def looks_like_url(value) -> bool:
    if not isinstance(value, str):
        return False
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class EnrichmentResolver:
    def __init__(self, lookup, status_store):
        self.lookup = lookup
        self.status = status_store

    async def fetch_photos(self, brand: str, model: str, year: str | None = None) -> list[str]:
        try:
            self.status.log(f"enrich: fetching photos for {brand} {model} {year or ''}")
            resp = await self.lookup.lookup(brand, model, year)
        except Exception as e:
            self.status.log(f"enrich: photo lookup failed: {type(e).__name__}: {e}")
            return []
        if resp.error:
            self.status.log(f"enrich: photo lookup error: {resp.error}")
            return []
        if not resp.photos:
            self.status.log("enrich: no photos found")
            return []
        self.status.log(f"enrich: found {len(resp.photos)} photos")
        return list(resp.photos)

    async def enrich(self, records: list[AnalysisRecord]) -> list[AnalysisRecord]:
        settled = await asyncio.gather(*(self._enrich_one(r) for r in records), return_exceptions=True)
        out = []
        for record, result in zip(records, settled):
            if isinstance(result, BaseException):
                self.status.log(f"enrich: record failed: {type(result).__name__}: {result}")
                result = record.model_copy(update={"real_car_photos": []}, deep=True)
            out.append(result)
        return out

    async def _enrich_one(self, record: AnalysisRecord) -> AnalysisRecord:
        photos = record.real_car_photos
        if photos and looks_like_url(photos[0]):
            return record.model_copy(deep=True)
        car = record.real_car
        fetched = await self.fetch_photos(car.brand, car.model, car.year)
        return record.model_copy(update={"real_car_photos": fetched}, deep=True)
