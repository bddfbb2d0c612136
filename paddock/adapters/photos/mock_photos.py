from paddock.adapters.photos.base import PhotoLookup
from paddock.services.models import PhotoLookupResponse


class MockPhotoLookup(PhotoLookup):
    """Answers from a {(brand, model): [urls]} table; raises for entries mapped to an exception."""

    def __init__(self, status_store, table: dict | None = None, default: list[str] | None = None):
        self.status = status_store
        self.table = table or {}
        self.default = default if default is not None else [
            "https://upload.wikimedia.org/mock/front.jpg",
            "https://upload.wikimedia.org/mock/side.jpg",
            "https://upload.wikimedia.org/mock/rear.jpg",
        ]
        self.calls: list[tuple] = []

    async def lookup(self, brand: str, model: str, year: str | None = None) -> PhotoLookupResponse:
        self.calls.append((brand, model, year))
        found = self.table.get((brand, model), self.default)
        if isinstance(found, Exception):
            raise found
        self.status.log(f"mock_photos: {brand} {model} -> {len(found)}")
        return PhotoLookupResponse(photos=list(found), source="mock", count=len(found))
