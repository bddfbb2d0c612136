from paddock.services.models import PhotoLookupResponse


class PhotoLookup:
    async def lookup(self, brand: str, model: str, year: str | None = None) -> PhotoLookupResponse:
        """Reference photos for a real car. May raise on transport errors."""
        raise NotImplementedError

    async def aclose(self):
        pass
