"""
Real-car reference photos from Wikimedia Commons (free, no API key).

Search order:
  1. Commons file search for "<brand> <model> <year> car", "<brand> <model>
     automobile", "<brand> <model>" until MAX_PHOTOS thumbnails are found
  2. if fewer than MIN_PHOTOS: images on the best matching English Wikipedia
     article whose file name mentions the brand or the model

Logos, icons and SVGs are skipped. Results are de-duplicated, at most MAX_PHOTOS.
"""
import httpx

from paddock.adapters.photos.base import PhotoLookup
from paddock.services.models import PhotoLookupResponse

COMMONS_API = "https://commons.wikimedia.org/w/api.php"
WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"
THUMB_WIDTH = 800
MAX_PHOTOS = 5
MIN_PHOTOS = 3
_USER_AGENT = "paddock-scanner/0.1 (reference photo lookup)"


def _is_photo(name: str) -> bool:
    return "logo" not in name and "icon" not in name and "svg" not in name


class WikimediaPhotoLookup(PhotoLookup):
    def __init__(self, status_store, timeout: float = 15.0, client: httpx.AsyncClient | None = None):
        self.status = status_store
        self._client = client or httpx.AsyncClient(timeout=timeout, headers={"User-Agent": _USER_AGENT})

    async def lookup(self, brand: str, model: str, year: str | None = None) -> PhotoLookupResponse:
        if not brand or not model:
            return PhotoLookupResponse(error="Brand and model are required")

        self.status.log(f"wikimedia: searching {brand} {model} {year or ''}")
        queries = [
            f"{brand} {model} {year or ''} car",
            f"{brand} {model} automobile",
            f"{brand} {model}",
        ]
        photos: list[str] = []
        for query in queries:
            photos += await self._search_commons(query, MAX_PHOTOS)
            if len(photos) >= MAX_PHOTOS:
                break

        if len(photos) < MIN_PHOTOS:
            photos += await self._search_wikipedia(brand, model, year or "")

        unique = list(dict.fromkeys(photos))[:MAX_PHOTOS]
        self.status.log(f"wikimedia: returning {len(unique)} photos")
        return PhotoLookupResponse(photos=unique, source="wikimedia", count=len(unique))

    async def _get(self, url: str, params: dict) -> dict:
        resp = await self._client.get(url, params={**params, "format": "json", "origin": "*"})
        resp.raise_for_status()
        return resp.json()

    async def _search_commons(self, query: str, limit: int) -> list[str]:
        try:
            data = await self._get(COMMONS_API, {
                "action": "query", "list": "search", "srsearch": query,
                "srnamespace": 6, "srlimit": limit * 2,
            })
            results = data.get("query", {}).get("search", [])
            if not results:
                return []
            titles = "|".join(r["title"] for r in results[: limit * 2])
            info = await self._get(COMMONS_API, {
                "action": "query", "titles": titles, "prop": "imageinfo",
                "iiprop": "url|size", "iiurlwidth": THUMB_WIDTH,
            })
        except (httpx.HTTPError, ValueError, KeyError) as e:
            self.status.log(f"wikimedia: commons search failed: {e}")
            return []

        urls = []
        for page in info.get("query", {}).get("pages", {}).values():
            imageinfo = (page.get("imageinfo") or [{}])[0]
            url = imageinfo.get("thumburl") or imageinfo.get("url")
            if url and _is_photo(url):
                urls.append(url)
            if len(urls) >= limit:
                break
        return urls

    async def _search_wikipedia(self, brand: str, model: str, year: str) -> list[str]:
        for term in (f"{brand} {model}", f"{brand} {model} {year}", f"{brand} {model} car"):
            try:
                data = await self._get(WIKIPEDIA_API, {"action": "query", "list": "search", "srsearch": term})
                results = data.get("query", {}).get("search", [])
                if not results:
                    continue
                pages = await self._get(WIKIPEDIA_API, {
                    "action": "query", "titles": results[0]["title"], "prop": "images",
                })
            except (httpx.HTTPError, ValueError, KeyError) as e:
                self.status.log(f"wikimedia: wikipedia search failed: {e}")
                continue

            names = []
            for page in pages.get("query", {}).get("pages", {}).values():
                for img in page.get("images", []):
                    name = img.get("title", "")
                    lowered = name.lower()
                    if (model.lower() in lowered or brand.lower() in lowered) and _is_photo(name):
                        names.append(name)

            urls = []
            for name in names[:MAX_PHOTOS]:
                try:
                    info = await self._get(COMMONS_API, {
                        "action": "query", "titles": name, "prop": "imageinfo",
                        "iiprop": "url", "iiurlwidth": THUMB_WIDTH,
                    })
                except (httpx.HTTPError, ValueError) as e:
                    self.status.log(f"wikimedia: imageinfo failed for {name}: {e}")
                    continue
                for page in info.get("query", {}).get("pages", {}).values():
                    thumb = (page.get("imageinfo") or [{}])[0].get("thumburl")
                    if thumb:
                        urls.append(thumb)
            if urls:
                self.status.log(f"wikimedia: {len(urls)} images from wikipedia")
                return urls
        return []

    async def aclose(self):
        await self._client.aclose()
