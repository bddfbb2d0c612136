"""
HTTP adapter for the hosted scan-analysis function.

Contract:
  Request:  POST <ANALYSIS_URL>  {"image": "data:image/jpeg;base64,...", "video": "..."?}
  Response: {"results": [record, ...]}, {"items": [record, ...]} or a bare
            list of records, each record carrying at least {"realCar": {"brand", "model", "year"}}
"""
import os

import httpx

from paddock.adapters.analysis.base import AnalysisAdapter
from paddock.services.models import AnalysisRecord


class HttpAnalysis(AnalysisAdapter):
    def __init__(self, status_store, url: str | None = None, timeout: float | None = None,
                 client: httpx.AsyncClient | None = None):
        self.status = status_store
        self.url = url or os.getenv("ANALYSIS_URL", "http://127.0.0.1:9100/analyze-scan")
        timeout = timeout if timeout is not None else float(os.getenv("ANALYSIS_TIMEOUT", "60"))
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def analyze(self, capture, video: str | None = None) -> list[AnalysisRecord]:
        payload = {"image": capture.data_url}
        if video:
            payload["video"] = video
        self.status.log(f"http_analysis: POST {self.url} ({len(capture.image_data)} bytes)")
        try:
            resp = await self._client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"analysis timed out: {e}") from e
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, dict):
            key = next((k for k in ("results", "items") if k in data), None)
            if key is None:
                self.status.log(f"http_analysis: no results or items in response (keys: {sorted(data)})")
            records = data[key] if key else []
        else:
            records = data
        if not isinstance(records, list):
            raise RuntimeError(f"analysis returned {type(records).__name__}, expected a list")
        self.status.log(f"http_analysis: {len(records)} records")
        return [AnalysisRecord.model_validate(r) for r in records]

    async def aclose(self):
        await self._client.aclose()
