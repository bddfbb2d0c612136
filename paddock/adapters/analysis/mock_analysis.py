import asyncio

from paddock.adapters.analysis.base import AnalysisAdapter
from paddock.services.models import AnalysisRecord

_SAMPLE = [
    {
        "collectible": {"brand": "Hot Wheels", "scale": "1:64", "origin": "Malaysia"},
        "realCar": {"brand": "Ferrari", "model": "250 GTO", "year": "1962"},
    },
]


class MockAnalysis(AnalysisAdapter):
    def __init__(self, status_store, records: list[dict] | None = None, delay: float = 0.0,
                 error: Exception | None = None):
        self.status = status_store
        self.records = records if records is not None else _SAMPLE
        self.delay = delay
        self.error = error
        self.calls = 0

    async def analyze(self, capture, video: str | None = None) -> list[AnalysisRecord]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.status.log(f"mock_analysis: {len(self.records)} records for {capture.backend} capture")
        return [AnalysisRecord.model_validate(r) for r in self.records]
