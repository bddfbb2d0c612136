class AnalysisAdapter:
    async def analyze(self, capture, video: str | None = None) -> list:
        """Return AnalysisRecord list for one CaptureResult. May be slow; may raise."""
        raise NotImplementedError

    async def aclose(self):
        pass
