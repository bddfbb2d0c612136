import time
from paddock.adapters.camera.web_capture import decode_data_url
from paddock.orchestrator.contracts import ScanRequest, ScanOutcome, CaptureResult
from paddock.orchestrator import errors
from paddock.services.models import PendingScanResult
from paddock.services.pending_store import now_ms

class ScanOrchestrator:
    def __init__(self, capture, analysis, enricher, pending_store, status_store, clock=now_ms):
        self.capture = capture
        self.analysis = analysis
        self.enricher = enricher
        self.pending = pending_store
        self.status = status_store
        self._clock = clock

    async def run_scan(self, req: ScanRequest) -> ScanOutcome:
        """
        acquire (camera | gallery | web upload) → analysis → save pending
        → enrich photos → save enriched → return.
        Acquisition and analysis failures come back as error codes; enrichment
        and persistence never fail the scan.
        """
        if self.status.busy:
            return ScanOutcome(ok=False, duration_ms=0, error_code=errors.ERR_BUSY)

        self.status.set_busy(True)
        t0 = time.time()
        shot: CaptureResult | None = None
        try:
            self.status.log(f"scan: start source={req.source} type={req.detected_type} persist={req.persist}")

            # 1) acquire
            shot, error_code = await self._acquire(req)
            if shot is None:
                return self._fail(t0, error_code)
            captured_at = self._clock()
            self.status.last_backend = shot.backend
            self.status.log(f"scan: captured {len(shot.image_data)} bytes ({shot.format}, {shot.backend})")

            # 2) analysis (external, slow, may fail)
            self.status.log("scan: analysis.analyze")
            records = await self.analysis.analyze(shot, req.video)
            self.status.log(f"scan: analysis returned {len(records)} records")

            # 3) keep the raw outcome in case we get killed while enriching
            if req.persist:
                self._persist(shot, records, req, captured_at)

            # 4) enrich with reference photos
            enriched = await self.enricher.enrich(records)

            # 5) overwrite with the enriched outcome
            if req.persist:
                self._persist(shot, enriched, req, captured_at)

            dt = int((time.time() - t0) * 1000)
            self.status.last_error = None
            self.status.last_result_count = len(enriched)
            self.status.log(f"scan: done records={len(enriched)} dt={dt}ms")
            return ScanOutcome(ok=True, duration_ms=dt, backend=shot.backend, results=enriched)

        except TimeoutError:
            self.status.log("scan: analysis timeout")
            return self._fail(t0, errors.ERR_TIMEOUT, shot)
        except Exception as e:
            self.status.log(f"scan: analysis error {type(e).__name__}: {e}")
            return self._fail(t0, errors.ERR_ANALYSIS_FAILED, shot)
        finally:
            self.status.set_busy(False)

    async def _acquire(self, req: ScanRequest) -> tuple[CaptureResult | None, str | None]:
        if req.source == "web":
            try:
                return decode_data_url(req.image or ""), None
            except ValueError as e:
                self.status.log(f"scan: web image rejected: {e}")
                return None, errors.ERR_BAD_IMAGE

        if not self.capture.is_available():
            self.status.log("scan: native capture unavailable, fall back to web upload")
            return None, errors.ERR_NATIVE_UNAVAILABLE

        if req.source == "gallery":
            shot = await self.capture.pick_from_gallery()
            return shot, None if shot else errors.ERR_NO_IMAGE

        # a denied permission ends the flow here: no photo call without a fresh request
        if not await self.capture.check_permissions():
            return None, errors.ERR_PERMISSION_DENIED
        shot = await self.capture.take_photo()
        return shot, None if shot else errors.ERR_NO_IMAGE

    def _persist(self, shot: CaptureResult, records, req: ScanRequest, captured_at: int):
        self.pending.save(PendingScanResult(
            captured_image=shot.data_url,
            analysis_results=[r.to_wire() for r in records],
            detected_type=req.detected_type,
            captured_at_epoch_ms=captured_at,
        ))

    def _fail(self, t0: float, error_code: str, shot: CaptureResult | None = None) -> ScanOutcome:
        dt = int((time.time() - t0) * 1000)
        self.status.last_error = error_code
        self.status.log(f"scan: failed {error_code} dt={dt}ms")
        return ScanOutcome(ok=False, duration_ms=dt, error_code=error_code,
                           backend=shot.backend if shot else None)
