import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv
from paddock.services.models import (
    ScanRequestIn, ScanResponse, PendingResponse, StatusResponse,
    DetectionOut, DetectionBoxOut, FrameRequest, PermissionsResponse,
    PhotoLookupRequest, PhotoLookupResponse,
)
from paddock.services.status_store import StatusStore
from paddock.services.pending_store import PendingResultStore, FileSlot
from paddock.orchestrator.contracts import ScanRequest
from paddock.orchestrator.capture import CaptureBackendSelector
from paddock.orchestrator.detection_loop import LiveDetectionLoop
from paddock.orchestrator.enrichment import EnrichmentResolver
from paddock.orchestrator.state_machine import ScanOrchestrator
from paddock.adapters.camera.web_capture import decode_data_url
from paddock.adapters.photos.wikimedia_photos import WikimediaPhotoLookup

load_dotenv(dotenv_path="paddock/.env", override=False)

status = StatusStore()

# Capture backend: CAPTURE_BACKEND = web | native | mock  (default: web, no native capability)
capture_backend = os.getenv("CAPTURE_BACKEND", "web").lower()
if capture_backend == "native":
    from paddock.adapters.camera.cv2_camera import CV2NativeCamera
    native = CV2NativeCamera(status)
elif capture_backend == "mock":
    from paddock.adapters.camera.mock_camera import MockNativeCamera
    native = MockNativeCamera(status)
else:
    native = None
capture = CaptureBackendSelector(native, status)
status.log(f"capture backend: {type(native).__name__ if native else 'web'}")

# Analysis collaborator: ANALYSIS_ADAPTER = http | mock  (default: http)
_analysis_adapter = os.getenv("ANALYSIS_ADAPTER", "http").lower()
if _analysis_adapter == "mock":
    from paddock.adapters.analysis.mock_analysis import MockAnalysis
    analysis = MockAnalysis(status)
else:
    from paddock.adapters.analysis.http_analysis import HttpAnalysis
    analysis = HttpAnalysis(status)
status.log(f"analysis adapter: {type(analysis).__name__}")

# Photo lookup: PHOTO_ADAPTER = wikimedia | http | mock  (default: wikimedia)
# /photos always serves the wikimedia lookup; the enricher uses the configured one.
wikimedia = WikimediaPhotoLookup(status)
_photo_adapter = os.getenv("PHOTO_ADAPTER", "wikimedia").lower()
if _photo_adapter == "http":
    from paddock.adapters.photos.http_photos import HttpPhotoLookup
    photos = HttpPhotoLookup(status)
elif _photo_adapter == "mock":
    from paddock.adapters.photos.mock_photos import MockPhotoLookup
    photos = MockPhotoLookup(status)
else:
    photos = wikimedia
status.log(f"photo adapter: {type(photos).__name__}")
enricher = EnrichmentResolver(photos, status)

# Detection: DETECTOR_ADAPTER = coco_ssd | mock, DETECTION_SOURCE = frames | camera
if os.getenv("DETECTION_SOURCE", "frames").lower() == "camera":
    from paddock.adapters.vision.video_sources import CV2VideoSource
    video = CV2VideoSource(status)
else:
    from paddock.adapters.vision.video_sources import FrameSlot
    video = FrameSlot(status)
if os.getenv("DETECTOR_ADAPTER", "coco_ssd").lower() == "mock":
    from paddock.adapters.vision.mock_vision import mock_loader
    detection = LiveDetectionLoop(video, status, load_model=mock_loader())
else:
    detection = LiveDetectionLoop(video, status)
status.log(f"detection source: {type(video).__name__}")

pending_store = PendingResultStore(FileSlot(), status)
pending_store.load()

orch = ScanOrchestrator(capture=capture, analysis=analysis, enricher=enricher,
                        pending_store=pending_store, status_store=status)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await detection.aclose()
    await analysis.aclose()
    await photos.aclose()
    if photos is not wikimedia:
        await wikimedia.aclose()


app = FastAPI(title="paddock scanner", lifespan=lifespan)


def _detection_out() -> DetectionOut:
    st = detection.state
    return DetectionOut(
        phase=detection.phase.value,
        detected_count=st.detected_count,
        model_loading=st.model_loading,
        model_ready=st.model_ready,
        detections=[DetectionBoxOut(**vars(b)) for b in st.detections],
    )


@app.get("/status", response_model=StatusResponse)
def get_status():
    return StatusResponse(
        busy=status.busy,
        last_backend=status.last_backend,
        last_error=status.last_error,
        last_result_count=status.last_result_count,
        has_pending=pending_store.has_pending,
        detection=_detection_out(),
        logs=status.logs,
    )


@app.get("/health")
def health():
    checks = {
        "api": True,
        "capture_backend": capture_backend,
        "native_available": capture.is_available(),
        "analysis_adapter": type(analysis).__name__,
        "photo_adapter": type(photos).__name__,
        "detection_source": type(video).__name__,
        "pending_store": str(pending_store.slot.path),
    }
    checks["all_ok"] = checks["api"]
    return checks


@app.get("/capture/permissions", response_model=PermissionsResponse)
async def capture_permissions():
    granted = await capture.check_permissions()
    return PermissionsResponse(native=capture.is_available(), granted=granted)


@app.post("/scan", response_model=ScanResponse)
async def scan(req: ScanRequestIn):
    outcome = await orch.run_scan(ScanRequest(
        source=req.source, image=req.image, video=req.video,
        detected_type=req.detected_type, persist=req.persist,
    ))
    return ScanResponse(
        ok=outcome.ok,
        duration_ms=outcome.duration_ms,
        error_code=outcome.error_code,
        backend=outcome.backend,
        results=[r.to_wire() for r in outcome.results],
    )


@app.get("/pending", response_model=PendingResponse)
def get_pending():
    return PendingResponse(has_pending=pending_store.has_pending, result=pending_store.pending)


@app.delete("/pending", response_model=PendingResponse)
def dismiss_pending():
    """User resumed or dismissed the pending result."""
    pending_store.clear()
    return PendingResponse(has_pending=False)


@app.get("/detection", response_model=DetectionOut)
def get_detection():
    return _detection_out()


@app.post("/detection/enable", response_model=DetectionOut)
async def detection_enable():
    detection.enable()
    return _detection_out()


@app.post("/detection/disable", response_model=DetectionOut)
async def detection_disable():
    detection.disable()
    return _detection_out()


@app.post("/detection/frame")
def detection_frame(req: FrameRequest):
    """Browser preview pushes its current frame (only with DETECTION_SOURCE=frames)."""
    if not hasattr(video, "push"):
        return {"ok": False, "error": "detection source does not accept frames"}
    try:
        shot = decode_data_url(req.image)
    except ValueError as e:
        return {"ok": False, "error": str(e)}
    return {"ok": video.push(shot.image_data)}


@app.post("/photos", response_model=PhotoLookupResponse)
async def fetch_car_photos(req: PhotoLookupRequest):
    """Photo-lookup function: {brand, model, year?} → {photos, source, count, error?}."""
    try:
        return await wikimedia.lookup(req.brand, req.model, req.year)
    except Exception as e:
        status.log(f"photos: error {type(e).__name__}: {e}")
        return PhotoLookupResponse(error=str(e))
