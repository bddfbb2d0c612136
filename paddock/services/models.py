from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional, Any

# ===== Analysis records (opaque beyond realCar / realCarPhotos) =====

class RealCar(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=(), coerce_numbers_to_str=True)

    brand: str
    model: str
    year: Optional[str] = None

class AnalysisRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    real_car: RealCar = Field(alias="realCar")
    real_car_photos: Optional[list[Any]] = Field(default=None, alias="realCarPhotos")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

# ===== Pending-result persistence =====

class PendingScanResult(BaseModel):
    captured_image: str                      # data URL of the captured still
    analysis_results: list[dict[str, Any]]
    detected_type: Literal["collectible", "real_car"]
    captured_at_epoch_ms: int

class StoredScannerRecord(BaseModel):
    result: PendingScanResult
    stored_at_epoch_ms: int

# ===== Photo lookup function =====

class PhotoLookupRequest(BaseModel):
    brand: str = ""
    model: str = ""
    year: Optional[str] = None

    model_config = ConfigDict(protected_namespaces=())

class PhotoLookupResponse(BaseModel):
    photos: list[str] = []
    source: str = ""
    count: int = 0
    error: Optional[str] = None

# ===== HTTP surface =====

class ScanRequestIn(BaseModel):
    source: Literal["camera", "gallery", "web"] = "camera"
    image: Optional[str] = None      # data URL (or bare base64 JPEG) for source="web"
    video: Optional[str] = None
    detected_type: Literal["collectible", "real_car"] = "collectible"
    persist: bool = True

class ScanResponse(BaseModel):
    ok: bool
    duration_ms: int
    error_code: Optional[str] = None
    backend: Optional[Literal["native", "web"]] = None
    results: list[dict[str, Any]] = []

class PendingResponse(BaseModel):
    has_pending: bool
    result: Optional[PendingScanResult] = None

class DetectionBoxOut(BaseModel):
    x: float
    y: float
    width: float
    height: float
    score: float
    label: str

class DetectionOut(BaseModel):
    phase: Literal["idle", "loading", "ready"]
    detected_count: int
    model_loading: bool
    model_ready: bool
    detections: list[DetectionBoxOut] = []

class FrameRequest(BaseModel):
    image: str  # base64 JPEG (data URL accepted)

class PermissionsResponse(BaseModel):
    native: bool
    granted: bool

class StatusResponse(BaseModel):
    busy: bool
    last_backend: Optional[str] = None
    last_error: Optional[str] = None
    last_result_count: Optional[int] = None
    has_pending: bool = False
    detection: Optional[DetectionOut] = None
    logs: list[str]
