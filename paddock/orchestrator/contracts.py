import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Literal, List, Any

BackendName = Literal["native", "web"]
ScanSource = Literal["camera", "gallery", "web"]
DetectedType = Literal["collectible", "real_car"]

@dataclass(frozen=True)
class CaptureResult:
    image_data: bytes          # encoded image bytes (jpeg, png, ...)
    format: str
    backend: BackendName

    @property
    def data_url(self) -> str:
        b64 = base64.b64encode(self.image_data).decode("ascii")
        return f"data:image/{self.format};base64,{b64}"

@dataclass
class Prediction:
    class_name: str
    score: float               # 0..1
    bbox: tuple                # (x, y, w, h) in frame pixels

@dataclass
class DetectionBox:
    x: float                   # percentage 0-100
    y: float
    width: float
    height: float
    score: float
    label: str

class LoopPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"

@dataclass
class DetectionState:
    detected_count: int = 0
    model_loading: bool = False
    model_ready: bool = False
    detections: List[DetectionBox] = field(default_factory=list)

    def reset(self):
        self.detected_count = 0
        self.model_loading = False
        self.model_ready = False
        self.detections = []

@dataclass
class ScanRequest:
    source: ScanSource = "camera"
    image: Optional[str] = None          # data URL, required for source="web"
    video: Optional[str] = None
    detected_type: DetectedType = "collectible"
    persist: bool = True

@dataclass
class ScanOutcome:
    ok: bool
    duration_ms: int
    error_code: Optional[str] = None
    backend: Optional[BackendName] = None
    results: List[Any] = field(default_factory=list)   # enriched AnalysisRecord list
