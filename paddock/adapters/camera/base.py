from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Optional

PermissionState = Literal["granted", "denied", "prompt"]

class CaptureCancelled(Exception):
    """The user backed out of the capture / picker."""

@dataclass(frozen=True)
class PhotoRequest:
    quality: int = 90
    result_type: Literal["base64"] = "base64"
    source: Literal["camera", "photos"] = "camera"
    correct_orientation: bool = True
    width: Optional[int] = None     # bounding box ceiling, None = unconstrained
    height: Optional[int] = None

@dataclass(frozen=True)
class Photo:
    base64_string: Optional[str]
    format: Optional[str] = None

class NativeCamera(ABC):
    @abstractmethod
    def get_photo(self, request: PhotoRequest) -> Photo:
        """Acquire one image. Raises on permission / hardware errors or CaptureCancelled."""
        ...

    @abstractmethod
    def check_permissions(self) -> PermissionState:
        ...

    @abstractmethod
    def request_permissions(self) -> PermissionState:
        """One interactive request. Must not re-prompt once denied."""
        ...
