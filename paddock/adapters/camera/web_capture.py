"""
Browser capture backend: the page grabs a still with getUserMedia / <input
type=file> and uploads it as a data URL. Bare base64 is taken as JPEG.
"""
import base64
import binascii
import re

from paddock.orchestrator.contracts import CaptureResult

_DATA_URL = re.compile(r"^data:image/(?P<fmt>[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL)


def decode_data_url(data_url: str) -> CaptureResult:
    """Raises ValueError on anything that is not a non-empty base64 image payload."""
    if not data_url:
        raise ValueError("empty image payload")
    m = _DATA_URL.match(data_url.strip())
    fmt, payload = (m.group("fmt").lower(), m.group("payload")) if m else ("jpeg", data_url.strip())
    try:
        image = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"base64 decode failed: {e}") from e
    if not image:
        raise ValueError("empty image payload")
    return CaptureResult(image_data=image, format=fmt, backend="web")
