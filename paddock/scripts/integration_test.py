"""
Integration test script — hits all endpoints and verifies responses.

Usage:
    # Mock collaborators:
    CAPTURE_BACKEND=mock ANALYSIS_ADAPTER=mock PHOTO_ADAPTER=mock DETECTOR_ADAPTER=mock \
        uvicorn paddock.services.api:app
    python paddock/scripts/integration_test.py

    # HTTP collaborators (run fake_collaborators.py first):
    python paddock/scripts/fake_collaborators.py  (terminal 1)
    CAPTURE_BACKEND=mock ANALYSIS_ADAPTER=http PHOTO_ADAPTER=http uvicorn paddock.services.api:app  (terminal 2)
    python paddock/scripts/integration_test.py  (terminal 3)
"""

import sys
import time
import httpx

BASE = "http://localhost:8000"
TIMEOUT = 60.0
# 1x1 black JPEG, for the browser-upload path
JPEG_B64 = (
    "/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8UHRofHh0aHBwgJC4nICIsIxwcKDcpLDAxNDQ0Hyc5PTgyPC4zNDL/"
    "wAALCAABAAEBAREA/8QAFAABAAAAAAAAAAAAAAAAAAAACf/EABQQAQAAAAAAAAAAAAAAAAAAAAD/2gAIAQEAAD8AKp//2Q=="
)
passed = 0
failed = 0


def test(name: str, method: str, path: str, body: dict | None = None, checks: dict | None = None) -> dict:
    global passed, failed
    url = f"{BASE}{path}"
    checks = checks or {}
    try:
        if method == "GET":
            r = httpx.get(url, timeout=TIMEOUT)
        elif method == "DELETE":
            r = httpx.delete(url, timeout=TIMEOUT)
        else:
            r = httpx.post(url, json=body or {}, timeout=TIMEOUT)

        if r.status_code != 200:
            print(f"  FAIL  {name} — HTTP {r.status_code}")
            failed += 1
            return {}

        data = r.json()
        for key, expected in checks.items():
            actual = data.get(key)
            if actual != expected:
                print(f"  FAIL  {name} — {key}: expected {expected!r}, got {actual!r}")
                failed += 1
                return data

        print(f"  OK    {name}")
        passed += 1
        return data

    except httpx.ConnectError:
        print(f"  FAIL  {name} — connection refused (is the server running?)")
        failed += 1
    except Exception as e:
        print(f"  FAIL  {name} — {type(e).__name__}: {e}")
        failed += 1
    return {}


def main():
    print(f"\nIntegration tests against {BASE}\n")
    print("--- Health & Status ---")
    test("GET /health", "GET", "/health", None, {"all_ok": True})
    test("GET /status", "GET", "/status")
    test("GET /capture/permissions", "GET", "/capture/permissions")

    print("\n--- Scan ---")
    test("POST /scan (web upload)", "POST", "/scan",
         {"source": "web", "image": f"data:image/jpeg;base64,{JPEG_B64}"},
         {"ok": True, "backend": "web"})

    test("POST /scan (bad upload)", "POST", "/scan",
         {"source": "web", "image": "not base64!"},
         {"ok": False, "error_code": "BAD_IMAGE"})

    test("POST /scan (camera)", "POST", "/scan", {"source": "camera"})

    print("\n--- Pending ---")
    test("GET /pending", "GET", "/pending", None, {"has_pending": True})
    test("DELETE /pending", "DELETE", "/pending", None, {"has_pending": False})
    test("GET /pending (cleared)", "GET", "/pending", None, {"has_pending": False})

    print("\n--- Detection ---")
    test("POST /detection/enable", "POST", "/detection/enable")
    test("POST /detection/frame", "POST", "/detection/frame", {"image": JPEG_B64}, {"ok": True})
    time.sleep(2)
    test("GET /detection", "GET", "/detection")
    test("POST /detection/disable", "POST", "/detection/disable", None,
         {"phase": "idle", "detected_count": 0})

    print("\n--- Photos ---")
    test("POST /photos (missing model)", "POST", "/photos",
         {"brand": "Ferrari"},
         {"error": "Brand and model are required"})

    print("\n--- Final Status ---")
    test("GET /status (final)", "GET", "/status", None, {"busy": False})

    # Summary
    total = passed + failed
    print(f"\n{'='*40}")
    print(f"  {passed}/{total} passed, {failed} failed")
    print(f"{'='*40}\n")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
