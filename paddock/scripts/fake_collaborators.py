"""
Fake hosted collaborators for running the scanner without the real backend.

Serves on port 9100:
  POST /analyze-scan       -> one analysis record with no realCarPhotos (after a short "thinking" delay)
  POST /fetch-car-photos   -> three placeholder photo URLs
  POST /fetch-car-photos?fail=1 -> HTTP 500 with {"error": ..., "photos": []}

Usage:
    python paddock/scripts/fake_collaborators.py
    ANALYSIS_ADAPTER=http PHOTO_ADAPTER=http uvicorn paddock.services.api:app
"""

import asyncio
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="fake-collaborators")


@app.post("/analyze-scan")
async def analyze_scan(request: Request):
    body = await request.json()
    image = body.get("image", "")
    print(f"[analysis] image {len(image)} chars, video={'yes' if body.get('video') else 'no'} — thinking 1.0s ...")
    await asyncio.sleep(1.0)
    return {
        "results": [
            {
                "collectible": {"brand": "Matchbox", "scale": "1:64", "origin": "Thailand"},
                "realCar": {"brand": "Porsche", "model": "911 Turbo", "year": "1976"},
            }
        ]
    }


@app.post("/fetch-car-photos")
async def fetch_car_photos(request: Request, fail: int = 0):
    body = await request.json()
    brand, model = body.get("brand"), body.get("model")
    if not brand or not model:
        return JSONResponse({"error": "Brand and model are required"}, status_code=400)
    if fail:
        print(f"[photos] {brand} {model} — simulated failure")
        return JSONResponse({"error": "simulated failure", "photos": []}, status_code=500)
    slug = f"{brand}_{model}".replace(" ", "_")
    photos = [f"https://upload.wikimedia.org/fake/{slug}_{i}.jpg" for i in range(1, 4)]
    print(f"[photos] {brand} {model} -> {len(photos)}")
    return {"photos": photos, "source": "fake", "count": len(photos)}


if __name__ == "__main__":
    print("Fake collaborators starting on http://localhost:9100")
    uvicorn.run(app, host="0.0.0.0", port=9100)
