import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from portrait_core.main import app
from portrait_core.settings import settings

client = TestClient(app)


def _png(rgb, size=(40, 40)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, rgb).save(out, format="PNG")
    return out.getvalue()


def _decode(content: bytes) -> np.ndarray:
    return np.array(Image.open(io.BytesIO(content)).convert("RGBA"))


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_segment_uniform_image_is_transparent():
    resp = client.post("/segment", files={"image": ("white.png", _png((255, 255, 255)), "image/png")})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.headers["x-foreground-ratio"] == "0.0000"
    assert (_decode(resp.content)[:, :, 3] == 0).all()


def test_segment_error_policy_maps_to_422(monkeypatch):
    monkeypatch.setattr(settings, "empty_mask_policy", "error")
    resp = client.post("/segment", files={"image": ("white.png", _png((255, 255, 255)), "image/png")})
    assert resp.status_code == 422


def test_segment_rejects_garbage():
    resp = client.post("/segment", files={"image": ("x.png", b"not an image", "image/png")})
    assert resp.status_code == 400


def test_upload_size_limit(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 0)
    resp = client.post("/segment", files={"image": ("white.png", _png((255, 255, 255)), "image/png")})
    assert resp.status_code == 413


def test_analyze():
    resp = client.post("/analyze", files={"image": ("skin.png", _png((220, 180, 150), size=(100, 200)), "image/png")})
    assert resp.status_code == 200
    body = resp.json()
    assert body["face_shape"] == "long"
    assert body["skin_tone"] == "warm"
    assert body["skin_undertone"] == "pink"
    assert body["confidence"] == pytest.approx(0.8)
    assert set(body["ratios"]) == {"aspect", "jaw_to_forehead", "cheekbone_to_jaw", "cheekbone_to_forehead"}


def test_face_shape_endpoint():
    payload = {
        "face_width": 100,
        "face_height": 160,
        "jawline_width": 85,
        "forehead_width": 95,
        "cheekbone_width": 90,
    }
    resp = client.post("/face-shape", json=payload)
    assert resp.status_code == 200
    assert resp.json()["label"] == "long"
    assert resp.json()["confidence"] == pytest.approx(0.85)


def test_face_shape_rejects_zero_width():
    payload = {
        "face_width": 0,
        "face_height": 160,
        "jawline_width": 85,
        "forehead_width": 95,
        "cheekbone_width": 90,
    }
    assert client.post("/face-shape", json=payload).status_code == 422


def test_recolor_hair():
    resp = client.post(
        "/recolor-hair",
        params={"color": "#ff0000"},
        files={"image": ("hair.png", _png((60, 40, 30), size=(20, 20)), "image/png")},
    )
    assert resp.status_code == 200
    pixels = _decode(resp.content)
    assert tuple(pixels[5, 5]) == (90, 0, 0, 255)
    assert tuple(pixels[15, 5]) == (60, 40, 30, 255)


def test_recolor_hair_rejects_bad_color():
    resp = client.post(
        "/recolor-hair",
        params={"color": "red"},
        files={"image": ("hair.png", _png((60, 40, 30), size=(20, 20)), "image/png")},
    )
    assert resp.status_code == 400
