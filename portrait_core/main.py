from __future__ import annotations

import io
import logging
from dataclasses import asdict

import numpy as np
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response
from PIL import Image, ImageColor, ImageOps
from pydantic import BaseModel, Field

from portrait_core.analysis import analyze
from portrait_core.errors import InvalidImage, NoForegroundDetected
from portrait_core.face_shape import classify_face_shape, face_ratios
from portrait_core.models import FaceMeasurement, PixelBuffer
from portrait_core.segment import recolor_hair, segment_with_mask
from portrait_core.settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Portrait Core", version="0.1.0")


class FaceMeasurementIn(BaseModel):
    face_width: float = Field(..., gt=0)
    face_height: float = Field(..., gt=0)
    jawline_width: float = Field(..., gt=0)
    forehead_width: float = Field(..., gt=0)
    cheekbone_width: float = Field(..., gt=0)
    chin_width: float = Field(0.0, ge=0)


def _read_upload_bytes(upload: UploadFile) -> bytes:
    data = upload.file.read()
    max_bytes = settings.max_upload_mb * 1024 * 1024
    if len(data) > max_bytes:
        raise HTTPException(status_code=413, detail=f"File too large (max {settings.max_upload_mb}MB)")
    return data


def _open_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)
        img.load()
        return img
    except Exception as exc:
        raise HTTPException(status_code=400, detail=f"Invalid image: {exc}") from exc


def _pil_to_buffer(img: Image.Image) -> PixelBuffer:
    rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    try:
        return PixelBuffer(rgba)
    except InvalidImage as exc:
        raise HTTPException(status_code=400, detail=f"Invalid image: {exc}") from exc


def _load_buffer(upload: UploadFile) -> PixelBuffer:
    return _pil_to_buffer(_open_image(_read_upload_bytes(upload)))


def _encode_png(buffer: PixelBuffer) -> bytes:
    out = io.BytesIO()
    Image.fromarray(buffer.pixels).save(out, format="PNG", optimize=False)
    return out.getvalue()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/segment")
def segment(image: UploadFile = File(...)) -> Response:
    buffer = _load_buffer(image)
    try:
        result = segment_with_mask(buffer)
    except NoForegroundDetected as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info("segmented %dx%d image, foreground ratio %.3f", buffer.width, buffer.height, result.foreground_ratio)

    headers = {
        "X-Foreground-Ratio": f"{result.foreground_ratio:.4f}",
        "X-Empty-Mask-Policy": settings.empty_mask_policy,
    }
    return Response(content=_encode_png(result.buffer), media_type="image/png", headers=headers)


@app.post("/analyze")
def analyze_image(image: UploadFile = File(...)) -> dict:
    buffer = _load_buffer(image)
    result = analyze(buffer)
    return {
        "face_shape": result.face_shape.value,
        "skin_tone": result.skin_tone.value,
        "skin_undertone": result.skin_undertone.value,
        "confidence": result.confidence,
        "ratios": asdict(result.ratios),
    }


@app.post("/face-shape")
def face_shape(measurement: FaceMeasurementIn) -> dict:
    m = FaceMeasurement(**measurement.model_dump())
    result = classify_face_shape(m)
    return {
        "label": result.label.value,
        "confidence": result.confidence,
        "ratios": asdict(face_ratios(m)),
    }


@app.post("/recolor-hair")
def recolor(color: str | None = None, image: UploadFile = File(...)) -> Response:
    color = color or settings.default_hair_color
    if not color.startswith("#") or len(color) != 7:
        raise HTTPException(status_code=400, detail=f"Color must be #rrggbb (got {color})")
    try:
        ImageColor.getrgb(color)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid color: {color}") from exc

    buffer = _load_buffer(image)
    out = recolor_hair(buffer, color)
    return Response(content=_encode_png(out), media_type="image/png")
