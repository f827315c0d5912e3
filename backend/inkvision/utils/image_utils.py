# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Image I/O and Conversion Utilities
Shared helpers used by the loader, compositor and exporter.
All internal processing uses BGRA uint8 numpy arrays (OpenCV channel
order plus a straight alpha channel). Designs generated as PNG keep their
transparency; photos decode fully opaque.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import io
from typing import Optional
from urllib.parse import unquote_to_bytes

import cv2
import numpy as np
from PIL import Image

_JPEG_MAGIC = b"\xff\xd8\xff"
_PNG_MAGIC = b"\x89PNG"


# ─── Data URIs ───────────────────────────────────────────────────────────────

def is_data_uri(source: str) -> bool:
    return source[:5].lower() == "data:"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a data: URI into (media_type, payload bytes).
    Supports both ';base64' and percent-encoded payloads.
    Raises ValueError if the URI is malformed.
    """
    if not is_data_uri(uri):
        raise ValueError("Not a data URI.")
    header, sep, payload = uri[5:].partition(",")
    if not sep:
        raise ValueError("Data URI has no payload separator.")

    params = header.split(";")
    media_type = params[0] or "text/plain"
    if "base64" in (p.strip().lower() for p in params[1:]):
        try:
            return media_type, base64.b64decode(payload, validate=False)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
    return media_type, unquote_to_bytes(payload)


def to_data_uri(data: bytes, media_type: str = "image/png") -> str:
    """Encode bytes as a self-contained base64 data URI."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def guess_image_media_type(data: bytes) -> Optional[str]:
    """Detect JPEG / PNG / WebP / GIF from magic bytes. None if unrecognised."""
    if data[:3] == _JPEG_MAGIC:
        return "image/jpeg"
    if data[:4] == _PNG_MAGIC:
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return None


def data_source_id(data: bytes, media_type: Optional[str] = None) -> str:
    """
    Short stable identifier for inline image data (used in logs and errors).
    Identical bytes always produce the same id.
    """
    digest = hashlib.sha1(data).hexdigest()[:16]
    return f"data:{media_type or 'application/octet-stream'};sha1={digest}"


# ─── Decode / Encode ─────────────────────────────────────────────────────────

def to_bgra(img: np.ndarray) -> np.ndarray:
    """
    Normalise any OpenCV-decoded image to 8-bit BGRA.
    Handles grayscale, grayscale+alpha, BGR, BGRA and 16-bit inputs.
    """
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    if channels == 2:
        # gray + alpha
        bgra = cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2BGRA)
        bgra[:, :, 3] = img[:, :, 1]
        return bgra
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
    return np.ascontiguousarray(img[:, :, :4])


def bytes_to_bgra(data: bytes) -> np.ndarray:
    """
    Decode raw image bytes to a BGRA uint8 numpy array.

    JPEGs are decoded with EXIF orientation applied, so phone photos come
    out upright. Formats OpenCV cannot read (GIF, for one) go through PIL,
    which yields the first frame.

    Raises ValueError if the bytes cannot be decoded as an image.
    """
    if not data:
        raise ValueError("Image data is empty.")
    arr = np.frombuffer(data, dtype=np.uint8)
    # IMREAD_UNCHANGED keeps alpha but ignores EXIF orientation
    flags = cv2.IMREAD_COLOR if data[:3] == _JPEG_MAGIC else cv2.IMREAD_UNCHANGED
    img = cv2.imdecode(arr, flags)
    if img is not None and img.size > 0:
        return to_bgra(img)

    try:
        with Image.open(io.BytesIO(data)) as pil_img:
            return pil_to_bgra(pil_img)
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Could not decode image bytes: {e}") from e


def bgra_to_png_bytes(img: np.ndarray) -> bytes:
    """Encode a BGRA (or BGR) numpy array to PNG bytes (lossless)."""
    success, buf = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


def freeze(img: np.ndarray) -> np.ndarray:
    """Return a C-contiguous, read-only copy of img."""
    frozen = np.array(img, dtype=np.uint8, order="C", copy=True)
    frozen.setflags(write=False)
    return frozen


# ─── PIL Bridge ──────────────────────────────────────────────────────────────

def pil_to_bgra(pil_img: Image.Image) -> np.ndarray:
    """Convert a PIL Image of any mode to a BGRA numpy array."""
    return cv2.cvtColor(np.array(pil_img.convert("RGBA")), cv2.COLOR_RGBA2BGRA)


# ─── Validation ──────────────────────────────────────────────────────────────

def is_valid_image_bytes(data: bytes) -> bool:
    """Return True if bytes can be decoded as an image."""
    try:
        bytes_to_bgra(data)
        return True
    except ValueError:
        return False
