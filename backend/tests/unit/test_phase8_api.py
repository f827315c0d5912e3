# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 8 — HTTP API tests.
Full request flow through the FastAPI app: sessions, uploads, state
controls, pointer drags, preview / export and design generation.
The design generator is a local stub; no API key or network required.
"""

import io
import os
from contextlib import asynccontextmanager

import cv2
import numpy as np
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from PIL import Image


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _png_bytes(h=100, w=100, color=(200, 200, 200, 255)) -> bytes:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:] = color
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


class _StubGenerator:
    async def generate(self, prompt, style):
        return _png_bytes(h=32, w=32, color=(0, 0, 0, 255))


@asynccontextmanager
async def lifespan_client(generator=None):
    os.environ["LOG_LEVEL"] = "WARNING"
    os.environ["GEMINI_API_KEY"] = ""

    from inkvision.config import get_settings
    get_settings.cache_clear()

    from inkvision.dependencies import set_generator
    set_generator(generator)

    from inkvision.main import create_app
    test_app = create_app()

    try:
        async with LifespanManager(test_app) as manager:
            transport = ASGITransport(app=manager.app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
    finally:
        set_generator(None)


async def _new_session(c) -> str:
    resp = await c.post("/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


async def _upload_background(c, sid, data=None, content_type="image/png"):
    files = {"file": ("photo.png", data if data is not None else _png_bytes(), content_type)}
    return await c.post(f"/sessions/{sid}/background", files=files)


async def _set_design(c, sid):
    from inkvision.utils.image_utils import to_data_uri

    source = to_data_uri(_png_bytes(h=20, w=20, color=(0, 0, 0, 255)))
    resp = await c.post(f"/sessions/{sid}/foreground", json={"source": source})
    assert resp.status_code == 200
    return resp


# ─── Sessions ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_session_lifecycle():
    async with lifespan_client() as c:
        sid = await _new_session(c)

        resp = await c.get(f"/sessions/{sid}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["session_id"] == sid
        assert data["background"] is None
        assert data["exportable"] is False
        assert data["state"]["blendMode"] == "multiply"

        assert (await c.delete(f"/sessions/{sid}")).status_code == 204
        missing = await c.get(f"/sessions/{sid}")
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_unknown_session():
    async with lifespan_client() as c:
        resp = await c.delete("/sessions/nope")
    assert resp.status_code == 404


# ─── Background upload ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_upload_background():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await _upload_background(c, sid, _png_bytes(h=90, w=160))

    assert resp.status_code == 200
    data = resp.json()
    assert data["background"]["width"] == 160
    assert data["background"]["height"] == 90
    assert data["exportable"] is True
    assert data["render_sequence"] is not None


@pytest.mark.asyncio
async def test_upload_rejects_content_type():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await _upload_background(c, sid, b"hello", content_type="text/plain")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "IMAGE_VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_upload_undecodable_image():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await _upload_background(c, sid, b"\x89PNG corrupted")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "DECODE_ERROR"


@pytest.mark.asyncio
async def test_foreground_malformed_url_is_decode_error():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.post(f"/sessions/{sid}/foreground", json={"source": "http://[::1/x"})
        data = (await c.get(f"/sessions/{sid}")).json()
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "DECODE_ERROR"
    assert data["foreground"] is None


@pytest.mark.asyncio
async def test_failed_upload_keeps_previous_photo():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid, _png_bytes(h=50, w=70))
        await _upload_background(c, sid, b"\x89PNG corrupted")
        data = (await c.get(f"/sessions/{sid}")).json()
    assert data["background"]["width"] == 70


@pytest.mark.asyncio
async def test_clear_background():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid)
        resp = await c.delete(f"/sessions/{sid}/background")
        assert resp.status_code == 200
        assert resp.json()["background"] is None

        export = await c.get(f"/sessions/{sid}/export")
    assert export.status_code == 409
    assert export.json()["error"]["code"] == "EXPORT_ERROR"


# ─── Foreground ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_foreground_requires_exactly_one_field():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        neither = await c.post(f"/sessions/{sid}/foreground", json={})
        both = await c.post(
            f"/sessions/{sid}/foreground",
            json={"design_id": "default-1", "source": "data:image/png;base64,AA=="},
        )
    assert neither.status_code == 422
    assert both.status_code == 422


@pytest.mark.asyncio
async def test_foreground_unknown_design():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.post(f"/sessions/{sid}/foreground", json={"design_id": "missing"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "DESIGN_NOT_FOUND"


@pytest.mark.asyncio
async def test_foreground_from_data_uri_and_clear():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await _set_design(c, sid)
        assert resp.json()["foreground"]["width"] == 20

        cleared = await c.delete(f"/sessions/{sid}/foreground")
    assert cleared.json()["foreground"] is None


# ─── State controls ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_patch_state_clamps_and_accepts_camel_case():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.patch(
            f"/sessions/{sid}/state",
            json={"offsetX": 12.5, "scale": 99, "hue": 370, "blend_mode": "screen"},
        )
    assert resp.status_code == 200
    data = resp.json()
    assert data["offsetX"] == 12.5
    assert data["scale"] == 5.0
    assert data["hue"] == pytest.approx(10.0)
    assert data["blendMode"] == "screen"
    assert data["opacity"] == 0.8


@pytest.mark.asyncio
async def test_patch_state_rejects_unknown_field():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.patch(f"/sessions/{sid}/state", json={"skew": 3})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_patch_state_rejects_unknown_blend_mode():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.patch(f"/sessions/{sid}/state", json={"blendMode": "difference"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_reset_state():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await c.patch(f"/sessions/{sid}/state", json={"offset_x": 40, "rotation": 30})

        partial = await c.post(f"/sessions/{sid}/state/reset", json={"fields": ["offset_x"]})
        assert partial.json()["offsetX"] == 0.0
        assert partial.json()["rotation"] == 30.0

        full = await c.post(f"/sessions/{sid}/state/reset")
        assert full.json()["rotation"] == 0.0

        bad = await c.post(f"/sessions/{sid}/state/reset", json={"fields": ["nope"]})
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_scale_step():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.post(f"/sessions/{sid}/scale", json={"delta": 0.5})
    assert resp.json()["scale"] == pytest.approx(1.5)


@pytest.mark.asyncio
async def test_pointer_drag_with_display_scaling():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid, _png_bytes(h=100, w=100))
        await _set_design(c, sid)

        display = await c.put(f"/sessions/{sid}/display", json={"width": 50, "height": 50})
        assert display.status_code == 204

        await c.post(f"/sessions/{sid}/pointer", json={"type": "down", "x": 0, "y": 0})
        moved = await c.post(f"/sessions/{sid}/pointer", json={"type": "move", "x": 5, "y": 5})
        await c.post(f"/sessions/{sid}/pointer", json={"type": "up"})

    assert moved.status_code == 200
    assert moved.json()["offsetX"] == pytest.approx(10.0)
    assert moved.json()["offsetY"] == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_pointer_without_design_does_nothing():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await c.post(f"/sessions/{sid}/pointer", json={"type": "down", "x": 0, "y": 0})
        moved = await c.post(f"/sessions/{sid}/pointer", json={"type": "move", "x": 30, "y": 30})
    assert moved.json()["offsetX"] == 0.0


@pytest.mark.asyncio
async def test_display_rejects_zero_size():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.put(f"/sessions/{sid}/display", json={"width": 0, "height": 50})
    assert resp.status_code == 422


# ─── Preview / Export ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_preview_before_background():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.get(f"/sessions/{sid}/preview")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_preview_png():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid, _png_bytes(h=60, w=80))
        resp = await c.get(f"/sessions/{sid}/preview")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(resp.content)) as img:
        assert img.size == (80, 60)


@pytest.mark.asyncio
async def test_export_before_background():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.get(f"/sessions/{sid}/export")
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "EXPORT_ERROR"


@pytest.mark.asyncio
async def test_export_download():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid, _png_bytes(h=100, w=100))
        await _set_design(c, sid)
        await c.patch(f"/sessions/{sid}/state", json={"rotation": 45, "scale": 2})
        resp = await c.get(f"/sessions/{sid}/export")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith("attachment;")
    assert 'filename="inkvision-' in disposition
    with Image.open(io.BytesIO(resp.content)) as img:
        assert img.size == (100, 100)


@pytest.mark.asyncio
async def test_export_data_uri():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        await _upload_background(c, sid, _png_bytes(h=30, w=40))
        resp = await c.get(f"/sessions/{sid}/export/data-uri")

    assert resp.status_code == 200
    data = resp.json()
    assert data["data_uri"].startswith("data:image/png;base64,")
    assert (data["width"], data["height"]) == (40, 30)
    assert data["filename"].endswith(".png")


# ─── Designs ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_designs():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.get(f"/sessions/{sid}/designs")

    data = resp.json()
    assert [d["id"] for d in data["designs"]] == ["default-1", "default-2", "default-3"]
    assert data["is_generating"] is False


@pytest.mark.asyncio
async def test_generate_design():
    async with lifespan_client(generator=_StubGenerator()) as c:
        sid = await _new_session(c)
        resp = await c.post(
            f"/sessions/{sid}/designs/generate",
            json={"prompt": "crescent moon", "style": "Dotwork"},
        )
        assert resp.status_code == 201
        design = resp.json()
        assert design["style"] == "Dotwork"
        assert design["url"].startswith("data:image/png;base64,")

        listed = (await c.get(f"/sessions/{sid}/designs")).json()["designs"]
        session = (await c.get(f"/sessions/{sid}")).json()

    assert listed[0]["id"] == design["id"]
    assert len(listed) == 4
    assert session["foreground"]["width"] == 32


@pytest.mark.asyncio
async def test_generate_blank_prompt():
    async with lifespan_client(generator=_StubGenerator()) as c:
        sid = await _new_session(c)
        resp = await c.post(f"/sessions/{sid}/designs/generate", json={"prompt": "   "})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "PROMPT_VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_generate_without_generator():
    async with lifespan_client() as c:
        sid = await _new_session(c)
        resp = await c.post(f"/sessions/{sid}/designs/generate", json={"prompt": "anchor"})
    assert resp.status_code == 502
    error = resp.json()["error"]
    assert error["code"] == "GENERATION_FAILED"
    assert error["retryable"] is False


@pytest.mark.asyncio
async def test_generate_unknown_style():
    async with lifespan_client(generator=_StubGenerator()) as c:
        sid = await _new_session(c)
        resp = await c.post(
            f"/sessions/{sid}/designs/generate",
            json={"prompt": "anchor", "style": "Baroque"},
        )
    assert resp.status_code == 422
