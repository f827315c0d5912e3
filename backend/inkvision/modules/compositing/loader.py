# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Image Asset Loader
Turns an image source into a ready-to-draw BitmapHandle and manages the
two named bitmap slots (background photo, foreground design).

Sources:
  bytes             raw encoded image (uploads)
  "data:..." str    self-contained data URI (uploads, generated designs)
  "http(s)://..."   remote image, fetched with httpx
  Path / other str  local file

Superseded loads: every load() takes a fresh request token for its slot.
When the decode resolves, the result is applied only if its token is still
the newest for that slot; otherwise it is dropped without touching the slot.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Union
from urllib.parse import urlsplit

import httpx
import numpy as np

from inkvision.api.middleware.error_handler import DecodeError
from inkvision.utils.image_utils import (
    bytes_to_bgra,
    data_source_id,
    freeze,
    is_data_uri,
    parse_data_uri,
    to_bgra,
)
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

ImageSource = Union[bytes, bytearray, memoryview, str, Path]


class Slot(str, Enum):
    BACKGROUND = "background"
    FOREGROUND = "foreground"


@dataclass(frozen=True)
class BitmapHandle:
    """
    A decoded image. Pixels are a read-only BGRA uint8 array, so a handle
    can be shared with an in-flight render without copying.
    origin_clean is False for remote images the host may not read back.
    """
    source_id: str
    pixels: np.ndarray = field(repr=False, compare=False)
    origin_clean: bool = True

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def from_array(
        cls,
        pixels: np.ndarray,
        source_id: str = "array",
        origin_clean: bool = True,
    ) -> "BitmapHandle":
        """Wrap an in-memory array (any OpenCV layout) as a handle."""
        if pixels.size and not (pixels.ndim == 3 and pixels.shape[2] == 4):
            pixels = to_bgra(pixels)
        return cls(source_id=source_id, pixels=freeze(pixels), origin_clean=origin_clean)


# ─── Decoding ────────────────────────────────────────────────────────────────

class ImageLoader:
    """
    Fetches and decodes image sources. Stateless apart from its HTTP client;
    slot bookkeeping lives in BitmapSlots.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        trusted_origins: Iterable[str] = (),
        enforce_cross_origin_taint: bool = True,
        fetch_timeout_s: Optional[float] = None,
    ) -> None:
        self._client = http_client
        self._trusted = {o.rstrip("/").lower() for o in trusted_origins}
        self._enforce_taint = enforce_cross_origin_taint
        self._timeout = fetch_timeout_s

    async def load(self, source: ImageSource) -> BitmapHandle:
        """
        Decode source into a BitmapHandle.

        Raises:
            DecodeError: if the bytes cannot be obtained or decoded.
            TypeError:   for unsupported source types.
        """
        data, source_id, origin_clean = await self._read(source)
        try:
            pixels = await asyncio.to_thread(bytes_to_bgra, data)
        except ValueError as e:
            log.warning("decode_failed", source_id=source_id, error=str(e))
            raise DecodeError(source_id) from e

        handle = BitmapHandle(
            source_id=source_id,
            pixels=freeze(pixels),
            origin_clean=origin_clean,
        )
        log.debug(
            "decode_complete",
            source_id=source_id,
            width=handle.width,
            height=handle.height,
            origin_clean=origin_clean,
        )
        return handle

    async def _read(self, source: ImageSource) -> tuple[bytes, str, bool]:
        if isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
            return data, data_source_id(data), True

        if isinstance(source, str):
            if is_data_uri(source):
                try:
                    media_type, data = parse_data_uri(source)
                except ValueError as e:
                    raise DecodeError("data:<malformed>", f"is not a valid data URI ({e})") from e
                return data, data_source_id(data, media_type), True
            try:
                scheme = urlsplit(source).scheme.lower()
            except ValueError as e:
                raise DecodeError(source, f"is not a valid URL ({e})") from e
            if scheme in ("http", "https"):
                return await self._fetch(source)
            source = Path(source)

        if isinstance(source, Path):
            try:
                data = await asyncio.to_thread(source.read_bytes)
            except OSError as e:
                raise DecodeError(str(source), f"could not be read ({e.strerror or e})") from e
            return data, str(source), True

        raise TypeError(f"Unsupported image source type: {type(source).__name__}")

    async def _fetch(self, url: str) -> tuple[bytes, str, bool]:
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, follow_redirects=True, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.InvalidURL as e:
            log.warning("remote_fetch_failed", url=url, error=str(e))
            raise DecodeError(url, f"is not a valid URL ({e})") from e
        except httpx.HTTPError as e:
            log.warning("remote_fetch_failed", url=url, error=str(e))
            raise DecodeError(url, f"could not be fetched ({e})") from e

        return response.content, url, self._is_origin_clean(response)

    def _is_origin_clean(self, response: httpx.Response) -> bool:
        """
        A remote image may be read back only if its origin is trusted or the
        server opted in with Access-Control-Allow-Origin.
        """
        if not self._enforce_taint:
            return True
        final = response.url
        origin = f"{final.scheme}://{final.netloc.decode('ascii')}".lower()
        if origin in self._trusted:
            return True
        return "access-control-allow-origin" in response.headers


# ─── Slots ───────────────────────────────────────────────────────────────────

SlotListener = Callable[[Slot, Optional[BitmapHandle]], None]


@dataclass(frozen=True)
class SlotSnapshot:
    """Consistent view of both slots, taken at the start of a render."""
    background: Optional[BitmapHandle]
    foreground: Optional[BitmapHandle]


class BitmapSlots:
    """
    Owns the background and foreground slots and their request tokens.
    Only load() and clear() mutate a slot; everyone else reads snapshots.
    """

    def __init__(self, loader: ImageLoader) -> None:
        self._loader = loader
        self._handles: dict[Slot, Optional[BitmapHandle]] = {s: None for s in Slot}
        self._tokens: dict[Slot, int] = {s: 0 for s in Slot}
        self._listeners: list[SlotListener] = []

    @property
    def background(self) -> Optional[BitmapHandle]:
        return self._handles[Slot.BACKGROUND]

    @property
    def foreground(self) -> Optional[BitmapHandle]:
        return self._handles[Slot.FOREGROUND]

    def get(self, slot: Slot) -> Optional[BitmapHandle]:
        return self._handles[Slot(slot)]

    def token(self, slot: Slot) -> int:
        return self._tokens[Slot(slot)]

    def snapshot(self) -> SlotSnapshot:
        return SlotSnapshot(
            background=self._handles[Slot.BACKGROUND],
            foreground=self._handles[Slot.FOREGROUND],
        )

    def subscribe(self, listener: SlotListener) -> Callable[[], None]:
        """Register a completion listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def load(self, slot: Slot, source: ImageSource) -> Optional[BitmapHandle]:
        """
        Load source into slot.

        Returns the new handle, or None if a newer load() or clear() for the
        same slot superseded this one while it was decoding.

        Raises:
            DecodeError: if this (still current) load fails. The slot keeps
                         its previous handle.
        """
        slot = Slot(slot)
        self._tokens[slot] += 1
        token = self._tokens[slot]
        log.debug("slot_load_start", slot=slot.value, token=token)

        try:
            handle = await self._loader.load(source)
        except DecodeError as exc:
            if token != self._tokens[slot]:
                log.debug(
                    "stale_decode_failure_ignored",
                    slot=slot.value,
                    token=token,
                    source_id=exc.source_id,
                )
                return None
            log.warning(
                "slot_load_failed",
                slot=slot.value,
                token=token,
                source_id=exc.source_id,
            )
            raise

        if token != self._tokens[slot]:
            log.debug(
                "stale_decode_ignored",
                slot=slot.value,
                token=token,
                current_token=self._tokens[slot],
            )
            return None

        self._handles[slot] = handle
        log.info(
            "slot_loaded",
            slot=slot.value,
            token=token,
            source_id=handle.source_id,
            width=handle.width,
            height=handle.height,
        )
        self._notify(slot, handle)
        return handle

    def clear(self, slot: Slot) -> None:
        """Empty slot and cancel any in-flight load for it."""
        slot = Slot(slot)
        self._tokens[slot] += 1
        had_handle = self._handles[slot] is not None
        self._handles[slot] = None
        log.debug("slot_cleared", slot=slot.value, token=self._tokens[slot])
        if had_handle:
            self._notify(slot, None)

    def _notify(self, slot: Slot, handle: Optional[BitmapHandle]) -> None:
        for listener in list(self._listeners):
            listener(slot, handle)
