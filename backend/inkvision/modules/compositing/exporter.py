# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Export
Encodes the latest completed render as a lossless PNG at the photo's
native resolution, ready for direct download.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from inkvision.api.middleware.error_handler import ExportError
from inkvision.utils.image_utils import bgra_to_png_bytes, to_data_uri
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

PNG_MEDIA_TYPE = "image/png"


@dataclass(frozen=True)
class RenderResult:
    """One completed render. origin_clean is False if any input was tainted."""
    pixels: np.ndarray = field(repr=False, compare=False)
    origin_clean: bool
    sequence: int
    rendered_at: datetime

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass(frozen=True)
class EncodedImage:
    data: bytes = field(repr=False)
    width: int
    height: int
    filename: str
    media_type: str = PNG_MEDIA_TYPE

    def to_data_uri(self) -> str:
        return to_data_uri(self.data, self.media_type)


def export_filename(prefix: str, now: Optional[datetime] = None) -> str:
    """e.g. 'inkvision-1760608800000.png' (unix milliseconds)."""
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{int(now.timestamp() * 1000)}.png"


def export_render(
    result: Optional[RenderResult],
    filename_prefix: str = "inkvision",
    now: Optional[datetime] = None,
) -> EncodedImage:
    """
    Encode result as PNG.

    Raises:
        ExportError: if nothing has been rendered yet, or a cross-origin
                     source forbids reading the pixels back.
    """
    if result is None:
        raise ExportError("Nothing to export yet: no render has completed.")
    if not result.origin_clean:
        raise ExportError(
            "The preview uses an image from another site that does not allow "
            "its pixels to be read back. Upload the image directly instead."
        )

    data = bgra_to_png_bytes(result.pixels)
    encoded = EncodedImage(
        data=data,
        width=result.width,
        height=result.height,
        filename=export_filename(filename_prefix, now),
    )
    log.info(
        "export_complete",
        sequence=result.sequence,
        width=encoded.width,
        height=encoded.height,
        size_bytes=len(data),
    )
    return encoded
