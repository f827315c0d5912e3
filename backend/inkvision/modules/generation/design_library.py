# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Design Library
Per-session history of tattoo designs, newest first.
New designs come from a DesignGenerator; at most one generation runs at a
time per library. A failed generation leaves the history untouched.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from inkvision.api.middleware.error_handler import (
    GenerationBusyError,
    GenerationFailure,
    PromptValidationError,
)
from inkvision.models.design import DEFAULT_STYLE, TattooDesign, TattooStyle
from inkvision.modules.generation.generator import DesignGenerator
from inkvision.utils.image_utils import (
    guess_image_media_type,
    is_valid_image_bytes,
    to_data_uri,
)
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

SAMPLE_DESIGNS: tuple[TattooDesign, ...] = (
    TattooDesign(
        id="default-1",
        url="https://picsum.photos/seed/tattoo1/400/400",
        prompt="Minimalist mountain range",
        style=TattooStyle.FINE_LINE,
    ),
    TattooDesign(
        id="default-2",
        url="https://picsum.photos/seed/tattoo2/400/400",
        prompt="Geometric wolf",
        style=TattooStyle.GEOMETRIC,
    ),
    TattooDesign(
        id="default-3",
        url="https://picsum.photos/seed/tattoo3/400/400",
        prompt="Traditional swallow",
        style=TattooStyle.TRADITIONAL,
    ),
)


class DesignLibrary:

    def __init__(
        self,
        generator: Optional[DesignGenerator] = None,
        seed_samples: bool = True,
    ) -> None:
        self._generator = generator
        self._designs: list[TattooDesign] = list(SAMPLE_DESIGNS) if seed_samples else []
        self._generating = False

    @property
    def designs(self) -> list[TattooDesign]:
        return list(self._designs)

    @property
    def is_generating(self) -> bool:
        return self._generating

    def get(self, design_id: str) -> Optional[TattooDesign]:
        for design in self._designs:
            if design.id == design_id:
                return design
        return None

    async def generate(
        self,
        prompt: str,
        style: TattooStyle = DEFAULT_STYLE,
    ) -> TattooDesign:
        """
        Generate a design and prepend it to the history.

        Raises:
            PromptValidationError: prompt is blank.
            GenerationBusyError:   another generation is still running.
            GenerationFailure:     no generator, or it produced no usable image.
        """
        if not prompt or not prompt.strip():
            raise PromptValidationError("Describe the design you want to generate.")
        if self._generating:
            raise GenerationBusyError("A design is already being generated.")
        if self._generator is None:
            raise GenerationFailure("No design generator is configured.", retryable=False)

        style = TattooStyle(style)
        self._generating = True
        try:
            data = await self._generator.generate(prompt, style)
            if not await asyncio.to_thread(is_valid_image_bytes, data):
                raise GenerationFailure("Generator returned data that is not an image.")
        finally:
            self._generating = False

        design = TattooDesign(
            id=self._next_id(),
            url=to_data_uri(data, guess_image_media_type(data) or "image/png"),
            prompt=prompt,
            style=style,
        )
        self._designs.insert(0, design)
        log.info("design_added", design_id=design.id, style=style.value,
                 history_size=len(self._designs))
        return design

    def _next_id(self) -> str:
        # unix ms; bumped on the rare same-millisecond collision
        candidate = int(time.time() * 1000)
        while self.get(str(candidate)) is not None:
            candidate += 1
        return str(candidate)
