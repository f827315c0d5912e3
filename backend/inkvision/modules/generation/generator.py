# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Design Generator
Turns a text prompt plus a style into raw image bytes.

DesignGenerator is the seam the rest of the app depends on; the Gemini
implementation is the production one. The SDK call is blocking, so it
runs in a worker thread and never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import base64
from abc import ABC, abstractmethod
from typing import Any, Optional

import google.generativeai as genai

from inkvision.api.middleware.error_handler import GenerationFailure
from inkvision.models.design import TattooStyle
from inkvision.modules.generation.style_prompts import build_prompt
from inkvision.utils.logger import get_logger

log = get_logger(__name__)


class DesignGenerator(ABC):

    @abstractmethod
    async def generate(self, prompt: str, style: TattooStyle) -> bytes:
        """
        Produce one design image for prompt in style.

        Raises:
            GenerationFailure: the backing service failed or returned no image.
        """


class GeminiDesignGenerator(DesignGenerator):
    """
    Image generation through google-generativeai.

    Args:
        api_key:    Gemini API key. Configures the SDK globally when given.
        model_name: Image-capable model, e.g. 'gemini-2.5-flash-image'.
        model:      Pre-built model object exposing generate_content().
                    Tests inject a fake here.
    """

    def __init__(
        self,
        api_key: str = "",
        model_name: str = "gemini-2.5-flash-image",
        model: Optional[Any] = None,
    ) -> None:
        if model is None:
            if not api_key:
                raise GenerationFailure(
                    "No Gemini API key is configured.", retryable=False
                )
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name=model_name)
        self._model = model
        self._model_name = model_name

    async def generate(self, prompt: str, style: TattooStyle) -> bytes:
        full_prompt = build_prompt(prompt, style)
        log.info("design_generation_started", model=self._model_name, style=str(style))

        try:
            response = await asyncio.to_thread(
                self._model.generate_content,
                full_prompt,
                generation_config={"candidate_count": 1},
            )
        except Exception as e:
            log.error("design_generation_error", error=str(e))
            raise GenerationFailure(f"Design generation failed: {e}") from e

        data = _extract_image_bytes(response)
        if not data:
            feedback = getattr(response, "prompt_feedback", None)
            reason = getattr(feedback, "block_reason", None) or "no image returned"
            log.warning("design_generation_empty", reason=str(reason))
            raise GenerationFailure(f"Design generation failed: {reason}")

        log.info("design_generation_complete", size_bytes=len(data))
        return data


def _extract_image_bytes(response: Any) -> Optional[bytes]:
    """First inline image part of the first candidate, or None."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline else None
        if not data:
            continue
        if isinstance(data, str):
            return base64.b64decode(data)
        return bytes(data)
    return None
