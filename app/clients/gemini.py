"""Client wrapper for asking Google Gemini for structured document findings."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Sequence

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPICallError, NotFound

from app.core.config import GeminiSettings

# Tried after the configured model, in order, when a model name is unknown.
_TEXT_FALLBACKS: tuple[str, ...] = ("gemini-1.5-pro", "gemini-1.5-flash", "gemini-pro")
_VISION_FALLBACKS: tuple[str, ...] = ("gemini-1.5-flash", "gemini-1.5-pro")

_JSON_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
_JSON_CONFIG = {"response_mime_type": "application/json"}

logger = logging.getLogger(__name__)

PromptPart = str | dict[str, Any]


class GeminiModelError(RuntimeError):
    """Raised when Gemini rejects, times out, or cannot serve a request."""


class GeminiClient:
    """Send document prompts to Gemini and decode the JSON it returns."""

    def __init__(self, settings: GeminiSettings) -> None:
        self._settings = settings
        genai.configure(api_key=settings.api_key)

    async def generate_json(
        self,
        parts: Sequence[PromptPart],
        *,
        has_media: bool = False,
    ) -> Any:
        """Return the decoded JSON reply for ``parts``.

        Inline media parts (``{"mime_type": ..., "data": ...}``) route the call
        to the vision model. Replies that are not JSON come back as
        ``{"raw": <text>}``.
        """
        if has_media:
            models = candidate_models(self._settings.vision_model_name, _VISION_FALLBACKS)
            setting = "GEMINI_VISION_MODEL_NAME"
        else:
            models = candidate_models(self._settings.model_name, _TEXT_FALLBACKS)
            setting = "GEMINI_MODEL_NAME"

        timeout = self._settings.request_timeout_seconds
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._generate, models, list(parts), setting),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise GeminiModelError(f"Gemini request timed out after {timeout:.0f}s.") from exc
        return parse_json_reply(text)

    def _generate(self, models: list[str], parts: list[PromptPart], setting: str) -> str:
        for attempt, model_name in enumerate(models, start=1):
            model = genai.GenerativeModel(model_name)
            try:
                response = model.generate_content(
                    parts,
                    generation_config=_JSON_CONFIG,
                    safety_settings=[],
                )
                return response.text or ""
            except NotFound:  # pragma: no cover - network call
                logger.warning(
                    "Gemini model %s unavailable (%d/%d), trying the next one",
                    model_name,
                    attempt,
                    len(models),
                )
            except GoogleAPICallError as exc:  # pragma: no cover - network call
                raise GeminiModelError(f"Gemini call failed: {exc.message}") from exc
            except ValueError as exc:  # pragma: no cover - blocked or empty candidate
                raise GeminiModelError(f"Gemini returned no usable text: {exc}") from exc

        configured = models[0] if models else "unset"
        raise GeminiModelError(
            f"No Gemini model could serve the request; check {setting} "
            f"(currently {configured!r})."
        )


def candidate_models(configured: str | None, fallbacks: Sequence[str]) -> list[str]:
    """Configured model first, then the fallbacks, without blanks or repeats."""
    ordered: list[str] = []
    for name in (configured, *fallbacks):
        cleaned = (name or "").strip()
        if cleaned and cleaned not in ordered:
            ordered.append(cleaned)
    return ordered


def parse_json_reply(text: str) -> Any:
    text = text.strip()
    if not text:
        return {}
    fenced = _JSON_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return {"raw": text}


__all__ = ["GeminiClient", "GeminiModelError", "candidate_models", "parse_json_reply"]
