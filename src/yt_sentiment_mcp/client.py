"""Gemini client handle used by the comment-analysis map and reduce phases."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from .config import ServerConfig, get_config
from .errors import EmptyResponseError, InvalidInputError

logger = logging.getLogger(__name__)

# Comments are analyzed verbatim, including abusive ones.
_SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


def first_text(response: types.GenerateContentResponse) -> str:
    """Return the text of the first part of the first candidate.

    Thinking parts are skipped; they are never user-visible output.

    Raises:
        EmptyResponseError: No candidates, no parts, or a non-text first part.
    """
    if not response.candidates:
        raise EmptyResponseError("received empty response from Gemini (no candidates)")
    content = response.candidates[0].content
    parts = [p for p in (content.parts if content else None) or [] if not getattr(p, "thought", False)]
    if not parts:
        raise EmptyResponseError("received empty response from Gemini (no parts)")
    if parts[0].text is None:
        raise EmptyResponseError("Gemini response part is not text")
    return parts[0].text


class GeminiClient:
    """Explicitly constructed Gemini handle (one ``genai.Client`` per instance).

    Safe for concurrent ``generate`` calls; each call is an independent
    request on the SDK's async transport.
    """

    def __init__(self, api_key: str, model: str, temperature: float = 1.0) -> None:
        if not api_key:
            raise InvalidInputError("No Gemini API key — set GEMINI_API_KEY")
        self.model = model
        self._client = genai.Client(api_key=api_key)
        self._config = types.GenerateContentConfig(
            temperature=temperature,
            safety_settings=_SAFETY_SETTINGS,
        )
        logger.info("Created Gemini client for %s (key …%s)", model, api_key[-4:])

    @classmethod
    def from_config(cls, cfg: ServerConfig | None = None) -> GeminiClient:
        cfg = cfg or get_config()
        return cls(cfg.gemini_api_key, cfg.gemini_model, cfg.gemini_temperature)

    async def generate(self, prompt: str) -> types.GenerateContentResponse:
        """Issue one generate_content request; transport errors propagate."""
        return await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._config,
        )

    async def aclose(self) -> None:
        """Shut down the underlying SDK client."""
        try:
            await self._client.aio.aclose()
        except Exception:
            logger.debug("Gemini async client close failed", exc_info=True)
        try:
            self._client.close()
        except Exception:
            logger.debug("Gemini client close failed", exc_info=True)
