"""
GeminiClient: async wrapper around the Google Generative AI SDK, used to
describe what a drive between two places is like in given weather.

Two runtime modes (set via AI_MOCK_MODE env var):
  - MOCK mode (default): returns deterministic canned descriptions.
    Use for tests and local dev without API keys.
  - REAL mode: makes actual Gemini API calls.
    Requires GEMINI_API_KEY to be set.

describe_drive() builds the prompt; generate() is the raw call.
"""

import logging
from enum import Enum
from typing import Any

from travelrisk.core.config import settings

logger = logging.getLogger(__name__)


class GeminiModel(str, Enum):
    PRO = "gemini-1.5-pro"
    FLASH = "gemini-1.5-flash"


# Canned responses for mock mode, keyed by the response_key passed to generate()
_MOCK_RESPONSES: dict[str, str] = {
    "default": (
        "[MOCK] This is a placeholder Gemini response. "
        "Set AI_MOCK_MODE=false and provide GEMINI_API_KEY for real responses."
    ),
    "drive_short": "[MOCK] A steady drive with clear roads and easy conditions most of the way.",
    "drive_long": (
        "[MOCK] The drive starts on quiet local roads before joining the main highway. "
        "Conditions are manageable, though visibility drops in open stretches. "
        "Allow a little extra time and keep a safe distance from other vehicles."
    ),
}

_FALLBACK_DESCRIPTION = "Unable to generate description."


def drive_prompt(from_location: str, to_location: str, weather: str, sentences: int) -> str:
    prompt = (
        f"Describe in {sentences} sentence{'s' if sentences > 1 else ''} what the drive "
        f"between {from_location} and {to_location} is like when the weather is {weather}."
    )
    if sentences == 1:
        prompt += " Don't use more than 20 words."
    return prompt


class GeminiClient:
    """
    Central Gemini interface. Don't instantiate per-request; use the
    module-level `gemini_client` singleton.
    """

    def __init__(self) -> None:
        self.mock_mode = settings.ai_mock_mode

        if not self.mock_mode:
            if not settings.gemini_api_key:
                logger.warning(
                    "GEMINI_API_KEY not set, falling back to mock mode. "
                    "Set AI_MOCK_MODE=true to silence this warning."
                )
                self.mock_mode = True
            else:
                # Lazy import: only pull in the heavy SDK if we're in real mode
                import google.generativeai as genai  # noqa: PLC0415

                genai.configure(api_key=settings.gemini_api_key)
                self._genai = genai

        if self.mock_mode:
            logger.info("GeminiClient initialised in MOCK mode")
        else:
            logger.info("GeminiClient initialised in REAL mode")

    async def generate(
        self,
        prompt: str,
        model: GeminiModel = GeminiModel.FLASH,
        response_key: str = "default",
        **generation_kwargs: Any,
    ) -> str:
        """
        Generate text from a Gemini model.

        Args:
            prompt:             The full prompt string.
            model:              Which Gemini model to use.
            response_key:       Mock response key (ignored in real mode).
            **generation_kwargs: Passed through to GenerativeModel.generate_content_async().

        Raises:
            Exception: Propagates Gemini SDK errors in real mode.
        """
        if self.mock_mode:
            return _MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"])

        try:
            gemini_model = self._genai.GenerativeModel(model.value)
            response = await gemini_model.generate_content_async(prompt, **generation_kwargs)
            return response.text
        except Exception as exc:
            logger.error("Gemini API error (model=%s): %s", model.value, exc)
            raise

    async def describe_drive(
        self,
        from_location: str,
        to_location: str,
        weather: str = "sunny",
        long: bool = False,
    ) -> str:
        """One sentence (short) or three sentences (long) about the drive."""
        prompt = drive_prompt(from_location, to_location, weather, 3 if long else 1)
        text = await self.generate(
            prompt,
            model=GeminiModel.FLASH,
            response_key="drive_long" if long else "drive_short",
            generation_config={"max_output_tokens": 150, "temperature": 0.7},
        )
        return text.strip() or _FALLBACK_DESCRIPTION


# Module-level singleton: import and use this everywhere
gemini_client = GeminiClient()
