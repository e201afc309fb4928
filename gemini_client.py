"""
gemini_client.py — The Oracle Line
===================================
One configured Gemini model, built once at startup and handed to the
request handlers. Holds the API key, model name and temperature so the
handlers never touch google.generativeai directly.
"""

import os
import logging
import google.generativeai as genai
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger("gemini-gateway")

# ── Configuration ─────────────────────────────────────────────────────────────
GEMINI_API_KEY     = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL       = os.getenv("GEMINI_MODEL", "models/gemini-2.0-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.5"))


class GeminiError(Exception):
    """Base class for failures raised by GeminiClient itself."""


class EmptyResponseError(GeminiError):
    """The model answered but produced no text (blocked or empty candidates)."""


class GeminiClient:
    def __init__(self, api_key: str = None, model_name: str = GEMINI_MODEL,
                 temperature: float = GEMINI_TEMPERATURE):
        self.model_name  = model_name
        self.temperature = temperature
        if not api_key:
            log.warning("GEMINI_API_KEY not set; model calls will fail until it is configured.")
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name,
            generation_config={"temperature": temperature},
        )

    @classmethod
    def from_env(cls) -> "GeminiClient":
        return cls(api_key=GEMINI_API_KEY, model_name=GEMINI_MODEL, temperature=GEMINI_TEMPERATURE)

    async def generate(self, contents) -> str:
        """
        Send a prompt (or a [prompt, inline_part] list) to the model and
        return the generated text. SDK errors propagate to the caller.
        """
        response = await self.model.generate_content_async(contents)
        try:
            text = response.text
        except ValueError as e:
            # .text raises when the candidate was blocked or has no parts
            raise EmptyResponseError(f"Model returned no text: {e}") from e
        if not text:
            raise EmptyResponseError("Model returned no text.")
        return text
