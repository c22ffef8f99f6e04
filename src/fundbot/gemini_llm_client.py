"""
Gemini LLM client for async use by the query pipeline.

Behavior:
- Uses the official google-genai SDK (async surface under `client.aio`).
- Exposes: async complete(system_instruction, user_message, max_tokens, temperature) -> str
- Every failure (missing key, transport, quota, timeout, empty reply) is raised
  as CompletionError so callers can choose their own fallback.

Environment:
- GEMINI_API_KEY (or GENAI_API_KEY / GEMINI_TOKEN)
- GEMINI_MODEL (defaults to "gemini-2.5-flash")
"""

import asyncio
import logging
from typing import Optional

from google import genai  # type: ignore
from google.genai import types  # type: ignore

from .errors import CompletionError

logger = logging.getLogger("fundbot.llm")

DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiLLMClient:
    """
    Text-in, text-out wrapper around the Gemini API.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL, timeout: float = 30):
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout
        self.client = None

        if not self.api_key:
            logger.error("Gemini API key not provided. Completions will fail until GEMINI_API_KEY is set.")
            return

        try:
            self.client = genai.Client(api_key=self.api_key)
            logger.info("Using google-genai SDK for Gemini LLM client (model=%s).", self.model)
        except Exception as e:
            logger.exception("Failed to initialize google-genai client: %s", e)
            self.client = None

    @property
    def is_available(self) -> bool:
        return self.client is not None

    async def complete(
        self,
        system_instruction: str,
        user_message: str,
        max_tokens: int = 256,
        temperature: float = 0.3,
    ) -> str:
        """
        Generate text for one user message under a system instruction.

        Raises:
            CompletionError: on any upstream failure or an empty reply.
        """
        if self.client is None:
            raise CompletionError("Gemini client is not configured")

        config = types.GenerateContentConfig(
            system_instruction=system_instruction.strip(),
            max_output_tokens=max_tokens,
            temperature=temperature,
        )

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=user_message,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Gemini complete() timed out after %ss", self.timeout)
            raise CompletionError(f"Gemini request timed out after {self.timeout}s") from e
        except Exception as e:
            logger.exception("Gemini complete() failed: %s", e)
            raise CompletionError(str(e)) from e

        text = getattr(response, "text", None)
        if not text:
            # Fall back to the first text part of the first candidate
            candidates = getattr(response, "candidates", None) or []
            if candidates:
                content = getattr(candidates[0], "content", None)
                for part in getattr(content, "parts", None) or []:
                    if getattr(part, "text", None):
                        text = part.text
                        break

        if not text or not text.strip():
            logger.warning("Gemini returned an empty reply")
            raise CompletionError("Empty reply from Gemini")

        logger.info("Gemini reply received (length: %d chars)", len(text))
        return text.strip()

    async def close(self) -> None:
        aio = getattr(self.client, "aio", None)
        closer = getattr(aio, "aclose", None)
        if closer is None:
            return
        try:
            await closer()
        except Exception as e:
            logger.exception("Error closing Gemini client: %s", e)
