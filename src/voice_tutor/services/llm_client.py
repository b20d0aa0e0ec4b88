"""Text generation through Groq chat completions."""

import logging
from typing import Protocol

import httpx
from groq import AsyncGroq

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the generation provider cannot produce text."""


class TextGenerator(Protocol):
    async def generate(self, prompt: str, system: str | None = None) -> str: ...


class GroqTextGenerator:
    """Generates text for a prompt, optionally framed by a system message."""

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        timeout: httpx.Timeout | None = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: AsyncGroq | None = None
        if not api_key:
            logger.warning("Groq API key not configured, text generation unavailable")
            return
        self._client = AsyncGroq(
            api_key=api_key,
            timeout=timeout or httpx.Timeout(60.0, connect=30.0),
            max_retries=0,
        )

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def generate(self, prompt: str, system: str | None = None) -> str:
        if self._client is None:
            raise GenerationError("Groq API key not configured")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=False,
            )
        except Exception as e:
            raise GenerationError(f"Groq completion failed: {e}") from e

        return (response.choices[0].message.content or "").strip()
