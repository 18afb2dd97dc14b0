"""LLM text generation — OpenAI when configured, Anthropic as the fallback provider."""

import logging

from openai import AsyncOpenAI
import anthropic

from flight_agent.config import settings
from flight_agent.errors import LLMUnavailableError

logger = logging.getLogger(__name__)


class LLMClient:
    """Generates text from a prompt; the only capability the parser and explainer need."""

    def __init__(self, openai_client=None, anthropic_client=None):
        self._openai = openai_client
        self._anthropic = anthropic_client

        if self._openai is None and settings.openai_api_key:
            self._openai = AsyncOpenAI(api_key=settings.openai_api_key)
        if self._anthropic is None and settings.anthropic_api_key:
            self._anthropic = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def complete(self, system: str, user: str, *, max_tokens: int = 500, temperature: float = 0) -> str:
        """Return the stripped reply to `user` under the `system` instructions.

        Raises LLMUnavailableError when no provider is configured or every
        configured provider fails.
        """
        errors = []
        messages = [{"role": "user", "content": user}]

        if self._openai:
            try:
                response = await self._openai.chat.completions.create(
                    model=settings.openai_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "system", "content": system}] + messages,
                )
                return (response.choices[0].message.content or "").strip()
            except Exception as e:
                errors.append(f"OpenAI: {e}")
                logger.warning(f"OpenAI failed, trying Anthropic: {e}")

        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=settings.anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=messages,
                )
                return response.content[0].text.strip()
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic failed: {e}")

        if not errors:
            raise LLMUnavailableError("No LLM provider configured")
        raise LLMUnavailableError(f"All LLM providers failed: {'; '.join(errors)}")


llm_client = LLMClient()
