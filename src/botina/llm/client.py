"""Language model client.

The bot only needs one operation from the model: answer given a system
prompt and the recent chat history. `LLMClient` is that contract;
`GroqLLMClient` implements it on top of AsyncGroq.
"""

from typing import Any, Protocol

import groq
from groq import AsyncGroq

from ..errors import ModelUnavailable


class LLMClient(Protocol):
    """Stateless reply generator."""

    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        ...


class GroqLLMClient:
    """LLMClient implementation that wraps AsyncGroq.

    Example:
        from groq import AsyncGroq
        from botina.llm import GroqLLMClient

        llm = GroqLLMClient(AsyncGroq(api_key="..."), model="llama-3.1-70b-versatile")
        reply = await llm.generate(system_prompt, [{"role": "user", "content": "Hi"}])
    """

    def __init__(
        self,
        client: AsyncGroq,
        model: str = "llama-3.1-70b-versatile",
        temperature: float = 0.8,
        max_tokens: int = 250,
        top_p: float = 0.9,
    ) -> None:
        """Initialize the Groq LLM client wrapper.

        Args:
            client: The AsyncGroq client instance to wrap.
            model: The model to use for completions.
            temperature: Sampling temperature.
            max_tokens: Upper bound on reply length.
            top_p: Nucleus sampling cutoff.
        """
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._top_p = top_p

    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        """Generate the assistant's next reply.

        Args:
            system_prompt: Instructions for the model.
            history: Chat turns, oldest first, as {"role", "content"} dicts.
                The last entry is normally the user's new message.

        Returns:
            The model's reply text.

        Raises:
            ModelUnavailable: The API call failed or returned no text.
        """
        messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        for message in history:
            role = "user" if message["role"] == "user" else "assistant"
            messages.append({"role": role, "content": message["content"]})

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                top_p=self._top_p,
            )
        except groq.APIError as e:
            raise ModelUnavailable(f"Groq request failed: {e}") from e

        if not response.choices:
            raise ModelUnavailable("No response from model")

        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise ModelUnavailable("Model returned an empty reply")
        return content

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model
