"""Language model access."""

from .client import GroqLLMClient, LLMClient

__all__ = ["GroqLLMClient", "LLMClient"]
