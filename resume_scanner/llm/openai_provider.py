"""
OpenAI provider used by the resume analyzer.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from openai import OpenAI, APIError

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Standardized LLM response."""
    content: str
    tokens_in: int = 0
    tokens_out: int = 0
    model: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class OpenAIProvider:
    """Thin wrapper over the official OpenAI SDK chat completions API."""

    def __init__(self, api_key: str, timeout: float = 60.0):
        if not api_key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.client = OpenAI(api_key=api_key, timeout=timeout)
        logger.info("OpenAI provider initialized")

    def chat(
        self,
        messages: list[Dict[str, str]],
        model: str,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        SDK errors (``RateLimitError`` included) are logged and re-raised so
        the caller can decide whether another model is worth trying.
        """
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens or 2000,
            )
        except APIError as e:
            logger.error(f"OpenAI API error ({model}): {e}")
            raise

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            tokens_in=usage.prompt_tokens if usage else 0,
            tokens_out=usage.completion_tokens if usage else 0,
            model=model,
            metadata={
                "finish_reason": response.choices[0].finish_reason,
            }
        )
