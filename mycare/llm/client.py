# mycare/llm/client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Dict, Optional

from openai import OpenAI, OpenAIError

from mycare.config import get_settings


class LLMError(RuntimeError):
    """Raised when the chat-completion provider call fails."""


class LLMClient(ABC):
    """
    Simple abstraction so we can swap providers if needed.
    """

    @abstractmethod
    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        """
        messages: list of {"role": "system"|"user"|"assistant", "content": "..."}
        returns: assistant content as a string
        """
        ...


class OpenAILLMClient(LLMClient):
    """
    OpenAI implementation using the official Python client.

    Works against any OpenAI-compatible endpoint (set OPENAI_BASE_URL),
    e.g. Gemini's https://generativelanguage.googleapis.com/v1beta/openai/.
    """

    def __init__(self, model: Optional[str] = None):
        settings = get_settings()
        if not settings.openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY is not set in environment (.env)."
            )

        self.client = OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.agent_timeout_seconds,
        )
        self.default_model = model or settings.llm_model

    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=model or self.default_model,
                messages=messages,
                temperature=temperature,
            )
        except OpenAIError as exc:
            raise LLMError(f"Chat completion failed: {exc}") from exc
        content = completion.choices[0].message.content
        return content or ""
