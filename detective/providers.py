"""Completion-call collaborators for locally hosted language models.

Supports:
- Lemonade: OpenAI-compatible chat completions (default, port 8000)
- Ollama: native /api/chat endpoint (port 11434)

Usage:
    from detective.providers import get_provider

    model = get_provider("lemonade", model_name="Qwen2.5-7B-Instruct-GGUF")
    text = model.complete(system_prompt, user_prompt, temperature=0.2, max_tokens=150)
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests

from .config import ProviderConfig
from .errors import ProviderError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class BaseProvider(ABC):
    """Base class for model providers."""

    provider_name: str = "base"
    default_base_url: str = ""

    def __init__(
        self,
        model_name: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.model_name = model_name
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.7,
        max_tokens: int = 128,
    ) -> str:
        """Send a chat conversation and return the assistant's text."""
        pass

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 128,
    ) -> str:
        """Single-shot completion with a system and a user message."""
        return self.chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def _post(self, url: str, payload: dict) -> dict:
        """POST a JSON payload; transport failures and non-object bodies raise ProviderError."""
        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise ProviderError(self.provider_name, str(exc)) from exc
        except ValueError as exc:
            raise ProviderError(self.provider_name, f"invalid JSON response: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError(self.provider_name, "unexpected response shape")
        return data

    def _message_content(self, message) -> str:
        """Text of a chat message object; anything else is a malformed response."""
        if message is None:
            return ""
        if not isinstance(message, dict):
            raise ProviderError(self.provider_name, "unexpected response shape")
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise ProviderError(self.provider_name, "unexpected response shape")
        return content


class LemonadeProvider(BaseProvider):
    """Lemonade server using the OpenAI-compatible chat completions API."""

    provider_name = "lemonade"
    default_base_url = "http://localhost:8000/api/v1"

    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.7,
        max_tokens: int = 128,
    ) -> str:
        data = self._post(
            f"{self.base_url}/chat/completions",
            {
                "model": self.model_name,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ProviderError(self.provider_name, "unexpected response shape")
        if not choices:
            logger.warning("%s returned no choices", self.provider_name)
            return ""
        if not isinstance(choices[0], dict):
            raise ProviderError(self.provider_name, "unexpected response shape")
        return self._message_content(choices[0].get("message"))


class OllamaProvider(BaseProvider):
    """Ollama server using the native chat API."""

    provider_name = "ollama"
    default_base_url = "http://localhost:11434"

    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.7,
        max_tokens: int = 128,
    ) -> str:
        data = self._post(
            f"{self.base_url}/api/chat",
            {
                "model": self.model_name,
                "messages": messages,
                "stream": False,
                "options": {
                    "num_predict": max_tokens,
                    "temperature": temperature,
                },
            },
        )
        return self._message_content(data.get("message"))


# Provider registry
PROVIDERS = {
    "lemonade": LemonadeProvider,
    "ollama": OllamaProvider,
}


def get_provider(provider_name: str, **kwargs) -> BaseProvider:
    """Get a provider instance by name.

    Args:
        provider_name: "lemonade" or "ollama"
        **kwargs: Provider arguments (model_name, base_url, timeout, session)

    Returns:
        Provider instance
    """
    if provider_name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {provider_name}. Available: {list(PROVIDERS.keys())}")

    return PROVIDERS[provider_name](**kwargs)


def provider_from_config(config: ProviderConfig) -> BaseProvider:
    """Build the provider described by a ProviderConfig."""
    return get_provider(
        config.provider,
        model_name=config.model_name,
        base_url=config.base_url,
        timeout=config.timeout,
    )


def list_providers() -> List[str]:
    """List available provider names."""
    return list(PROVIDERS.keys())
