"""
Text-generation providers.
Each provider reports whether it can serve a request and turns a message list into text.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

import httpx
import ollama
import openai
from openai import OpenAI

from ..core import config
from ..core.errors import GenerationError
from ..util.logging import logger


class IGenerationProvider(ABC):
    """Abstract interface for generation providers."""

    def __init__(self, model_name: str, temperature: float = config.GENERATION_TEMPERATURE):
        self.model_name = model_name
        self.temperature = temperature

    @property
    def tier(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured to serve requests."""
        pass

    @abstractmethod
    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Return the completion text for a chat message list."""
        pass

    def check_health(self) -> bool:
        """Whether the provider can serve a request right now."""
        return self.is_available()


class OpenAIProvider(IGenerationProvider):
    """Premium tier. Only available when OPENAI_API_KEY is set."""

    def __init__(
        self,
        model_name: str = config.OPENAI_MODEL,
        api_key: Optional[str] = None,
        temperature: float = config.GENERATION_TEMPERATURE,
        timeout: float = config.GENERATION_TIMEOUT_SEC,
    ):
        super().__init__(model_name, temperature)
        self._api_key = api_key
        self.timeout = timeout
        self._client = None
        self._client_key = None

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or config.get_openai_api_key()

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        api_key = self.api_key
        if self._client is None or self._client_key != api_key:
            self._client = OpenAI(api_key=api_key, timeout=self.timeout)
            self._client_key = api_key
        return self._client

    def complete(self, messages: List[Dict[str, str]]) -> str:
        try:
            response = self._get_client().chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"OpenAI model error: {e}", {"model": self.model_name}) from e

        if not response.choices:
            raise GenerationError("OpenAI returned no choices", {"model": self.model_name})
        return response.choices[0].message.content or ""


class OllamaProvider(IGenerationProvider):
    """Default tier: a model served by an Ollama host. Needs no credential."""

    def __init__(
        self,
        model_name: str = config.OLLAMA_MODEL,
        host: str = config.OLLAMA_HOST,
        temperature: float = config.GENERATION_TEMPERATURE,
        timeout: float = config.GENERATION_TIMEOUT_SEC,
    ):
        super().__init__(model_name, temperature)
        self.host = host
        self.timeout = timeout
        self._client = None

    @property
    def client(self) -> ollama.Client:
        if self._client is None:
            self._client = ollama.Client(host=self.host, timeout=self.timeout)
        return self._client

    def is_available(self) -> bool:
        return True

    def complete(self, messages: List[Dict[str, str]]) -> str:
        start_time = datetime.now()
        try:
            response = self.client.chat(
                model=self.model_name,
                messages=messages,
                options={'temperature': self.temperature}
            )
        except ollama.ResponseError as e:
            raise GenerationError(f"Ollama model error: {e}", {"model": self.model_name}) from e
        except (httpx.HTTPError, ConnectionError) as e:
            raise GenerationError(f"Ollama host unreachable at {self.host}: {e}", {"model": self.model_name}) from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        logger.debug(f"Ollama {self.model_name} answered in {processing_time}ms")
        return response.get('message', {}).get('content', '') or ""

    def check_health(self) -> bool:
        """Check if the Ollama host is reachable."""
        try:
            self.client.list()
            return True
        except (ollama.ResponseError, httpx.HTTPError, ConnectionError):
            return False


def default_providers() -> List[IGenerationProvider]:
    """Providers in priority order: premium first, default hosted model last."""
    return [OpenAIProvider(), OllamaProvider()]
