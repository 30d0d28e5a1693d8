"""
LLM Oracle

Text-generation capability used by the review pipeline. The orchestrator
depends only on the Oracle interface so it can run against any backend,
including fakes in tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests

from ..config import LLMConfig


logger = logging.getLogger(__name__)


class OracleError(Exception):
    """LLM generation failed"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class Oracle(ABC):
    """Prompt in, unstructured text out."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Generate a completion for the prompt.

        Raises:
            OracleError: If generation fails
        """


class OpenAICompatibleOracle(Oracle):
    """
    Oracle backed by an OpenAI-compatible chat completions endpoint.

    Works with OpenAI itself and with gateways exposing the same API.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.0,
        max_tokens: int = 1024,
        timeout_seconds: int = 60
    ):
        """
        Initialize HTTP oracle.

        Args:
            api_key: API key sent as a bearer token
            model_name: Model identifier
            base_url: API base URL (without /chat/completions)
            temperature: Sampling temperature
            max_tokens: Completion token limit
            timeout_seconds: Per-request timeout
        """
        self.model_name = model_name
        self.base_url = base_url.rstrip('/')
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'User-Agent': 'Code-Reviewer-Bot/1.0'
        })

    def generate(self, prompt: str) -> str:
        payload = {
            'model': self.model_name,
            'messages': [{'role': 'user', 'content': prompt}],
            'temperature': self.temperature,
            'max_tokens': self.max_tokens,
        }

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(f"LLM request failed: {e}")
            raise OracleError(f"Request failed: {str(e)}")

        if not response.ok:
            raise OracleError(
                f"LLM API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        return self._extract_text(response.json())

    def _extract_text(self, data: Dict) -> str:
        try:
            text = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            raise OracleError("Unexpected LLM response shape")

        if not text:
            raise OracleError("LLM returned an empty response")
        return text


def create_oracle(config: LLMConfig) -> Oracle:
    """
    Build the oracle selected by the LLM configuration.

    Args:
        config: LLM configuration section

    Returns:
        Oracle instance
    """
    provider = config.provider.lower()

    if provider == 'openai':
        return OpenAICompatibleOracle(
            api_key=config.api_key or '',
            model_name=config.model_name,
            base_url=config.api_base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
        )

    if provider == 'transformers':
        # Heavy ML dependencies are only needed for the local backend
        from .generator import TransformersOracle
        return TransformersOracle(
            model_name=config.model_name,
            max_new_tokens=config.max_tokens,
            temperature=config.temperature,
        )

    raise ValueError(f"Unsupported LLM provider in config: {config.provider}")
