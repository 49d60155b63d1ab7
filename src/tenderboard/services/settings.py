"""LLM configuration, built once at startup and injected into the client"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ..errors import ConfigurationError

# Load .env file if present
load_dotenv()

DEFAULT_PROVIDER = 'gemini'
DEFAULT_MODEL = 'gemini-2.5-flash'


@dataclass(frozen=True)
class LLMSettings:
    """Provider/model/credentials for the document-understanding service."""
    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    api_key: str = ""
    temperature: float = 0.1
    timeout: int = 120
    max_output_tokens: int = 8000

    @classmethod
    def from_env(cls) -> 'LLMSettings':
        """Read LLM_* variables (API_KEY is accepted for the key)."""
        return cls(
            provider=os.getenv('LLM_PROVIDER', DEFAULT_PROVIDER),
            model=os.getenv('LLM_MODEL', DEFAULT_MODEL),
            api_key=os.getenv('LLM_API_KEY') or os.getenv('API_KEY', ''),
            temperature=float(os.getenv('LLM_TEMPERATURE', '0.1')),
            timeout=int(os.getenv('LLM_TIMEOUT', '120')),
            max_output_tokens=int(os.getenv('LLM_MAX_OUTPUT_TOKENS', '8000')),
        )

    @property
    def model_id(self) -> str:
        """LiteLLM model identifier."""
        if self.provider in ('openai', 'anthropic'):
            return self.model
        return f"{self.provider}/{self.model}"

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                "API key not found. Set LLM_API_KEY (or API_KEY) in the environment or .env file."
            )
        return self.api_key
