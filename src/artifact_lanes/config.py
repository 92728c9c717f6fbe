"""Configuration management for artifact-lanes."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
dotenv_path = Path.cwd() / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)
else:
    load_dotenv()


@dataclass
class OpenAIConfig:
    """OpenAI-compatible chat and embedding service configuration."""

    api_key: str
    base_url: str
    model: str
    embed_model: str
    timeout: int  # seconds

    @property
    def enabled(self) -> bool:
        """Whether remote calls can be made at all."""
        return bool(self.api_key)

    @classmethod
    def from_env(cls, prefix: str = "OPENAI") -> "OpenAIConfig":
        """Load configuration from environment variables.

        Args:
            prefix: Environment variable prefix (e.g., "OPENAI")

        Returns:
            OpenAIConfig instance
        """
        return cls(
            api_key=os.getenv(f"{prefix}_API_KEY", ""),
            base_url=os.getenv(f"{prefix}_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
            model=os.getenv(f"{prefix}_MODEL", "gpt-4o-mini"),
            embed_model=os.getenv(f"{prefix}_EMBED_MODEL", "text-embedding-3-small"),
            timeout=int(os.getenv(f"{prefix}_TIMEOUT", "60")),
        )


DEFAULT_OPENAI_CONFIG = OpenAIConfig.from_env("OPENAI")
