"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from docgrounder.embedding.encoder import DEFAULT_MODEL
from docgrounder.generation.client import DEFAULT_BASE_URL, DEFAULT_LLM_MODEL


@dataclass(slots=True)
class AppConfig:
    data_dir: Path = Path("data")
    model_name: str = DEFAULT_MODEL
    max_tokens: int = 400
    overlap: int = 50
    batch_size: int = 10
    top_k: int = 5
    llm_base_url: str = DEFAULT_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_api_key: str | None = None
    llm_timeout: float = 60.0
    max_prompt_chars: int = 8000

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config, letting environment variables override the defaults."""
        defaults = cls()
        return cls(
            data_dir=Path(os.environ.get("DOCGROUNDER_DATA_DIR", str(defaults.data_dir))),
            model_name=os.environ.get("DOCGROUNDER_MODEL", defaults.model_name),
            llm_base_url=os.environ.get("DOCGROUNDER_LLM_BASE_URL", defaults.llm_base_url),
            llm_model=os.environ.get("DOCGROUNDER_LLM_MODEL", defaults.llm_model),
            llm_api_key=os.environ.get("OPENROUTER_API_KEY") or None,
        )

    def resolve_data_dir(self, base_dir: Path | None = None) -> Path:
        if Path(self.data_dir).is_absolute() or base_dir is None:
            return Path(self.data_dir)
        return base_dir / self.data_dir
