"""
creditmemo.config
~~~~~~~~~~~~~~~~~
Central configuration for the creditmemo service.

All values have defaults that work out of the box against a local Ollama
server. Override any field via a ``.env`` file or environment variables;
pydantic-settings picks them up automatically.

Usage::

    from creditmemo.config import cfg

    print(cfg.ollama_base_url)          # "http://localhost:11434"
    print(cfg.get_model_config())       # typed ModelConfig dataclass
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Typed return value for model configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Immutable snapshot of the LLM settings handed to the ModelGateway."""

    base_url:    str
    model:       str
    temperature: float
    top_p:       float
    num_ctx:     int
    timeout:     int


# ---------------------------------------------------------------------------
# Main settings class
# ---------------------------------------------------------------------------

class Config(BaseSettings):
    """
    Runtime configuration for creditmemo.

    Reads from (in priority order):
      1. Environment variables (prefixed with ``CREDITMEMO_``)
      2. A ``.env`` file in the working directory
      3. The defaults defined below
    """

    model_config = SettingsConfigDict(
        env_prefix="CREDITMEMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Ollama / LLM
    # ------------------------------------------------------------------

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server.",
    )
    model: str = Field(
        default="llama3.1",
        description="Ollama model tag used for every generation call.",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (0 = deterministic).",
    )
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    num_ctx: int = Field(
        default=8192,
        ge=512,
        description="Context window size in tokens.",
    )
    request_timeout: int = Field(
        default=120,
        ge=1,
        description=(
            "HTTP timeout in seconds for a single model call. "
            "A timeout fails the whole operation; there are no retries."
        ),
    )

    # ------------------------------------------------------------------
    # HTTP surface
    # ------------------------------------------------------------------

    api_prefix: str = Field(
        default="/api/v1",
        description="Path prefix under which the credit-memo routes are mounted.",
    )
    cors_origins: list[str] = Field(default=["*"])
    log_level: str = Field(default="info")

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("ollama_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("api_prefix")
    @classmethod
    def _normalise_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.strip().lower()
        if level not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @model_validator(mode="after")
    def _warn_on_high_temperature(self) -> "Config":
        if self.temperature > 0.5:
            warnings.warn(
                f"temperature={self.temperature} is high for structured generation. "
                "Values above 0.5 may produce inconsistent JSON output.",
                UserWarning,
                stacklevel=2,
            )
        return self

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    def get_model_config(self) -> ModelConfig:
        """Return an immutable, typed snapshot of the LLM configuration."""
        return ModelConfig(
            base_url=self.ollama_base_url,
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            num_ctx=self.num_ctx,
            timeout=self.request_timeout,
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

cfg = Config()

__all__ = ["Config", "ModelConfig", "cfg"]
