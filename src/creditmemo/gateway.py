"""
creditmemo.gateway
~~~~~~~~~~~~~~~~~~
The only component that talks to the language model (Ollama).

One synchronous ``/api/generate`` call per invocation, ``stream: false``.
There is no retry loop: a timeout, transport error, non-200 status, empty
reply or unparseable structured reply raises ``CreditMemoGenerationError``
with the original exception attached as ``cause``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol, TypeVar

import requests

from .config import ModelConfig
from .exceptions import CreditMemoGenerationError
from .prompts import SYSTEM_PROMPT
from .utils import clean_json_response

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class _FromDict(Protocol):
    @classmethod
    def from_dict(cls, data: dict) -> Any: ...


T = TypeVar("T", bound=_FromDict)


class ModelGateway:
    """
    Thin Ollama client.

    Args:
        model_cfg: Immutable model settings. The model name is read from
                   here and nowhere else.
        system:    System prompt attached to every call.
    """

    def __init__(self, model_cfg: ModelConfig, system: Optional[str] = SYSTEM_PROMPT) -> None:
        self.model_cfg = model_cfg
        self.system = system

    @property
    def model_name(self) -> str:
        return self.model_cfg.model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, prompt: str) -> str:
        """Return the model's plain-text reply to ``prompt``."""
        text = self._call(prompt).strip()
        if not text:
            raise CreditMemoGenerationError("Model returned an empty response.")
        return text

    def generate_structured(self, prompt: str, shape: type[T]) -> T:
        """
        Ask for JSON and coerce the reply into ``shape`` via ``shape.from_dict``.
        """
        raw = self._call(prompt, json_mode=True)

        try:
            data = json.loads(clean_json_response(raw))
        except json.JSONDecodeError as exc:
            logger.warning("Unparseable JSON from model: %s", exc)
            raise CreditMemoGenerationError(
                f"Model returned invalid JSON for {shape.__name__}.", cause=exc
            ) from exc

        if not data:
            raise CreditMemoGenerationError(
                f"Model returned no JSON object for {shape.__name__}."
            )

        try:
            return shape.from_dict(data)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning("Could not coerce model reply into %s: %s", shape.__name__, exc)
            raise CreditMemoGenerationError(
                f"Model reply does not match the {shape.__name__} shape.", cause=exc
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _payload(self, prompt: str, json_mode: bool) -> dict:
        cfg = self.model_cfg
        payload: dict = {
            "model":  cfg.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": cfg.temperature,
                "top_p":       cfg.top_p,
                "num_ctx":     cfg.num_ctx,
            },
        }
        if self.system:
            payload["system"] = self.system
        if json_mode:
            payload["format"] = "json"
        return payload

    def _call(self, prompt: str, json_mode: bool = False) -> str:
        cfg = self.model_cfg
        try:
            response = requests.post(
                f"{cfg.base_url}/api/generate",
                json=self._payload(prompt, json_mode),
                timeout=cfg.timeout,
            )
        except requests.exceptions.Timeout as exc:
            logger.warning("Ollama call timed out after %ss", cfg.timeout)
            raise CreditMemoGenerationError(
                f"Model call timed out after {cfg.timeout}s.", cause=exc
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("Ollama request failed: %s", exc)
            raise CreditMemoGenerationError("Model call failed.", cause=exc) from exc

        if response.status_code != 200:
            logger.warning("Ollama HTTP %d", response.status_code)
            raise CreditMemoGenerationError(
                f"Model call returned HTTP {response.status_code}."
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise CreditMemoGenerationError(
                "Model server returned a non-JSON body.", cause=exc
            ) from exc

        if not isinstance(body, dict):
            raise CreditMemoGenerationError("Model server returned an unexpected body.")
        return str(body.get("response") or "")


__all__ = ["ModelGateway"]
