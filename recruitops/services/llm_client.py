"""
LLM Client

OpenAI-compatible chat client (openai library). Used ONLY for silver
medalist matching; every other computation in the app is deterministic.

- gpt-4o-mini by default (fast and cheap)
- JSON mode, low temperature for consistent structured output
- No retries: failures raise LLMError and surface to the caller
"""

import json
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from recruitops.core.config import Settings
from recruitops.core.log import get_logger

logger = get_logger(__name__)


class LLMError(Exception):
    """The LLM call failed or returned output that is not JSON."""


class LLMConfigError(LLMError):
    """No API key configured."""


class LLMClient:
    """
    Wrapper for an OpenAI-compatible chat completions API.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.client: Optional[OpenAI] = None
        if api_key:
            self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            timeout=settings.openai_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 2000) -> str:
        """
        Internal method to call the chat API.
        Returns raw text response.
        """
        if self.client is None:
            raise LLMConfigError("OpenAI API key not configured")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content}
                ],
                max_tokens=max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error("LLM request failed: %s", e)
            raise LLMError(f"LLM request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("No response from LLM")
        return content

    def _extract_json(self, text: str) -> Any:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        try:
            return json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise LLMError("Invalid JSON response from LLM") from e

    def complete_json(self, system_prompt: str, user_content: str, max_tokens: int = 2000) -> Any:
        """Call the model and decode its JSON answer."""
        return self._extract_json(self._call_api(system_prompt, user_content, max_tokens))
