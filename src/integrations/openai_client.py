#!/usr/bin/env python3
"""
OpenAI integration for feedback analysis.

Sends one system + user prompt pair with a JSON schema response format and
returns the raw model output for validation by the caller.
"""

import logging
from typing import Dict, Optional, Any

from openai import OpenAI

from core.exceptions import LLMError

logger = logging.getLogger(__name__)

PROVIDER = "openai"


def _preview(content: str, limit: int = 1000) -> str:
    """Shorten long prompt text for logging."""
    if len(content) > limit:
        half = limit // 2
        return content[:half] + "\n...\n" + content[-half:]
    return content


class OpenAIClient:
    """Client for OpenAI API integration with structured outputs."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 max_tokens: int = 1200, temperature: float = 0.2, timeout: int = 60,
                 client: Optional[OpenAI] = None):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            base_url: Optional OpenAI-compatible endpoint
            max_tokens: Completion token limit
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Pre-built OpenAI client (tests)
        """
        if client is None:
            if not api_key:
                raise ValueError("OpenAI API key not provided (set OPENAI_API_KEY)")
            client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

        self.client = client
        self.max_tokens = max_tokens
        self.temperature = temperature

    def run(self, model: str, system_prompt: str, user_prompt: str,
            response_schema: Dict[str, Any], schema_name: str = "feedback_analysis") -> str:
        """
        Make a structured request and return the raw response content.

        Args:
            model: Model identifier
            system_prompt: System message
            user_prompt: User message
            response_schema: JSON schema the output must follow
            schema_name: Name reported with the schema

        Returns:
            Response content string (JSON text, not yet validated)

        Raises:
            LLMError: If the API call fails or the output was truncated
        """
        logger.info(f"Making OpenAI structured API call for {schema_name} ({model})")
        logger.debug(f"System prompt:\n{_preview(system_prompt)}")
        logger.debug(f"User prompt:\n{_preview(user_prompt)}")

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "schema": response_schema,
                        "strict": True
                    }
                }
            )
        except Exception as e:
            logger.error(f"OpenAI structured API request failed: {e}")
            raise LLMError(PROVIDER, model, e) from e

        choice = response.choices[0]

        # Detect truncated responses early
        if getattr(choice, "finish_reason", None) == "length":
            logger.error(
                "OpenAI response for %s was truncated due to max_tokens=%s",
                schema_name,
                self.max_tokens,
            )
            raise LLMError(PROVIDER, model, ValueError("response truncated (finish_reason=length)"))

        content = choice.message.content or ""
        logger.debug(f"LLM output: {_preview(content)}")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                f"OpenAI API call successful - tokens: {usage.prompt_tokens} prompt + "
                f"{usage.completion_tokens} completion = {usage.total_tokens} total"
            )

        return content

    def test_connection(self, model: str = "gpt-4o-mini") -> bool:
        """Test OpenAI API connection."""
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=5
            )

            if response and response.choices:
                logger.info("OpenAI API connection test successful")
                return True

            logger.error("OpenAI API connection test failed: no response")
            return False

        except Exception as e:
            logger.error(f"OpenAI API connection test failed: {e}")
            return False
