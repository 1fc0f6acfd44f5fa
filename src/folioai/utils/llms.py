"""
LLM Utilities - Text Generation Backend.

This module is the outbound edge of the prompt security layer: it receives a single
composed prompt (protected instructions first, then context, then the sanitized user
request) and a model id that has already passed the allow-list, and returns the
generated text.

Key Functions:
    - call_llm: Dispatch a composed prompt to the generation backend
    - get_openai_client: Lazily create the OpenAI client

Environment Variables:
    OPENAI_API_KEY: OpenAI API key (required for generation)
    OPENAI_BASE_URL: Base URL of an OpenAI-compatible gateway (optional)

Note:
    Calls are not retried here. Failures surface as GenerationError and the caller
    decides whether to retry.
"""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

from folioai.utils.exceptions import GenerationError
from folioai.utils.logger import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

_client: Optional[Any] = None


def get_openai_client() -> Any:
    """Get or create the OpenAI client using lazy initialization.

    Returns:
        OpenAI: Client instance.

    Raises:
        GenerationError: If OPENAI_API_KEY is not set.
    """
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            error_msg = (
                "OPENAI_API_KEY not found in environment variables. "
                "Please set OPENAI_API_KEY in your .env file or environment."
            )
            logger.error(error_msg)
            raise GenerationError(error_msg)
        _client = OpenAI(api_key=api_key, base_url=os.getenv("OPENAI_BASE_URL") or None)
    return _client


def call_llm(prompt: str, model: str, max_tokens: int = 2000) -> str:
    """Send a composed prompt to the generation backend.

    Args:
        prompt: The secure prompt built by the prompt security mediator.
        model: An allow-listed model id.
        max_tokens: Maximum number of tokens in the response.

    Returns:
        The generated text.

    Raises:
        GenerationError: If the backend call fails or returns no content.
    """

    client = get_openai_client()
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=0.2,  # Low temperature for consistent, focused output
        )
    except OpenAIError as e:
        logger.error(
            "LLM API call failed",
            extra={
                "extra_fields": {
                    "model": model,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            },
        )
        raise GenerationError(f"Generation backend call failed: {type(e).__name__}") from e

    if not response or not getattr(response, "choices", None):
        error_msg = "Generation backend returned no choices"
        logger.error(error_msg, extra={"extra_fields": {"model": model}})
        raise GenerationError(error_msg)

    text = response.choices[0].message.content
    if text is None:
        error_msg = "Generation backend returned None content"
        logger.error(error_msg, extra={"extra_fields": {"model": model}})
        raise GenerationError(error_msg)

    # Log first 500 characters for debugging (full response may be very long)
    logger.debug("LLM response: %s", text[:500])

    return text
