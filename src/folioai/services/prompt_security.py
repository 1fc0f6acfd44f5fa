"""
Prompt Security Mediator - the only path from user text to the generation backend.

Every AI generation request passes through secure_ai_request(), which applies the
checks in a fixed order and stops at the first failure:

    1. Per-user rate limit (fixed hourly window)
    2. Model allow-list
    3. Prompt validation (injection signatures, length, content filter, sanitization)
    4. Composition behind a protected, integrity-checked system prompt

Denials are returned as SecureRequestResult objects; only an integrity failure of a
protected prompt is raised, since it means the registry itself is corrupt. Every
denial is written to the "folioai.security" logger as a WARNING record with a
security_event field. Raw prompt text is never logged beyond a short excerpt.

CLASSES:
    RateLimitResult
    PromptValidation
    SecureRequestResult
    PromptSecurityMediator

FUNCTIONS:
    create_security_mediator   (public)
"""

import json
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from folioai.config.prompts import PROMPT_HASH_PREFIX, PROTECTED_PROMPTS, SecurePrompt
from folioai.config.settings import SecurityConfig
from folioai.config.validation_constants import PROMPT_LOG_EXCERPT_LENGTH
from folioai.utils.exceptions import (
    IntegrityFailure,
    PromptNotFoundError,
    PromptRejected,
    RateLimited,
)
from folioai.utils.logger import get_logger
from folioai.utils.rate_limiter import RateLimitStore

logger = get_logger(__name__)
security_logger = get_logger("folioai.security")

# Signatures of attempts to override or escape the protected instructions
INJECTION_PATTERNS = (
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"forget\s+everything\s+above", re.IGNORECASE),
    re.compile(r"you\s+are\s+now\s+a", re.IGNORECASE),
    re.compile(r"system\s*:", re.IGNORECASE),
    re.compile(r"assistant\s*:", re.IGNORECASE),
    re.compile(r"/\*.*?\*/", re.DOTALL),
    re.compile(r"<script.*?>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"function\s*\(", re.IGNORECASE),
)

CONTENT_FILTER_PATTERNS = (
    re.compile(r"\b(hack|exploit|vulnerability)\b", re.IGNORECASE),
    re.compile(r"\b(malware|virus|trojan)\b", re.IGNORECASE),
    re.compile(r"\b(steal|theft|fraud)\b", re.IGNORECASE),
)

_HTML_TAG = re.compile(r"<[^>]*>")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

HARMFUL_CONTENT_MESSAGE = (
    "Prompt contains potentially harmful content. Please rephrase your request."
)
INAPPROPRIATE_CONTENT_MESSAGE = (
    "Prompt contains inappropriate content. Please revise your request."
)
VALIDATION_ERROR_MESSAGE = "Error validating prompt. Please try again."
INVALID_MODEL_MESSAGE = "Selected AI model is not allowed"
BUILD_FAILED_MESSAGE = "Failed to build secure prompt"


def _too_long_message(max_length: int) -> str:
    return f"Prompt too long. Please keep requests under {max_length} characters."


def _format_reset_time(reset_time: float) -> str:
    return datetime.fromtimestamp(reset_time, tz=timezone.utc).strftime("%H:%M:%S UTC")


class RateLimitResult(BaseModel):
    allowed: bool
    reset_time: Optional[float] = None


class PromptValidation(BaseModel):
    valid: bool
    sanitized: Optional[str] = None
    error: Optional[str] = None


class SecureRequestResult(BaseModel):
    """Outcome of secure_ai_request().

    ``denial`` tells the API which error a failed request maps to:
    "rate_limited" or "rejected".
    """

    secure: bool
    prompt: Optional[str] = None
    error: Optional[str] = None
    reset_time: Optional[float] = None
    denial: Optional[str] = None

    def raise_for_denial(self) -> None:
        if self.secure:
            return
        if self.denial == "rate_limited":
            raise RateLimited(self.reset_time, self.error or "")
        raise PromptRejected(self.error or VALIDATION_ERROR_MESSAGE)


class PromptSecurityMediator:
    """Validates, rate-limits and composes user prompts for AI generation.

    Args:
        config (SecurityConfig): Limits and switches.
        rate_limit_store (RateLimitStore): Keyed window state (a new store by default).
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        config: Optional[SecurityConfig] = None,
        rate_limit_store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or SecurityConfig()
        self.rate_limit_store = (
            rate_limit_store if rate_limit_store is not None else RateLimitStore()
        )
        self.clock = clock

    # ----- rate limiting -----

    def check_rate_limit(self, user_id: str) -> RateLimitResult:
        if not self.config.enable_rate_limiting:
            return RateLimitResult(allowed=True)

        allowed, reset_time = self.rate_limit_store.hit(
            user_id, self.config.max_requests_per_hour, self.clock()
        )
        return RateLimitResult(allowed=allowed, reset_time=reset_time)

    # ----- prompt validation -----

    def validate_prompt(self, user_text: str, user_id: str) -> PromptValidation:
        """Check user text for injection, length and filtered content.

        Args:
            user_text (str): The raw request text.
            user_id (str): The requesting user (for log context).

        Returns:
            PromptValidation: valid with the sanitized text, or invalid with a
            user-facing error message.
        """

        try:
            for pattern in INJECTION_PATTERNS:
                if pattern.search(user_text):
                    return PromptValidation(valid=False, error=HARMFUL_CONTENT_MESSAGE)

            if len(user_text) > self.config.max_prompt_length:
                return PromptValidation(
                    valid=False, error=_too_long_message(self.config.max_prompt_length)
                )

            if self.config.enable_content_filtering:
                for pattern in CONTENT_FILTER_PATTERNS:
                    if pattern.search(user_text):
                        return PromptValidation(
                            valid=False, error=INAPPROPRIATE_CONTENT_MESSAGE
                        )

            sanitized = _HTML_TAG.sub("", user_text)
            sanitized = _EXCESS_NEWLINES.sub("\n\n", sanitized).strip()
            return PromptValidation(valid=True, sanitized=sanitized)

        except Exception as e:
            logger.error(
                "Prompt validation error",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            return PromptValidation(valid=False, error=VALIDATION_ERROR_MESSAGE)

    # ----- protected prompts -----

    def get_protected_prompt(self, prompt_id: str) -> Optional[SecurePrompt]:
        """Registry entry for ``prompt_id`` (None if unknown).

        Raises:
            IntegrityFailure: If integrity protection is on and the entry is
                unlocked or carries an unexpected hash tag.
        """
        prompt = PROTECTED_PROMPTS.get(prompt_id)
        if prompt is None:
            return None

        if self.config.protected_prompts and (
            not prompt.locked or not prompt.hash.startswith(PROMPT_HASH_PREFIX)
        ):
            raise IntegrityFailure(f"Prompt integrity check failed: {prompt_id}")

        return prompt

    def build_secure_prompt(
        self,
        prompt_id: str,
        user_input: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Compose protected instructions, optional context and the user request.

        The protected content always comes first and the user text always last.

        Raises:
            PromptNotFoundError: If ``prompt_id`` is not registered.
        """
        prompt = self.get_protected_prompt(prompt_id)
        if prompt is None:
            raise PromptNotFoundError(f"Protected prompt not found: {prompt_id}")

        secure_prompt = prompt.content
        if context:
            secure_prompt += "\n\nContext: " + json.dumps(context, indent=2)
        secure_prompt += "\n\nUser Request: " + user_input
        return secure_prompt

    def validate_model(self, model_id: str) -> bool:
        return model_id in self.config.allowed_models

    def log_security_event(
        self, user_id: str, event: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        security_logger.warning(
            "Security event: %s",
            event,
            extra={
                "extra_fields": {
                    **(details or {}),
                    "user_id": user_id,
                    "security_event": event,
                }
            },
        )

    # ----- entry point -----

    def secure_ai_request(
        self,
        user_id: str,
        prompt_id: str,
        user_prompt: str,
        model_id: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> SecureRequestResult:
        """Run every check on a generation request and compose the final prompt.

        Args:
            user_id (str): The requesting user.
            prompt_id (str): Key of the protected prompt to run behind.
            user_prompt (str): Raw user request text.
            model_id (str): Requested model.
            context (dict): Optional structured context to embed.

        Returns:
            SecureRequestResult: secure with the composed prompt, or a denial.

        Raises:
            IntegrityFailure: If the protected prompt fails its integrity check.
        """

        rate_limit = self.check_rate_limit(user_id)
        if not rate_limit.allowed:
            self.log_security_event(
                user_id, "rate_limit_exceeded", {"reset_time": rate_limit.reset_time}
            )
            return SecureRequestResult(
                secure=False,
                error="Rate limit exceeded. Try again after "
                f"{_format_reset_time(rate_limit.reset_time)}",
                reset_time=rate_limit.reset_time,
                denial="rate_limited",
            )

        if not self.validate_model(model_id):
            self.log_security_event(user_id, "invalid_model", {"model_id": model_id})
            return SecureRequestResult(
                secure=False, error=INVALID_MODEL_MESSAGE, denial="rejected"
            )

        validation = self.validate_prompt(user_prompt, user_id)
        if not validation.valid:
            self.log_security_event(
                user_id,
                "prompt_validation_failed",
                {
                    "error": validation.error,
                    "prompt": user_prompt[:PROMPT_LOG_EXCERPT_LENGTH],
                },
            )
            return SecureRequestResult(
                secure=False, error=validation.error, denial="rejected"
            )

        try:
            secure_prompt = self.build_secure_prompt(
                prompt_id, validation.sanitized or "", context
            )
        except PromptNotFoundError as e:
            self.log_security_event(
                user_id, "prompt_build_failed", {"prompt_id": prompt_id, "error": str(e)}
            )
            return SecureRequestResult(
                secure=False, error=BUILD_FAILED_MESSAGE, denial="rejected"
            )
        except IntegrityFailure as e:
            self.log_security_event(
                user_id, "prompt_integrity_failed", {"prompt_id": prompt_id, "error": str(e)}
            )
            raise

        return SecureRequestResult(secure=True, prompt=secure_prompt)


def create_security_mediator(
    config: Optional[SecurityConfig] = None,
) -> PromptSecurityMediator:
    """Mediator configured from the environment unless a config is given."""
    return PromptSecurityMediator(config or SecurityConfig.from_env())
