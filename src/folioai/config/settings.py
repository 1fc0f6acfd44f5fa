# ---------- SETTINGS ----------

import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

DEFAULT_ALLOWED_MODELS = "gpt-4,claude-3-sonnet,claude-3-haiku"

# DynamoDB table holding user subscription records (unset = in-memory store)
PROFILE_TABLE_NAME = os.environ.get("PROFILE_TABLE_NAME", "")


def _env_flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = env.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() == "true"


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if value is None or not value.strip():
        return default
    return int(value)


class PaywallConfig(BaseModel):
    """Entitlement gate settings."""

    enabled: bool = False
    require_subscription: bool = False
    free_tier_limit: int = 1  # Portfolios allowed on the free tier
    trial_days: int = 7

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "PaywallConfig":
        """Build the config from ENABLE_PAYWALL, REQUIRE_SUBSCRIPTION, FREE_TIER_LIMIT and TRIAL_DAYS."""
        env = os.environ if env is None else env
        return cls(
            enabled=_env_flag(env, "ENABLE_PAYWALL", False),
            require_subscription=_env_flag(env, "REQUIRE_SUBSCRIPTION", False),
            free_tier_limit=_env_int(env, "FREE_TIER_LIMIT", 1),
            trial_days=_env_int(env, "TRIAL_DAYS", 7),
        )


class SecurityConfig(BaseModel):
    """Prompt security mediator settings."""

    enable_rate_limiting: bool = True
    max_requests_per_hour: int = 50
    max_prompt_length: int = 4000
    allowed_models: List[str] = Field(
        default_factory=lambda: DEFAULT_ALLOWED_MODELS.split(",")
    )
    protected_prompts: bool = True  # Verify lock/hash of protected prompts
    enable_content_filtering: bool = True

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SecurityConfig":
        """Build the config from the environment.

        The boolean switches are on unless explicitly set to "false".
        """
        env = os.environ if env is None else env
        allowed = env.get("ALLOWED_MODELS") or DEFAULT_ALLOWED_MODELS
        return cls(
            enable_rate_limiting=env.get("ENABLE_RATE_LIMITING", "").lower() != "false",
            max_requests_per_hour=_env_int(env, "MAX_REQUESTS_PER_HOUR", 50),
            max_prompt_length=_env_int(env, "MAX_PROMPT_LENGTH", 4000),
            allowed_models=[m.strip() for m in allowed.split(",") if m.strip()],
            protected_prompts=env.get("PROTECT_PROMPTS", "").lower() != "false",
            enable_content_filtering=env.get("ENABLE_CONTENT_FILTERING", "").lower()
            != "false",
        )
