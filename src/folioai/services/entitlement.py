"""
Entitlement Gate - subscription and usage checks for metered actions.

Decides whether a user may perform an action (create a portfolio, use AI
generation) given their subscription record, and meters successful actions.

Decisions are returned as AccessDecision objects rather than raised; the API
layer converts a denial into an HTTP error through raise_for_denial(). Any
unexpected failure while reading or evaluating a user record yields a denial
("System error"), so a broken store never grants access.

CLASSES:
    AccessDecision
    UpgradeRedirect
    EntitlementGate
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import BaseModel

from folioai.config.settings import PaywallConfig
from folioai.config.subscription_tiers import SubscriptionTier, get_tier
from folioai.config.validation_constants import (
    ACTION_CREATE_PORTFOLIO,
    ACTION_GENERAL,
    ACTION_USE_AI,
    ACTIVE_SUBSCRIPTION_STATUS,
    USAGE_COUNTER_FIELDS,
)
from folioai.utils.exceptions import AccessDenied, ProfileNotFoundError
from folioai.utils.logger import get_logger
from folioai.utils.profile_store import ProfileStore

logger = get_logger(__name__)

DENY_PROFILE_NOT_FOUND = "User profile not found"
DENY_SUBSCRIPTION_REQUIRED = "Active subscription required"
DENY_INVALID_TIER = "Invalid subscription tier"
DENY_PORTFOLIO_LIMIT = "Portfolio limit reached for your tier"
DENY_AI_CREDITS = "AI credits exhausted for this month"
DENY_SYSTEM_ERROR = "System error"

UPGRADE_PATH = "/upgrade"


class AccessDecision(BaseModel):
    allowed: bool
    reason: Optional[str] = None

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise AccessDenied(self.reason or "Access denied")


class UpgradeRedirect(BaseModel):
    """Where to send a user who lacks the required subscription."""

    reason: str
    return_path: str

    @property
    def location(self) -> str:
        return (
            f"{UPGRADE_PATH}?reason={quote(self.reason, safe='')}"
            f"&return={quote(self.return_path, safe='')}"
        )


class EntitlementGate:
    """Checks and meters user actions against the subscription tier catalog.

    Args:
        store (ProfileStore): Source of user subscription records.
        config (PaywallConfig): Paywall switches and the free tier limit.
    """

    def __init__(self, store: ProfileStore, config: Optional[PaywallConfig] = None):
        self.store = store
        self.config = config or PaywallConfig()

    def resolve_tier(self, tier_id: Optional[str]) -> Optional[SubscriptionTier]:
        """Catalog tier for ``tier_id`` with the configured free tier limit applied."""
        tier = get_tier(tier_id)
        if tier is not None and tier.id == "free":
            tier = tier.model_copy(update={"portfolio_limit": self.config.free_tier_limit})
        return tier

    def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        """Raw user record from the store (raises the store's errors unchanged)."""
        return self.store.get_user_profile(user_id)

    def check_access(self, user_id: str, action: str) -> AccessDecision:
        """Decide whether ``user_id`` may perform ``action``.

        Args:
            user_id (str): The user.
            action (str): "create_portfolio", "use_ai" or "general".

        Returns:
            AccessDecision: allowed, or denied with a user-facing reason.
        """

        if not self.config.enabled:
            return AccessDecision(allowed=True)

        try:
            return self._evaluate_access(user_id, action)
        except ProfileNotFoundError:
            return AccessDecision(allowed=False, reason=DENY_PROFILE_NOT_FOUND)
        except Exception as e:
            logger.error(
                "Access check failed",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "action": action,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            return AccessDecision(allowed=False, reason=DENY_SYSTEM_ERROR)

    def _evaluate_access(self, user_id: str, action: str) -> AccessDecision:
        profile = self.store.get_user_profile(user_id)

        if (
            self.config.require_subscription
            and profile.get("subscription_status") != ACTIVE_SUBSCRIPTION_STATUS
        ):
            return AccessDecision(allowed=False, reason=DENY_SUBSCRIPTION_REQUIRED)

        tier = self.resolve_tier(profile.get("subscription_tier"))
        if tier is None:
            return AccessDecision(allowed=False, reason=DENY_INVALID_TIER)

        # Counters that are not numbers raise here and deny as a system error
        if action == ACTION_CREATE_PORTFOLIO and tier.has_portfolio_limit:
            if int(profile.get("portfolio_count") or 0) >= tier.portfolio_limit:
                return AccessDecision(allowed=False, reason=DENY_PORTFOLIO_LIMIT)

        if action == ACTION_USE_AI and tier.has_ai_credit_limit:
            if int(profile.get("ai_credits_used") or 0) >= tier.ai_credits:
                return AccessDecision(allowed=False, reason=DENY_AI_CREDITS)

        return AccessDecision(allowed=True)

    def update_usage(self, user_id: str, action: str, amount: int = 1) -> None:
        """Add ``amount`` to the usage counter metered by ``action``.

        Actions without a counter are ignored.
        """
        field = USAGE_COUNTER_FIELDS.get(action)
        if field is None:
            return
        self.store.increment_usage(user_id, field, amount)

    def require_subscription(
        self, user_id: str, return_path: str
    ) -> Optional[UpgradeRedirect]:
        """None if the user has general access, else an UpgradeRedirect."""
        decision = self.check_access(user_id, ACTION_GENERAL)
        if decision.allowed:
            return None
        return UpgradeRedirect(reason=decision.reason or "", return_path=return_path)

    def upgrade_required(self, user_id: str, required_tier: str) -> bool:
        """True if the user's tier is priced below ``required_tier``.

        Users without a record, or with an unknown tier, always need to upgrade.
        """
        try:
            profile = self.store.get_user_profile(user_id)
        except ProfileNotFoundError:
            return True

        current = get_tier(profile.get("subscription_tier"))
        required = get_tier(required_tier)
        if current is None or required is None:
            return True
        return current.price < required.price
