"""
Subscription Tier Catalog.

The fixed set of subscription tiers the entitlement gate resolves user records
against. Limits of -1 mean unlimited.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

UNLIMITED = -1


class SubscriptionTier(BaseModel):
    id: str
    name: str
    price: int  # USD per month
    features: List[str]
    portfolio_limit: int
    custom_domain: bool
    ai_credits: int

    model_config = ConfigDict(frozen=True)

    @property
    def has_portfolio_limit(self) -> bool:
        return self.portfolio_limit != UNLIMITED

    @property
    def has_ai_credit_limit(self) -> bool:
        return self.ai_credits != UNLIMITED


SUBSCRIPTION_TIERS = (
    SubscriptionTier(
        id="free",
        name="Free",
        price=0,
        features=["1 Portfolio", "Basic Templates", "FolioAI Branding"],
        portfolio_limit=1,
        custom_domain=False,
        ai_credits=5,
    ),
    SubscriptionTier(
        id="pro",
        name="Professional",
        price=29,
        features=[
            "Unlimited Portfolios",
            "Premium Templates",
            "Custom Domain",
            "Remove Branding",
        ],
        portfolio_limit=UNLIMITED,
        custom_domain=True,
        ai_credits=100,
    ),
    SubscriptionTier(
        id="enterprise",
        name="Enterprise",
        price=99,
        features=[
            "Everything in Pro",
            "White-label",
            "Priority Support",
            "Custom Templates",
        ],
        portfolio_limit=UNLIMITED,
        custom_domain=True,
        ai_credits=UNLIMITED,
    ),
)


def get_tier(tier_id: Optional[str]) -> Optional[SubscriptionTier]:
    """Look up a tier by id; None for unknown ids."""
    for tier in SUBSCRIPTION_TIERS:
        if tier.id == tier_id:
            return tier
    return None
