"""
Configuration Module for FolioAI.

Re-exports the commonly used schemas, settings and constants from the focused modules:

- profile_schemas.py: the canonical Profile and its sub-entities
- request_schemas.py: API request payloads
- settings.py: PaywallConfig and SecurityConfig read from the environment
- subscription_tiers.py: the tier catalog
- prompts.py: the protected prompt registry
- validation_constants.py: actions, keyword sets and size limits

For new code, import directly from the focused modules:
    from folioai.config.profile_schemas import Profile
    from folioai.config.settings import SecurityConfig
"""

from folioai.config.profile_schemas import (
    Profile,
    PersonalInfo,
    ContactInfo,
    WorkExperience,
    Education,
    Certification,
    Language,
    Project,
    VolunteerExperience,
)

from folioai.config.request_schemas import (
    ProfileImportRequest,
    PortfolioCreateRequest,
    GenerationRequest,
    UsageUpdateRequest,
)

from folioai.config.settings import PaywallConfig, SecurityConfig

from folioai.config.subscription_tiers import (
    SUBSCRIPTION_TIERS,
    SubscriptionTier,
    get_tier,
)

from folioai.config.prompts import PROTECTED_PROMPTS, SecurePrompt

from folioai.config.validation_constants import (
    VALID_IMPORT_FORMATS,
    VALID_ACTIONS,
    ACTION_CREATE_PORTFOLIO,
    ACTION_USE_AI,
    ACTION_GENERAL,
)

__all__ = [
    # Profile schemas
    "Profile",
    "PersonalInfo",
    "ContactInfo",
    "WorkExperience",
    "Education",
    "Certification",
    "Language",
    "Project",
    "VolunteerExperience",
    # Request schemas
    "ProfileImportRequest",
    "PortfolioCreateRequest",
    "GenerationRequest",
    "UsageUpdateRequest",
    # Settings
    "PaywallConfig",
    "SecurityConfig",
    # Tiers
    "SUBSCRIPTION_TIERS",
    "SubscriptionTier",
    "get_tier",
    # Prompts
    "PROTECTED_PROMPTS",
    "SecurePrompt",
    # Validation constants
    "VALID_IMPORT_FORMATS",
    "VALID_ACTIONS",
    "ACTION_CREATE_PORTFOLIO",
    "ACTION_USE_AI",
    "ACTION_GENERAL",
]
