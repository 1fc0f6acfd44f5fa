"""
Validation Constants for Profile Import and Entitlement Checks.

This module contains the fixed keyword sets, limits and option values used by the
normalizer, optimizer, entitlement gate and request schemas.
"""

# Valid import formats ("json" = structured record, "text" = freeform profile text)
VALID_IMPORT_FORMATS = {"json", "text"}

# Actions the entitlement gate knows how to meter
ACTION_CREATE_PORTFOLIO = "create_portfolio"
ACTION_USE_AI = "use_ai"
ACTION_GENERAL = "general"
VALID_ACTIONS = {ACTION_CREATE_PORTFOLIO, ACTION_USE_AI, ACTION_GENERAL}

# Usage counter in the profile store for each metered action
USAGE_COUNTER_FIELDS = {
    ACTION_CREATE_PORTFOLIO: "portfolio_count",
    ACTION_USE_AI: "ai_credits_used",
}

# Subscription status that grants access when a subscription is required
ACTIVE_SUBSCRIPTION_STATUS = "active"

# Valid language proficiency levels
VALID_PROFICIENCIES = {"elementary", "limited", "professional", "full", "native"}
DEFAULT_PROFICIENCY = "professional"

# Section keywords recognised by the text-mode segmenter (checked in this order)
SECTION_KEYWORDS = (
    "experience",
    "education",
    "skills",
    "certifications",
    "projects",
    "volunteer",
    "about",
    "summary",
)
# Lines this long or longer are never treated as section headers
SECTION_HEADER_MAX_LENGTH = 50
HEADER_SECTION = "header"

# Verbs that open an achievement sentence in an experience description
ACHIEVEMENT_VERBS = (
    "achieved",
    "accomplished",
    "delivered",
    "increased",
    "decreased",
    "improved",
    "reduced",
)

# Size bounds enforced by the optimizer before generation
MAX_EXPERIENCE_ENTRIES = 10
MAX_SKILLS = 20
MAX_PROJECTS = 6

# Characters of a rejected prompt that may appear in the security log
PROMPT_LOG_EXCERPT_LENGTH = 100
