"""
Trims and orders a canonical profile for portfolio generation.

Downstream generation works within a bounded prompt budget, so the size bounds are
enforced here, deterministically, instead of being left to the model.

FUNCTIONS:
    optimize_profile   (public)
    optimize_summary   (public)
"""

from folioai.config.profile_schemas import Profile
from folioai.config.validation_constants import (
    MAX_EXPERIENCE_ENTRIES,
    MAX_PROJECTS,
    MAX_SKILLS,
)
from folioai.utils.normalization import collapse_whitespace, date_sort_key


def optimize_summary(summary: str) -> str:
    """Collapse repeated whitespace and excess blank lines for web display."""
    return collapse_whitespace(summary)


def optimize_profile(profile: Profile) -> Profile:
    """Return a trimmed copy of the profile.

    - summary whitespace is collapsed
    - experience is sorted by start date, most recent first (empty or unparseable
      dates count as the oldest), and cut to the 10 most recent
    - skills are cut to the first 20, in the order given
    - projects are cut to the first 6

    The input profile is left untouched, and optimizing an optimized profile
    returns an equal profile.

    Args:
        profile (Profile): The canonical profile.

    Returns:
        Profile: A new, optimized profile.
    """

    experience = sorted(
        profile.experience,
        key=lambda exp: date_sort_key(exp.start_date),
        reverse=True,
    )

    personal = profile.personal.model_copy(
        update={"summary": optimize_summary(profile.personal.summary)}
    )
    return profile.model_copy(
        update={
            "personal": personal,
            "experience": experience[:MAX_EXPERIENCE_ENTRIES],
            "skills": list(profile.skills[:MAX_SKILLS]),
            "projects": list(profile.projects[:MAX_PROJECTS]),
        }
    )
