"""
Checks a canonical profile for completeness before portfolio generation.

FUNCTIONS:
    validate_profile   (public)
"""

from typing import List

from pydantic import BaseModel

from folioai.config.profile_schemas import Profile
from folioai.utils.exceptions import ValidationFailure
from folioai.utils.logger import get_logger

logger = get_logger(__name__)


class ValidationReport(BaseModel):
    """All rule violations found in a profile (empty when valid)."""

    valid: bool
    errors: List[str] = []

    def raise_for_errors(self) -> None:
        """Raise ValidationFailure carrying every error if the profile is invalid."""
        if not self.valid:
            raise ValidationFailure(self.errors)


def validate_profile(profile: Profile) -> ValidationReport:
    """Validate a canonical profile.

    Every rule is evaluated independently, so the report lists all violations at
    once rather than stopping at the first.

    Rules:
        - name is required
        - headline is required
        - at least one work experience entry is required
        - every experience entry needs both company and title (reported per entry,
          1-based)

    Args:
        profile (Profile): The profile to check.

    Returns:
        ValidationReport: valid flag and the ordered list of error messages.
    """

    errors = []

    if not profile.personal.name.strip():
        errors.append("Name is required")

    if not profile.personal.headline.strip():
        errors.append("Professional headline is required")

    if not profile.experience:
        errors.append("At least one work experience entry is required")

    for index, exp in enumerate(profile.experience):
        if not exp.company.strip() or not exp.title.strip():
            errors.append(f"Experience entry {index + 1} is missing company or title")

    if errors:
        logger.info(
            "Profile validation failed",
            extra={"extra_fields": {"error_count": len(errors)}},
        )

    return ValidationReport(valid=not errors, errors=errors)
