"""
FolioAI Profile Import Pipeline.

This module orchestrates the import of a raw professional profile into the canonical
profile used for portfolio generation:

1. ProfileNormalizer: Converts a structured record or freeform text into a Profile
2. Validator: Checks the profile for the fields a portfolio cannot do without
3. Optimizer: Orders and trims the profile for the generation prompt budget

The pipeline uses a decorator-based approach for consistent logging across all steps.
"""

from functools import wraps
from typing import Any, Callable, Dict, Mapping, Union

from folioai.config.profile_schemas import Profile
from folioai.services.normalizer import ProfileNormalizer
from folioai.services.optimizer import optimize_profile
from folioai.services.validator import ValidationReport, validate_profile
from folioai.utils.logger import get_logger, log_performance

logger = get_logger(__name__)

_normalizer = ProfileNormalizer()


def pipeline_step(step_name: str, step_number: int, total_steps: int):
    """
    Decorator for pipeline steps that provides consistent logging and timing.

    Errors are logged with the step that raised them and propagate unchanged,
    so callers can map them to responses by type.

    Args:
        step_name: Human-readable name of the step
        step_number: Step number (1-indexed)
        total_steps: Total number of steps in pipeline
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger.info(f" Step {step_number}/{total_steps}: {step_name}...")
            with log_performance(step_name, step=step_number):
                result = func(*args, **kwargs)
            logger.info(
                f" Step {step_number}/{total_steps}: {step_name} completed successfully"
            )
            return result

        return wrapper

    return decorator


@pipeline_step("Normalizing profile", 1, 3)
def _step1_normalize(data: Any, mode: str) -> Profile:
    return _normalizer.parse(data, mode)


@pipeline_step("Validating profile", 2, 3)
def _step2_validate(profile: Profile) -> ValidationReport:
    return validate_profile(profile)


@pipeline_step("Optimizing profile", 3, 3)
def _step3_optimize(profile: Profile) -> Profile:
    return optimize_profile(profile)


def import_profile(
    data: Union[str, bytes, Mapping[str, Any]],
    mode: str = "text",
    optimize: bool = True,
    strict: bool = False,
) -> Dict[str, Any]:
    """
    Run the complete import pipeline on a raw profile.

    Args:
        data: Raw profile. A JSON string/bytes or decoded mapping for mode "json",
            profile text for mode "text".
        mode (str): "json" or "text".
        optimize (bool): Apply the optimizer to the normalized profile.
        strict (bool): Raise ValidationFailure instead of returning an invalid report.

    Returns:
        Dict: Dictionary containing:
            - "profile" (Profile): The canonical (and optionally optimized) profile
            - "validation" (ValidationReport): The validation result

    Raises:
        ParseError: If structured input is malformed.
        ValidationFailure: If strict and the profile fails validation.
    """

    profile = _step1_normalize(data, mode)
    report = _step2_validate(profile)

    if strict:
        report.raise_for_errors()

    if optimize:
        profile = _step3_optimize(profile)

    logger.info(
        " Profile import completed",
        extra={"extra_fields": {"import_format": mode, "valid": report.valid}},
    )
    return {"profile": profile, "validation": report}
