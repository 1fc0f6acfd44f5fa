"""
Request Schemas for API Payload Validation.

This module defines Pydantic models for validating incoming API payloads before they
reach the services. Only the request envelope is validated here; the profile content
itself is deliberately loose and is absorbed by the ProfileNormalizer.

Key Models:
    - ProfileImportRequest: Raw profile (structured record or text) to import
    - PortfolioCreateRequest: Import request on behalf of a metered user
    - GenerationRequest: User prompt for a protected AI generation
    - UsageUpdateRequest: Manual usage counter increment
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from folioai.config.validation_constants import VALID_ACTIONS


class ProfileImportRequest(BaseModel):
    """
    A raw profile to import.

    Examples:
        {"format": "json", "data": {"fullName": "Jane Doe", "experience": [...]}}
        {"format": "json", "data": "{\\"name\\": \\"Jane Doe\\"}"}
        {"format": "text", "data": "Jane Doe\\nSenior Engineer\\n..."}
    """

    format: Literal["json", "text"] = "text"
    data: Union[str, Dict[str, Any]]
    optimize: bool = True

    @model_validator(mode="after")
    def validate_data_for_format(self) -> "ProfileImportRequest":
        """Text imports must carry a string."""
        if self.format == "text" and not isinstance(self.data, str):
            raise ValueError("data must be a string when format is 'text'")
        return self


class PortfolioCreateRequest(ProfileImportRequest):
    user_id: str = Field(..., min_length=1, max_length=128)


class GenerationRequest(BaseModel):
    """
    A user request for AI generation under a protected prompt.

    The prompt text is validated for injection and length by the security mediator,
    not here, so that rejections are logged as security events.
    """

    user_id: str = Field(..., min_length=1, max_length=128)
    prompt_id: str = Field(..., min_length=1, max_length=64)
    prompt: str
    model: str = Field(..., min_length=1, max_length=128)
    context: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "user-123",
                "prompt_id": "PORTFOLIO_GENERATOR",
                "prompt": "Create a minimal dark theme portfolio",
                "model": "gpt-4",
            }
        }
    )


class UsageUpdateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    action: str
    amount: int = Field(1, ge=1)

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        if v not in VALID_ACTIONS:
            raise ValueError(f"Invalid action: {v}. Valid actions: {sorted(VALID_ACTIONS)}")
        return v
