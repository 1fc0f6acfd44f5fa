"""
Portfolio API Routes.

Gated portfolio creation: the user's tier is checked before anything is imported,
and the portfolio counter is only incremented once the profile has been imported
and validated.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from folioai.api.dependencies import get_entitlement_gate
from folioai.config.request_schemas import PortfolioCreateRequest
from folioai.config.validation_constants import ACTION_CREATE_PORTFOLIO
from folioai.main import import_profile
from folioai.services.entitlement import EntitlementGate
from folioai.utils.logger import get_logger, log_performance, set_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["portfolios"])


@router.post("/portfolios", status_code=status.HTTP_201_CREATED)
def create_portfolio(
    payload: PortfolioCreateRequest,
    gate: EntitlementGate = Depends(get_entitlement_gate),
) -> JSONResponse:
    """Create a portfolio from a raw profile on behalf of a metered user.

    Steps:
        1. Entitlement check for "create_portfolio"
        2. Strict import (normalize, validate, optimize)
        3. Increment the user's portfolio counter

    Returns:
        JSONResponse 201 with the optimized profile ready for generation.

    Raises:
        AccessDenied: The user's tier does not allow another portfolio (402).
        ParseError: Structured data is malformed (400).
        ValidationFailure: The imported profile is incomplete (422).
        ProfileStoreError: The usage counter could not be written (503).
    """
    set_correlation_id(user_id=payload.user_id)

    gate.check_access(payload.user_id, ACTION_CREATE_PORTFOLIO).raise_for_denial()

    result = import_profile(
        payload.data, payload.format, optimize=payload.optimize, strict=True
    )

    with log_performance("update_usage", action=ACTION_CREATE_PORTFOLIO):
        gate.update_usage(payload.user_id, ACTION_CREATE_PORTFOLIO)

    logger.info(
        "Portfolio created",
        extra={"extra_fields": {"user_id": payload.user_id}},
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "user_id": payload.user_id,
            "profile": result["profile"].model_dump(mode="json", by_alias=True),
        },
    )
