"""
Billing API Routes.

Routes for the tier catalog, access checks, usage metering and the upgrade redirect.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from folioai.api.dependencies import get_entitlement_gate
from folioai.config.request_schemas import UsageUpdateRequest
from folioai.config.subscription_tiers import SUBSCRIPTION_TIERS
from folioai.services.entitlement import EntitlementGate
from folioai.utils.exceptions import ProfileNotFoundError
from folioai.utils.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])


@router.get("/tiers")
async def list_tiers(gate: EntitlementGate = Depends(get_entitlement_gate)) -> JSONResponse:
    """Subscription tier catalog (limits of -1 are unlimited) and the trial length."""
    tiers = [gate.resolve_tier(tier.id) for tier in SUBSCRIPTION_TIERS]
    return JSONResponse(
        content={
            "tiers": [tier.model_dump(mode="json") for tier in tiers],
            "trial_days": gate.config.trial_days,
        }
    )


@router.get("/access/{user_id}")
def check_access(
    user_id: str,
    action: Literal["create_portfolio", "use_ai", "general"] = Query("general"),
    gate: EntitlementGate = Depends(get_entitlement_gate),
) -> JSONResponse:
    set_correlation_id(user_id=user_id)
    decision = gate.check_access(user_id, action)
    return JSONResponse(content=decision.model_dump(mode="json"))


@router.post("/usage")
def update_usage(
    payload: UsageUpdateRequest,
    gate: EntitlementGate = Depends(get_entitlement_gate),
) -> JSONResponse:
    """Add to the usage counter metered by ``action``.

    Raises:
        HTTPException 404: No record exists for the user.
        ProfileStoreError: The store could not be written (503).
    """
    set_correlation_id(user_id=payload.user_id)
    try:
        gate.update_usage(payload.user_id, payload.action, payload.amount)
    except ProfileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found"
        ) from e

    return JSONResponse(
        content={
            "user_id": payload.user_id,
            "action": payload.action,
            "amount": payload.amount,
        }
    )


@router.get("/subscription/{user_id}")
def require_subscription(
    user_id: str,
    return_path: str = Query("/"),
    gate: EntitlementGate = Depends(get_entitlement_gate),
):
    """200 when the user has access, otherwise 303 to the upgrade page."""
    set_correlation_id(user_id=user_id)
    redirect = gate.require_subscription(user_id, return_path)
    if redirect is None:
        return JSONResponse(content={"allowed": True})

    logger.info(
        "Redirecting to upgrade",
        extra={"extra_fields": {"user_id": user_id, "reason": redirect.reason}},
    )
    return RedirectResponse(
        url=redirect.location, status_code=status.HTTP_303_SEE_OTHER
    )
