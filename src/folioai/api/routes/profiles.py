"""
Profile API Routes.

Routes for importing, validating and optimizing profiles. These routes are not
metered; metered portfolio creation lives in portfolios.py.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from folioai.config.profile_schemas import Profile
from folioai.config.request_schemas import ProfileImportRequest
from folioai.main import import_profile
from folioai.services.optimizer import optimize_profile
from folioai.services.validator import validate_profile
from folioai.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.post("/import")
async def import_profile_route(payload: ProfileImportRequest) -> JSONResponse:
    """Import a raw profile and return it with its validation report.

    An invalid profile is still returned (status 200) so the client can show
    the errors next to what was extracted.

    Returns:
        JSONResponse:
            {
                "profile": {...},      # canonical profile, camelCase keys
                "validation": {"valid": bool, "errors": [...]}
            }

    Raises:
        ParseError: Structured data is not a valid JSON object (400).
    """
    result = import_profile(payload.data, payload.format, optimize=payload.optimize)
    return JSONResponse(
        content={
            "profile": result["profile"].model_dump(mode="json", by_alias=True),
            "validation": result["validation"].model_dump(mode="json"),
        }
    )


@router.post("/validate")
async def validate_profile_route(profile: Profile) -> JSONResponse:
    report = validate_profile(profile)
    return JSONResponse(content=report.model_dump(mode="json"))


@router.post("/optimize")
async def optimize_profile_route(profile: Profile) -> JSONResponse:
    optimized = optimize_profile(profile)
    return JSONResponse(content=optimized.model_dump(mode="json", by_alias=True))
