"""
Generation API Routes.

Secured AI generation. User text only reaches the generation backend through the
prompt security mediator, and an AI credit is only charged for a generation that
actually succeeded.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from folioai.api.dependencies import get_entitlement_gate, get_security_mediator
from folioai.config.request_schemas import GenerationRequest
from folioai.config.validation_constants import ACTION_USE_AI
from folioai.services.entitlement import EntitlementGate
from folioai.services.prompt_security import PromptSecurityMediator
from folioai.utils.llms import call_llm
from folioai.utils.logger import get_logger, log_performance, set_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])


@router.post("/generate")
def generate(
    payload: GenerationRequest,
    gate: EntitlementGate = Depends(get_entitlement_gate),
    mediator: PromptSecurityMediator = Depends(get_security_mediator),
) -> JSONResponse:
    """Run a user prompt behind a protected system prompt.

    Steps:
        1. Entitlement check for "use_ai"
        2. Rate limit, model allow-list, prompt validation and composition
        3. Generation backend call
        4. Increment the user's AI credit counter

    Returns:
        JSONResponse:
            {
                "content": "generated text",
                "model": "gpt-4",
                "prompt_id": "PORTFOLIO_GENERATOR"
            }

    Raises:
        AccessDenied: No AI credits left or no valid subscription (402).
        RateLimited: Hourly request window exhausted (429).
        PromptRejected: Model, prompt text or prompt id refused (400).
        IntegrityFailure: Protected prompt registry is corrupt (500).
        GenerationError: Backend call failed (502).
    """
    set_correlation_id(user_id=payload.user_id)

    gate.check_access(payload.user_id, ACTION_USE_AI).raise_for_denial()

    secured = mediator.secure_ai_request(
        payload.user_id,
        payload.prompt_id,
        payload.prompt,
        payload.model,
        payload.context,
    )
    secured.raise_for_denial()

    with log_performance("llm_call", model=payload.model, prompt_id=payload.prompt_id):
        content = call_llm(secured.prompt, payload.model)

    gate.update_usage(payload.user_id, ACTION_USE_AI)

    return JSONResponse(
        content={
            "content": content,
            "model": payload.model,
            "prompt_id": payload.prompt_id,
        }
    )
