"""
AWS Lambda Handler for the FolioAI FastAPI Application.

Wraps the FastAPI app with Mangum so API Gateway and Function URL events are served
by the same routes as the local uvicorn server.

Lambda Configuration:
    Handler: lambda_handler.handler
    Runtime: Python 3.12
    Timeout: 29 seconds (API Gateway limit)

Environment Variables:
    OPENAI_API_KEY: OpenAI API key for AI generation
    PROFILE_TABLE_NAME: DynamoDB table holding user subscription records
    ENABLE_PAYWALL / REQUIRE_SUBSCRIPTION: Entitlement switches
    FRONTEND_URL: Frontend domain for CORS configuration (optional)
"""

from mangum import Mangum

from folioai.api.server import app
from folioai.utils.logger import configure_logging, get_logger, set_correlation_id

logger = get_logger(__name__)

api_handler = Mangum(
    app,
    lifespan="off",
    text_mime_types=[
        "application/json",
        "text/plain",
    ],
)


def handler(event, context):
    """Main Lambda handler: attach the Lambda context to logs and serve the request."""
    configure_logging(context)
    set_correlation_id(request_id=getattr(context, "aws_request_id", None))
    logger.info("Routing to API handler")
    return api_handler(event, context)
