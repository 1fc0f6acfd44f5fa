"""
FastAPI server that exposes the FolioAI backend as HTTP endpoints.

The server receives raw profiles and generation requests from the frontend,
validates them, checks the user's subscription and passes them to the import
pipeline or the prompt security layer.

To run the server:
    python -m uvicorn folioai.api.server:app --reload --app-dir src
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folioai.api.handlers.exceptions import register_exception_handlers
from folioai.api.middleware.logging import log_requests_middleware
from folioai.api.routes import billing, generation, portfolios, profiles
from folioai.utils.logger import configure_logging

# ------------- FastAPI Setup -------------

configure_logging()

# Create the FastAPI app
app = FastAPI(
    title="FolioAI Backend",
    description="API for profile import, paywall checks and secured AI generation",
    version="1.0",
)

# Get frontend URL from environment variable, or use defaults
FRONTEND_URL = os.environ.get("FRONTEND_URL", "")

origins = [
    "http://localhost:3000",  # local development
    "http://127.0.0.1:3000",  # local development
]

# Add production frontend URL from environment variable if provided
if FRONTEND_URL and FRONTEND_URL not in origins:
    origins.append(FRONTEND_URL)

# For development, allow all origins if no production URL is set
if not FRONTEND_URL:
    origins.append("*")

# Add the CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.middleware("http")(log_requests_middleware)

# Add exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(profiles.router)
app.include_router(portfolios.router)
app.include_router(generation.router)
app.include_router(billing.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# For running as standalone server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
