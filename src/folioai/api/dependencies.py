"""
Shared Service Instances for the API.

Each getter builds its service once per process and is injected into routes with
FastAPI's Depends, so tests can replace them through app.dependency_overrides.
"""

from functools import lru_cache

from folioai.config.settings import PROFILE_TABLE_NAME, PaywallConfig
from folioai.services.entitlement import EntitlementGate
from folioai.services.prompt_security import (
    PromptSecurityMediator,
    create_security_mediator,
)
from folioai.utils.logger import get_logger
from folioai.utils.profile_store import (
    DynamoDBProfileStore,
    InMemoryProfileStore,
    ProfileStore,
)

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_profile_store() -> ProfileStore:
    """DynamoDB store when PROFILE_TABLE_NAME is set, else an in-memory store."""
    if PROFILE_TABLE_NAME:
        logger.info(
            "Using DynamoDB profile store",
            extra={"extra_fields": {"table_name": PROFILE_TABLE_NAME}},
        )
        return DynamoDBProfileStore(PROFILE_TABLE_NAME)

    logger.warning("PROFILE_TABLE_NAME not set, using in-memory profile store")
    return InMemoryProfileStore()


@lru_cache(maxsize=1)
def get_entitlement_gate() -> EntitlementGate:
    return EntitlementGate(get_profile_store(), PaywallConfig.from_env())


@lru_cache(maxsize=1)
def get_security_mediator() -> PromptSecurityMediator:
    return create_security_mediator()
