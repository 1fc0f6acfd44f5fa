"""
Profile Store Adapters for User Subscription Records.

The entitlement gate reads and meters users through a small key/value interface
keyed by user id. Two adapters are provided:

- DynamoDBProfileStore: production store backed by a DynamoDB table
- InMemoryProfileStore: process-local store for local development and tests

Record fields read by the gate:
    subscription_tier, subscription_status, stripe_customer_id,
    portfolio_count, ai_credits_used

Environment Variables:
    PROFILE_TABLE_NAME: DynamoDB table holding user records (partition key "user_id")

Note:
    The DynamoDB resource is initialized lazily to avoid import-time AWS
    dependencies. Usage increments are atomic per user: DynamoDB uses an ADD
    update expression, the in-memory store a lock around the read-modify-write.
"""

import threading
from decimal import Decimal
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from folioai.utils.exceptions import ProfileNotFoundError, ProfileStoreError
from folioai.utils.logger import get_logger

logger = get_logger(__name__)

USER_RECORD_DEFAULTS = {
    "subscription_tier": "free",
    "subscription_status": "inactive",
    "stripe_customer_id": None,
    "portfolio_count": 0,
    "ai_credits_used": 0,
}


class ProfileStore:
    """Interface of the external user-record store."""

    def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        """Fetch a user record.

        Raises:
            ProfileNotFoundError: If no record exists for the user.
            ProfileStoreError: If the store cannot be read.
        """
        raise NotImplementedError

    def increment_usage(self, user_id: str, field: str, amount: int = 1) -> None:
        """Atomically add ``amount`` to a usage counter of a user record.

        Raises:
            ProfileNotFoundError: If no record exists for the user.
            ProfileStoreError: If the store cannot be written.
        """
        raise NotImplementedError


class InMemoryProfileStore(ProfileStore):
    """Process-local user records guarded by a single lock."""

    def __init__(self, records: Optional[Dict[str, Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        for user_id, record in (records or {}).items():
            self.put_user_profile(user_id, record)

    def put_user_profile(self, user_id: str, record: Dict[str, Any]) -> None:
        with self._lock:
            self._records[user_id] = {**USER_RECORD_DEFAULTS, **record}

    def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                raise ProfileNotFoundError(f"User profile not found: {user_id}")
            return dict(record)

    def increment_usage(self, user_id: str, field: str, amount: int = 1) -> None:
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                raise ProfileNotFoundError(f"User profile not found: {user_id}")
            record[field] = int(record.get(field) or 0) + amount


class DynamoDBProfileStore(ProfileStore):
    """User records stored in DynamoDB, one item per user keyed by "user_id"."""

    def __init__(self, table_name: str, dynamodb_resource: Optional[Any] = None):
        self.table_name = table_name
        self._dynamodb_resource = dynamodb_resource

    def get_dynamodb_resource(self) -> Any:
        """Get or create the DynamoDB resource using lazy initialization."""
        if self._dynamodb_resource is None:
            import boto3

            self._dynamodb_resource = boto3.resource("dynamodb")
        return self._dynamodb_resource

    def _table(self) -> Any:
        return self.get_dynamodb_resource().Table(self.table_name)

    def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            response = self._table().get_item(Key={"user_id": user_id})
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to get user profile from DynamoDB",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            raise ProfileStoreError(f"Failed to read user profile: {e}") from e

        if "Item" not in response:
            raise ProfileNotFoundError(f"User profile not found: {user_id}")

        # DynamoDB returns numbers as Decimal
        item = {
            key: int(value) if isinstance(value, Decimal) else value
            for key, value in response["Item"].items()
        }
        return {**USER_RECORD_DEFAULTS, **item}

    def increment_usage(self, user_id: str, field: str, amount: int = 1) -> None:
        try:
            self._table().update_item(
                Key={"user_id": user_id},
                UpdateExpression="ADD #counter :amount",
                ConditionExpression="attribute_exists(user_id)",
                ExpressionAttributeNames={"#counter": field},
                ExpressionAttributeValues={":amount": amount},
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ConditionalCheckFailedException":
                raise ProfileNotFoundError(f"User profile not found: {user_id}") from e
            logger.error(
                "Failed to update usage in DynamoDB",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "field": field,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            raise ProfileStoreError(f"Failed to update usage: {e}") from e
        except BotoCoreError as e:
            logger.error(
                "Failed to update usage in DynamoDB",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "field": field,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            raise ProfileStoreError(f"Failed to update usage: {e}") from e

        logger.info(
            "Updated usage counter",
            extra={"extra_fields": {"user_id": user_id, "field": field, "amount": amount}},
        )
