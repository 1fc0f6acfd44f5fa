# ---------- TESTS FOR PROFILE STORES ----------

from decimal import Decimal

import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError, EndpointConnectionError

from folioai.utils.exceptions import ProfileNotFoundError, ProfileStoreError
from folioai.utils.profile_store import DynamoDBProfileStore, InMemoryProfileStore


# Mock DynamoDB table
@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    table = MagicMock()
    table.get_item = MagicMock(
        return_value={
            "Item": {
                "user_id": "user-1",
                "subscription_tier": "pro",
                "subscription_status": "active",
                "portfolio_count": Decimal("3"),
            }
        }
    )
    table.update_item = MagicMock()
    return table


# Mock DynamoDB resource
@pytest.fixture
def mock_dynamodb_resource(mock_dynamodb_table):
    """Create a mock DynamoDB resource."""
    resource = MagicMock()
    resource.Table = MagicMock(return_value=mock_dynamodb_table)
    return resource


@pytest.fixture
def store(mock_dynamodb_resource):
    return DynamoDBProfileStore("folioai-users", dynamodb_resource=mock_dynamodb_resource)


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "UpdateItem")


def test_dynamodb_get_user_profile(store, mock_dynamodb_resource, mock_dynamodb_table):
    """Test reading a record converts Decimals and fills defaults."""
    record = store.get_user_profile("user-1")

    mock_dynamodb_resource.Table.assert_called_with("folioai-users")
    mock_dynamodb_table.get_item.assert_called_once_with(Key={"user_id": "user-1"})
    assert record["portfolio_count"] == 3
    assert isinstance(record["portfolio_count"], int)
    assert record["ai_credits_used"] == 0
    assert record["subscription_tier"] == "pro"


def test_dynamodb_get_user_profile_missing(store, mock_dynamodb_table):
    mock_dynamodb_table.get_item.return_value = {}

    with pytest.raises(ProfileNotFoundError):
        store.get_user_profile("user-1")


def test_dynamodb_get_user_profile_error(store, mock_dynamodb_table):
    mock_dynamodb_table.get_item.side_effect = _client_error("ProvisionedThroughputExceededException")

    with pytest.raises(ProfileStoreError):
        store.get_user_profile("user-1")


def test_dynamodb_increment_usage_is_atomic_add(store, mock_dynamodb_table):
    store.increment_usage("user-1", "ai_credits_used", 2)

    kwargs = mock_dynamodb_table.update_item.call_args.kwargs
    assert kwargs["Key"] == {"user_id": "user-1"}
    assert kwargs["UpdateExpression"] == "ADD #counter :amount"
    assert kwargs["ExpressionAttributeNames"] == {"#counter": "ai_credits_used"}
    assert kwargs["ExpressionAttributeValues"] == {":amount": 2}
    assert kwargs["ConditionExpression"] == "attribute_exists(user_id)"


def test_dynamodb_increment_usage_missing_user(store, mock_dynamodb_table):
    mock_dynamodb_table.update_item.side_effect = _client_error(
        "ConditionalCheckFailedException"
    )

    with pytest.raises(ProfileNotFoundError):
        store.increment_usage("user-1", "portfolio_count")


def test_dynamodb_increment_usage_connection_error(store, mock_dynamodb_table):
    mock_dynamodb_table.update_item.side_effect = EndpointConnectionError(
        endpoint_url="https://dynamodb.eu-north-1.amazonaws.com"
    )

    with pytest.raises(ProfileStoreError):
        store.increment_usage("user-1", "portfolio_count")


def test_in_memory_store_roundtrip():
    store = InMemoryProfileStore({"user-1": {"subscription_tier": "pro"}})

    store.increment_usage("user-1", "portfolio_count")
    store.increment_usage("user-1", "portfolio_count", 2)

    record = store.get_user_profile("user-1")
    assert record["portfolio_count"] == 3
    assert record["subscription_status"] == "inactive"


def test_in_memory_store_returns_copies():
    store = InMemoryProfileStore({"user-1": {}})
    store.get_user_profile("user-1")["portfolio_count"] = 99

    assert store.get_user_profile("user-1")["portfolio_count"] == 0


def test_in_memory_store_missing_user():
    store = InMemoryProfileStore()

    with pytest.raises(ProfileNotFoundError):
        store.get_user_profile("nobody")
    with pytest.raises(ProfileNotFoundError):
        store.increment_usage("nobody", "portfolio_count")
