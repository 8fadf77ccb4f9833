import json

import pytest
from unittest.mock import AsyncMock
from botocore.exceptions import ClientError, NoCredentialsError

from app.shared.adapters.eventbridge import EventBridgeAdapter
from app.shared.core.exceptions import ServiceError
from tests.utils import mock_session_for


@pytest.fixture
def events_client():
    client = AsyncMock()
    client.put_events.return_value = {"FailedEntryCount": 0, "Entries": [{"EventId": "evt-1"}]}
    return client


@pytest.fixture
def adapter(events_client):
    return EventBridgeAdapter("sb-test-events", session=mock_session_for(events_client))


@pytest.mark.asyncio
async def test_put_event(adapter, events_client):
    event_id = await adapter.put_event("saas-boost", "TENANT_RESOURCES_CHANGE", {"tenantId": "t1"})

    assert event_id == "evt-1"
    events_client.put_events.assert_awaited_once_with(
        Entries=[
            {
                "EventBusName": "sb-test-events",
                "Source": "saas-boost",
                "DetailType": "TENANT_RESOURCES_CHANGE",
                "Detail": json.dumps({"tenantId": "t1"}),
            }
        ]
    )


@pytest.mark.asyncio
async def test_put_event_rejected_entry(adapter, events_client):
    events_client.put_events.return_value = {
        "FailedEntryCount": 1,
        "Entries": [{"ErrorCode": "InternalFailure", "ErrorMessage": "try again"}],
    }
    with pytest.raises(ServiceError) as exc:
        await adapter.put_event("saas-boost", "TENANT_RESOURCES_CHANGE", {})
    assert exc.value.details["aws_error_code"] == "InternalFailure"


@pytest.mark.asyncio
async def test_put_event_client_error(adapter, events_client):
    events_client.put_events.side_effect = ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "no bus"}}, "PutEvents"
    )
    with pytest.raises(ServiceError) as exc:
        await adapter.put_event("saas-boost", "TENANT_RESOURCES_CHANGE", {})
    assert exc.value.operation == "events:PutEvents"
    assert exc.value.details["aws_error_code"] == "ResourceNotFoundException"


@pytest.mark.asyncio
async def test_client_creation_failure_is_service_error(events_client):
    session = mock_session_for(events_client)
    session.client.return_value.__aenter__.side_effect = NoCredentialsError()
    adapter = EventBridgeAdapter("sb-test-events", session=session)

    with pytest.raises(ServiceError) as exc:
        await adapter.put_event("saas-boost", "TENANT_RESOURCES_CHANGE", {"tenantId": "t1"})

    assert exc.value.operation == "events:PutEvents"
    assert isinstance(exc.value.__cause__, NoCredentialsError)
    events_client.put_events.assert_not_awaited()
