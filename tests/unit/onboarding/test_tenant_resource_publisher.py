import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.modules.onboarding.domain.publisher import TenantResourcePublisher
from app.schemas.onboarding import ResourceDescriptor

PIPELINE = ResourceDescriptor(
    kind="CODE_PIPELINE",
    name="p1",
    arn="arn:aws:codepipeline:us-east-1:123456789012:p1",
    console_url="https://us-east-1.console.aws.amazon.com/codesuite/codepipeline/pipelines/p1/view?region=us-east-1",
)


def test_build_detail_serializes_resources_map():
    detail = TenantResourcePublisher.build_detail("abc12345", {"SERVICE_WEB_CODE_PIPELINE": PIPELINE})

    assert detail["tenantId"] == "abc12345"
    assert json.loads(detail["resources"]) == {
        "SERVICE_WEB_CODE_PIPELINE": {
            "name": "p1",
            "arn": "arn:aws:codepipeline:us-east-1:123456789012:p1",
            "consoleUrl": PIPELINE.console_url,
        }
    }


@pytest.mark.asyncio
async def test_publish_puts_tenant_resources_change_event():
    events = MagicMock()
    events.put_event = AsyncMock(return_value="evt-1")
    publisher = TenantResourcePublisher(events, source="saas-boost")

    event_id = await publisher.publish("abc12345", {"SERVICE_WEB_CODE_PIPELINE": PIPELINE})

    assert event_id == "evt-1"
    events.put_event.assert_awaited_once()
    kwargs = events.put_event.call_args.kwargs
    assert kwargs["source"] == "saas-boost"
    assert kwargs["detail_type"] == "TENANT_RESOURCES_CHANGE"
    assert kwargs["detail"]["tenantId"] == "abc12345"
