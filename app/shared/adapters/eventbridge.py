"""
EventBridge Adapter (Native Async)

Puts single application events on the platform event bus.
"""

import json
from typing import Any, Dict, Optional

import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.shared.adapters.aws_utils import aws_error_code, get_aws_client, to_service_error
from app.shared.core.exceptions import ServiceError

logger = structlog.get_logger()


class EventBridgeAdapter:
    def __init__(
        self,
        event_bus: str,
        region: Optional[str] = None,
        session: Optional[aioboto3.Session] = None,
    ):
        self.event_bus = event_bus
        self.region = region
        self.session = session or aioboto3.Session()

    async def put_event(self, source: str, detail_type: str, detail: Dict[str, Any]) -> str:
        """
        Publish one event and return its EventBridge event id.
        A rejected entry is a failure even though the API call itself succeeded.
        """
        entry = {
            "EventBusName": self.event_bus,
            "Source": source,
            "DetailType": detail_type,
            "Detail": json.dumps(detail),
        }
        try:
            async with get_aws_client("events", session=self.session, region=self.region) as events:
                response = await events.put_events(Entries=[entry])
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "eventbridge_put_events_failed",
                event_bus=self.event_bus,
                detail_type=detail_type,
                error=str(e),
                code=aws_error_code(e),
            )
            raise to_service_error("events:PutEvents", e) from e

        if response.get("FailedEntryCount", 0):
            failed = (response.get("Entries") or [{}])[0]
            logger.error(
                "eventbridge_entry_rejected",
                event_bus=self.event_bus,
                detail_type=detail_type,
                code=failed.get("ErrorCode"),
                error=failed.get("ErrorMessage"),
            )
            raise ServiceError(
                message=f"EventBridge rejected {detail_type} event: {failed.get('ErrorMessage')}",
                operation="events:PutEvents",
                details={"aws_error_code": failed.get("ErrorCode")},
            )

        event_id = str((response.get("Entries") or [{}])[0].get("EventId", ""))
        logger.info(
            "eventbridge_event_published",
            event_bus=self.event_bus,
            detail_type=detail_type,
            event_id=event_id,
        )
        return event_id
