import json
from typing import Dict

import structlog

from app.schemas.onboarding import ResourceDescriptor
from app.shared.adapters.eventbridge import EventBridgeAdapter
from app.shared.core.constants import TENANT_RESOURCES_CHANGE

logger = structlog.get_logger()


class TenantResourcePublisher:
    """
    Announces newly provisioned tenant resources on the event bus.

    The tenant service merges the resources map into the tenant record, so the
    event only carries what this stack produced.
    """

    def __init__(self, events: EventBridgeAdapter, source: str = "saas-boost"):
        self.events = events
        self.source = source

    @staticmethod
    def build_detail(tenant_id: str, resources: Dict[str, ResourceDescriptor]) -> Dict[str, str]:
        # The tenant service expects the resources map as a JSON string
        return {
            "tenantId": tenant_id,
            "resources": json.dumps(
                {key: descriptor.registry_entry() for key, descriptor in resources.items()}
            ),
        }

    async def publish(self, tenant_id: str, resources: Dict[str, ResourceDescriptor]) -> str:
        logger.info(
            "tenant_resources_publishing",
            tenant_id=tenant_id,
            keys=sorted(resources),
        )
        return await self.events.put_event(
            source=self.source,
            detail_type=TENANT_RESOURCES_CHANGE,
            detail=self.build_detail(tenant_id, resources),
        )
