"""
Onboarding App Stack Listener

Reacts to CloudFormation notifications for tenant application stacks. When a
stack finishes creating or updating, the tenant and service it was built for
are looked up, its resources of interest are collected, and one
TENANT_RESOURCES_CHANGE event carrying them is published.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import aioboto3
import structlog

from app.modules.onboarding.domain.context import StackContextResolver
from app.modules.onboarding.domain.events import decode_stack_event, sns_messages
from app.modules.onboarding.domain.keys import service_resource_key
from app.modules.onboarding.domain.publisher import TenantResourcePublisher
from app.modules.onboarding.domain.resources import ResourceExtractor
from app.modules.onboarding.domain.stack_filter import StackEventFilter, StackFilterConfig
from app.schemas.onboarding import ResourceDescriptor
from app.shared.adapters.aws_resources import AwsResource, LocatorContext
from app.shared.adapters.cloudformation import CloudFormationAdapter
from app.shared.adapters.eventbridge import EventBridgeAdapter
from app.shared.core.config import Settings

logger = structlog.get_logger()


@dataclass
class NotificationResult:
    stack_name: str
    relevant: bool
    tenant_id: Optional[str] = None
    resource_keys: List[str] = field(default_factory=list)
    event_id: Optional[str] = None

    @property
    def published(self) -> bool:
        return self.event_id is not None


class OnboardingAppStackListener:
    def __init__(
        self,
        settings: Settings,
        stack_filter: StackEventFilter,
        resolver: StackContextResolver,
        extractor: ResourceExtractor,
        publisher: TenantResourcePublisher,
    ):
        self.settings = settings
        self.stack_filter = stack_filter
        self.resolver = resolver
        self.extractor = extractor
        self.publisher = publisher

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[aioboto3.Session] = None
    ) -> "OnboardingAppStackListener":
        session = session or aioboto3.Session()
        cloudformation = CloudFormationAdapter(
            region=settings.AWS_REGION,
            session=session,
            max_resource_pages=settings.CFN_MAX_RESOURCE_PAGES,
        )
        events = EventBridgeAdapter(
            event_bus=settings.SAAS_BOOST_EVENT_BUS or "",
            region=settings.AWS_REGION,
            session=session,
        )
        return cls(
            settings=settings,
            stack_filter=StackEventFilter(StackFilterConfig.from_settings(settings)),
            resolver=StackContextResolver(
                cloudformation,
                tenant_id_parameter=settings.TENANT_ID_PARAMETER,
                service_name_parameter=settings.SERVICE_NAME_PARAMETER,
            ),
            extractor=ResourceExtractor(
                cloudformation,
                kinds=[AwsResource[name] for name in settings.RESOURCES_OF_INTEREST],
            ),
            publisher=TenantResourcePublisher(events, source=settings.EVENT_SOURCE),
        )

    def locator_context(self, lambda_context: Any) -> LocatorContext:
        # Partition and account come from our own ARN; resources live beside us
        return LocatorContext.from_function_arn(
            lambda_context.invoked_function_arn, region=self.settings.AWS_REGION
        )

    async def handle_event(self, event: Dict[str, Any], lambda_context: Any) -> List[NotificationResult]:
        """
        Process every SNS record in the delivery, in order. The first fatal
        error stops the invocation so Lambda's redelivery applies.
        """
        messages = sns_messages(event)
        locators = self.locator_context(lambda_context)
        if len(messages) > 1:
            logger.info("sns_batch_received", record_count=len(messages))
        return [await self.handle_notification(message, locators) for message in messages]

    async def handle_notification(
        self, message: Union[str, bytes], locators: LocatorContext
    ) -> NotificationResult:
        stack_event = decode_stack_event(message)
        if not self.stack_filter.is_relevant(stack_event):
            logger.debug(
                "stack_event_skipped",
                stack_name=stack_event.stack_name,
                resource_type=stack_event.resource_type,
                status=stack_event.resource_status,
            )
            return NotificationResult(stack_name=stack_event.stack_name, relevant=False)

        with structlog.contextvars.bound_contextvars(
            stack_name=stack_event.stack_name, stack_id=stack_event.stack_id
        ):
            logger.info("stack_event_accepted", status=stack_event.resource_status)
            stack_context = await self.resolver.resolve(stack_event.stack_id)
            descriptors = await self.extractor.extract(stack_event.stack_id, locators)
            resources = self.namespace_resources(stack_context.service_name, descriptors)

            result = NotificationResult(
                stack_name=stack_event.stack_name,
                relevant=True,
                tenant_id=stack_context.tenant_id,
                resource_keys=sorted(resources),
            )
            if not resources:
                logger.info("stack_has_no_resources_of_interest", tenant_id=stack_context.tenant_id)
                return result

            result.event_id = await self.publisher.publish(stack_context.tenant_id, resources)
            logger.info(
                "tenant_resources_published",
                tenant_id=stack_context.tenant_id,
                keys=result.resource_keys,
                event_id=result.event_id,
            )
            return result

    @staticmethod
    def namespace_resources(
        service_name: str, descriptors: List[ResourceDescriptor]
    ) -> Dict[str, ResourceDescriptor]:
        resources: Dict[str, ResourceDescriptor] = {}
        for descriptor in descriptors:
            key = service_resource_key(service_name, descriptor.kind)
            if key in resources:
                # One key per service and kind; the tenant record keeps the last one
                logger.warning(
                    "tenant_resource_key_collision",
                    key=key,
                    kept=descriptor.name,
                    dropped=resources[key].name,
                )
            resources[key] = descriptor
        return resources
