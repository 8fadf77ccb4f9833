from typing import Iterable, List

import structlog

from app.schemas.onboarding import ResourceDescriptor
from app.shared.adapters.aws_resources import (
    AwsResource,
    LocatorContext,
    render_locators,
    resource_kind_for_type,
)
from app.shared.adapters.cloudformation import CloudFormationAdapter
from app.shared.core.constants import SUCCESSFUL_TERMINAL_STATUSES

logger = structlog.get_logger()


class ResourceExtractor:
    """
    Picks the resources of interest out of a finished stack and renders their locators.

    Resources of other types, and resources not in CREATE_COMPLETE or UPDATE_COMPLETE, are
    skipped. A stack may yield none, one or several resources.
    """

    def __init__(
        self,
        cloudformation: CloudFormationAdapter,
        kinds: Iterable[AwsResource] = (AwsResource.CODE_PIPELINE,),
    ):
        self.cloudformation = cloudformation
        self.kinds = frozenset(kinds)

    async def extract(self, stack_id: str, context: LocatorContext) -> List[ResourceDescriptor]:
        descriptors: List[ResourceDescriptor] = []
        for resource in await self.cloudformation.list_stack_resources(stack_id):
            if resource.status not in SUCCESSFUL_TERMINAL_STATUSES:
                continue
            kind = resource_kind_for_type(resource.resource_type)
            if kind is None or kind not in self.kinds:
                continue
            if not resource.physical_id:
                logger.warning(
                    "stack_resource_missing_physical_id",
                    stack_id=stack_id,
                    logical_id=resource.logical_id,
                    resource_type=resource.resource_type,
                )
                continue
            name, arn, console_url = render_locators(kind, context, resource.physical_id)
            descriptors.append(
                ResourceDescriptor(kind=kind.value, name=name, arn=arn, console_url=console_url)
            )

        logger.info(
            "stack_resources_extracted",
            stack_id=stack_id,
            count=len(descriptors),
            kinds=sorted(d.kind for d in descriptors),
        )
        return descriptors
