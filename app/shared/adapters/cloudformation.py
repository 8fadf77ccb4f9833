"""
CloudFormation Adapter (Native Async)

Read-only queries against the provisioning engine: a stack's declared
parameters and its child resources. Failures are wrapped in ServiceError and
never retried here.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.shared.adapters.aws_utils import aws_error_code, get_aws_client, to_service_error

logger = structlog.get_logger()


@dataclass(frozen=True)
class StackResource:
    logical_id: str
    resource_type: str
    status: str
    physical_id: Optional[str] = None


def _is_missing_stack_error(error: ClientError) -> bool:
    # CloudFormation reports an unknown stack as a ValidationError, not a 404
    message = str(error.response.get("Error", {}).get("Message", ""))
    return aws_error_code(error) == "ValidationError" and "does not exist" in message


async def iter_aws_paginator_pages(
    paginator: Any,
    *,
    operation_name: str,
    paginate_kwargs: dict[str, Any],
    max_pages: int | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """
    Stream AWS paginator pages with optional deterministic page bounds.

    `max_pages` provides a hard stop for protection against unbounded scans
    while preserving native paginator semantics.
    """
    if max_pages is not None and max_pages <= 0:
        raise ValueError("max_pages must be > 0 when provided")

    pages_seen = 0
    async for page in paginator.paginate(**paginate_kwargs):
        pages_seen += 1
        yield page
        if max_pages is not None and pages_seen >= max_pages:
            logger.warning(
                "aws_paginator_page_cap_reached",
                operation=operation_name,
                max_pages=max_pages,
            )
            break


class CloudFormationAdapter:
    """
    Adapter for the CloudFormation stack queries the listener depends on.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        session: Optional[aioboto3.Session] = None,
        max_resource_pages: Optional[int] = None,
    ):
        self.region = region
        self.session = session or aioboto3.Session()
        self.max_resource_pages = max_resource_pages

    def _client(self) -> Any:
        return get_aws_client("cloudformation", session=self.session, region=self.region)

    async def describe_stack_parameters(self, stack_id: str) -> Optional[Dict[str, str]]:
        """
        Return the stack's parameters as a name -> value mapping.
        Returns None when CloudFormation does not know the stack.
        """
        try:
            async with self._client() as cfn:
                response = await cfn.describe_stacks(StackName=stack_id)
        except ClientError as e:
            if _is_missing_stack_error(e):
                logger.warning("cfn_stack_not_found", stack_id=stack_id)
                return None
            logger.error(
                "cfn_describe_stacks_failed",
                stack_id=stack_id,
                error=str(e),
                code=aws_error_code(e),
            )
            raise to_service_error("cloudformation:DescribeStacks", e) from e
        except BotoCoreError as e:
            logger.error("cfn_describe_stacks_failed", stack_id=stack_id, error=str(e))
            raise to_service_error("cloudformation:DescribeStacks", e) from e

        stacks = response.get("Stacks", [])
        if not stacks:
            logger.warning("cfn_stack_not_found", stack_id=stack_id)
            return None
        return {
            parameter["ParameterKey"]: parameter.get("ParameterValue", "")
            for parameter in stacks[0].get("Parameters", [])
            if "ParameterKey" in parameter
        }

    async def list_stack_resources(self, stack_id: str) -> List[StackResource]:
        """Enumerate every child resource of the stack across all result pages."""
        resources: List[StackResource] = []
        try:
            async with self._client() as cfn:
                paginator = cfn.get_paginator("list_stack_resources")
                async for page in iter_aws_paginator_pages(
                    paginator,
                    operation_name="cloudformation:ListStackResources",
                    paginate_kwargs={"StackName": stack_id},
                    max_pages=self.max_resource_pages,
                ):
                    for summary in page.get("StackResourceSummaries", []):
                        resources.append(
                            StackResource(
                                logical_id=summary.get("LogicalResourceId", ""),
                                resource_type=summary.get("ResourceType", ""),
                                status=summary.get("ResourceStatus", ""),
                                physical_id=summary.get("PhysicalResourceId"),
                            )
                        )
        except ClientError as e:
            logger.error(
                "cfn_list_stack_resources_failed",
                stack_id=stack_id,
                error=str(e),
                code=aws_error_code(e),
            )
            raise to_service_error("cloudformation:ListStackResources", e) from e
        except BotoCoreError as e:
            logger.error("cfn_list_stack_resources_failed", stack_id=stack_id, error=str(e))
            raise to_service_error("cloudformation:ListStackResources", e) from e

        logger.debug("cfn_stack_resources_listed", stack_id=stack_id, count=len(resources))
        return resources
