"""Builders for CloudFormation notifications, SNS events and aioboto3 mocks."""
from typing import Any, AsyncIterator, Dict, List
from unittest.mock import MagicMock

FUNCTION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:sb-test-onboarding-app-stack-listener"
TENANT_STACK_NAME = "sb-test-tenant-abc12345-app-web-x1y2z3"
TENANT_STACK_ID = (
    "arn:aws:cloudformation:us-east-1:123456789012:stack/"
    f"{TENANT_STACK_NAME}/0a1b2c3d-4e5f-6789-abcd-ef0123456789"
)


def cfn_notification(**overrides: Any) -> str:
    """Build a CloudFormation SNS message body in its Key='Value' line format."""
    fields = {
        "StackId": TENANT_STACK_ID,
        "Timestamp": "2024-05-01T12:30:45.123Z",
        "EventId": "0a1b2c3d-aaaa-bbbb-cccc-ef0123456789",
        "LogicalResourceId": TENANT_STACK_NAME,
        "Namespace": "123456789012",
        "PhysicalResourceId": TENANT_STACK_ID,
        "PrincipalId": "AROAEXAMPLE:sb-test-onboarding",
        "ResourceProperties": "null",
        "ResourceStatus": "CREATE_COMPLETE",
        "ResourceStatusReason": "",
        "ResourceType": "AWS::CloudFormation::Stack",
        "StackName": TENANT_STACK_NAME,
        "ClientRequestToken": "null",
    }
    fields.update(overrides)
    return "".join(f"{key}='{value}'\n" for key, value in fields.items() if value is not None)


def sns_event(*messages: str) -> Dict[str, Any]:
    return {
        "Records": [
            {
                "EventSource": "aws:sns",
                "EventVersion": "1.0",
                "Sns": {
                    "Type": "Notification",
                    "TopicArn": "arn:aws:sns:us-east-1:123456789012:sb-test-onboarding-app-stack",
                    "Message": message,
                },
            }
            for message in messages
        ]
    }


async def async_pages(pages: List[Dict[str, Any]]) -> AsyncIterator[Dict[str, Any]]:
    for page in pages:
        yield page


def mock_session_for(client: Any) -> MagicMock:
    """An aioboto3-like session whose client() context manager yields `client`."""
    session = MagicMock()
    session.client.return_value.__aenter__.return_value = client
    session.client.return_value.__aexit__.return_value = False
    return session


def set_stack_resources(client: Any, *pages: List[Dict[str, Any]]) -> None:
    paginator = client.get_paginator.return_value
    paginator.paginate.return_value = async_pages(
        [{"StackResourceSummaries": summaries} for summaries in pages]
    )


def pipeline_summary(name: str = "sb-test-tenant-abc12345-web", status: str = "CREATE_COMPLETE") -> Dict[str, str]:
    return {
        "LogicalResourceId": "CodePipeline",
        "ResourceType": "AWS::CodePipeline::Pipeline",
        "ResourceStatus": status,
        "PhysicalResourceId": name,
    }
