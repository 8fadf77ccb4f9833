import aioboto3
from typing import Any, Optional
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from app.shared.core.config import get_settings
from app.shared.core.exceptions import ArgumentError, ServiceError


def build_boto_config() -> BotoConfig:
    """
    Standardized boto config with timeouts to prevent indefinite hangs.

    SDK retries are disabled: a failed call surfaces to the invocation and
    redelivery is left to Lambda/SNS.
    """
    settings = get_settings()
    return BotoConfig(
        read_timeout=settings.AWS_READ_TIMEOUT,
        connect_timeout=settings.AWS_CONNECT_TIMEOUT,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


def get_boto_session() -> aioboto3.Session:
    """Returns a centralized aioboto3 session."""
    return aioboto3.Session()


def get_aws_client(
    service_name: str,
    session: Optional[aioboto3.Session] = None,
    region: Optional[str] = None,
) -> Any:
    """
    Returns an async client context manager for the specified service.
    Credentials come from the Lambda execution role via the default chain.
    """
    session = session or get_boto_session()
    return session.client(
        service_name=service_name,
        region_name=region or get_settings().AWS_REGION,
        config=build_boto_config(),
    )


def aws_error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return str(error.response.get("Error", {}).get("Code", "Unknown"))
    return type(error).__name__


def to_service_error(operation: str, error: ClientError | BotoCoreError) -> ServiceError:
    """Wrap a botocore failure, keeping the AWS error code for callers and logs."""
    code = aws_error_code(error)
    return ServiceError(
        message=f"AWS {operation} failure: {str(error)}",
        operation=operation,
        details={"aws_error_code": code},
    )


def parse_function_arn(function_arn: str) -> dict[str, str]:
    """
    Split a Lambda ARN into its partition, region and account.

    arn:<partition>:lambda:<region>:<account>:function:<name>[:<qualifier>]
    """
    parts = (function_arn or "").split(":")
    if len(parts) < 7 or parts[0] != "arn" or not parts[1] or not parts[4]:
        raise ArgumentError(f"Not a Lambda function ARN: {function_arn!r}")
    return {"partition": parts[1], "region": parts[3], "account_id": parts[4]}
