"""
Global pytest fixtures for the onboarding listener test suite.

Provides:
- Required environment configured before any app imports
- Lambda context and locator context fixtures
- A CloudFormation client mock with a working paginator
"""
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment BEFORE any app imports
os.environ["AWS_REGION"] = "us-east-1"
os.environ["SAAS_BOOST_ENV"] = "test"
os.environ["SAAS_BOOST_EVENT_BUS"] = "sb-test-events"

from app.shared.adapters.aws_resources import LocatorContext  # noqa: E402
from app.shared.core.config import get_settings  # noqa: E402
from tests.utils import FUNCTION_ARN, async_pages  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        invoked_function_arn=FUNCTION_ARN,
        aws_request_id="5f1e2d3c-0000-1111-2222-333344445555",
        function_name="sb-test-onboarding-app-stack-listener",
    )


@pytest.fixture
def locator_context():
    return LocatorContext(partition="aws", region="us-east-1", account_id="123456789012")


@pytest.fixture
def mock_cfn():
    """CloudFormation client mock whose paginator yields a single empty page."""
    client = AsyncMock()
    paginator = MagicMock()
    paginator.paginate.return_value = async_pages([{"StackResourceSummaries": []}])
    client.get_paginator = MagicMock(return_value=paginator)
    return client
