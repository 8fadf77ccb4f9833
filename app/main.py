import asyncio
from functools import lru_cache
from typing import Any, Dict, List

import structlog
from pydantic import ValidationError

from app.modules.onboarding.domain.listener import OnboardingAppStackListener
from app.shared.core.config import get_settings
from app.shared.core.exceptions import ConfigurationError, OnboardingListenerError
from app.shared.core.logging import bind_invocation_context, setup_logging

logger = structlog.get_logger()


@lru_cache
def get_listener() -> OnboardingAppStackListener:
    """Built once per Lambda container; a bad configuration fails the cold start."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid listener configuration",
            details={"errors": [err.get("msg") for err in e.errors()]},
        ) from e
    setup_logging()
    listener = OnboardingAppStackListener.from_settings(settings)
    logger.info(
        "listener_initialized",
        environment=settings.SAAS_BOOST_ENV,
        event_bus=settings.SAAS_BOOST_EVENT_BUS,
        resources_of_interest=settings.RESOURCES_OF_INTEREST,
    )
    return listener


def handler(event: Dict[str, Any], context: Any) -> List[Dict[str, Any]]:
    """
    Lambda entry point for the CloudFormation notification topic.

    Errors propagate so the invocation fails and SNS/Lambda redelivery applies.
    """
    listener = get_listener()
    bind_invocation_context(context)
    try:
        results = asyncio.run(listener.handle_event(event, context))
    except OnboardingListenerError as e:
        logger.error(
            "stack_notification_failed",
            code=e.code,
            error=e.message,
            details=e.details,
        )
        raise
    return [
        {
            "stackName": result.stack_name,
            "relevant": result.relevant,
            "tenantId": result.tenant_id,
            "resourceKeys": result.resource_keys,
            "eventId": result.event_id,
        }
        for result in results
    ]
