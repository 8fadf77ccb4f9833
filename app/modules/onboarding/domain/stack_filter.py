"""
Relevance filter for CloudFormation stack notifications.

CloudFormation notifies for every resource in a stack as it moves through each
status. Only the tenant application stack itself reaching CREATE_COMPLETE or
UPDATE_COMPLETE should trigger anything downstream, so nothing is processed
prematurely.
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet

from app.schemas.onboarding import StackStatusEvent
from app.shared.core.config import Settings
from app.shared.core.constants import CFN_STACK_RESOURCE_TYPE, SUCCESSFUL_TERMINAL_STATUSES
from app.shared.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class StackFilterConfig:
    environment: str
    prefix: str = "sb"
    statuses: FrozenSet[str] = field(default=SUCCESSFUL_TERMINAL_STATUSES)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StackFilterConfig":
        return cls(
            environment=settings.SAAS_BOOST_ENV or "",
            prefix=settings.STACK_NAME_PREFIX,
        )


def build_stack_name_pattern(config: StackFilterConfig) -> "re.Pattern[str]":
    """
    <prefix>-<env>-tenant-<8 char tenant token>-app-<service>-<suffix>
    """
    if not config.environment.strip():
        raise ConfigurationError("Stack name pattern requires an environment name")
    return re.compile(
        "^"
        + re.escape(config.prefix)
        + "-"
        + re.escape(config.environment)
        + r"-tenant-[a-z0-9]{8}-app-.+-.+$"
    )


class StackEventFilter:
    def __init__(self, config: StackFilterConfig):
        self.config = config
        self._pattern = build_stack_name_pattern(config)

    def is_tenant_app_stack(self, stack_name: str) -> bool:
        return self._pattern.fullmatch(stack_name) is not None

    def is_relevant(self, event: StackStatusEvent) -> bool:
        return (
            event.resource_type == CFN_STACK_RESOURCE_TYPE
            and self.is_tenant_app_stack(event.stack_name)
            and event.resource_status in self.config.statuses
        )
