from .completion import (
    OnboardingStack,
    OnboardingWorkflow,
    StackStatus,
    WorkflowState,
    apply_stack_event,
)
from .events import decode_stack_event
from .keys import service_resource_key
from .listener import NotificationResult, OnboardingAppStackListener
from .stack_filter import StackEventFilter, StackFilterConfig

__all__ = [
    "OnboardingStack",
    "OnboardingWorkflow",
    "StackStatus",
    "WorkflowState",
    "apply_stack_event",
    "decode_stack_event",
    "service_resource_key",
    "NotificationResult",
    "OnboardingAppStackListener",
    "StackEventFilter",
    "StackFilterConfig",
]
