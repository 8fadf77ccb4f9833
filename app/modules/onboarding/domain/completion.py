"""
Onboarding completion tracking.

An onboarding workflow owns every stack provisioned for one tenant. Stacks are
only ever appended, and the workflow's own state is derived on every query
from the stacks it holds so it can never go stale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import structlog

from app.schemas.onboarding import StackStatusEvent
from app.shared.core.constants import CFN_STACK_RESOURCE_TYPE, CloudFormationStatus
from app.shared.core.exceptions import ArgumentError, InvalidTransitionError

logger = structlog.get_logger()


class StackStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (StackStatus.COMPLETE, StackStatus.FAILED)


class WorkflowState(str, Enum):
    INCOMPLETE = "INCOMPLETE"
    COMPLETE = "COMPLETE"


_ALLOWED_TRANSITIONS = {
    StackStatus.PENDING: frozenset(StackStatus),
    StackStatus.IN_PROGRESS: frozenset(
        {StackStatus.IN_PROGRESS, StackStatus.COMPLETE, StackStatus.FAILED}
    ),
    StackStatus.COMPLETE: frozenset({StackStatus.COMPLETE}),
    StackStatus.FAILED: frozenset({StackStatus.FAILED}),
}

_CFN = CloudFormationStatus
_STATUS_BY_CFN = {
    _CFN.REVIEW_IN_PROGRESS.value: StackStatus.PENDING,
    _CFN.CREATE_IN_PROGRESS.value: StackStatus.IN_PROGRESS,
    _CFN.UPDATE_IN_PROGRESS.value: StackStatus.IN_PROGRESS,
    _CFN.UPDATE_COMPLETE_CLEANUP_IN_PROGRESS.value: StackStatus.IN_PROGRESS,
    _CFN.IMPORT_IN_PROGRESS.value: StackStatus.IN_PROGRESS,
    _CFN.CREATE_COMPLETE.value: StackStatus.COMPLETE,
    _CFN.UPDATE_COMPLETE.value: StackStatus.COMPLETE,
    _CFN.IMPORT_COMPLETE.value: StackStatus.COMPLETE,
}


def stack_status_from_cloudformation(status: Optional[str]) -> StackStatus:
    """
    Collapse a CloudFormation stack status onto the onboarding lifecycle.
    Rollbacks, deletes and failures all mean the stack will not finish.
    """
    if status is None or not status.strip():
        return StackStatus.PENDING
    try:
        cfn_status = CloudFormationStatus(status.strip())
    except ValueError as e:
        raise ArgumentError(f"Unknown CloudFormation status {status!r}") from e
    return _STATUS_BY_CFN.get(cfn_status.value, StackStatus.FAILED)


def coerce_stack_status(status: Union[StackStatus, str, None]) -> StackStatus:
    if isinstance(status, StackStatus):
        return status
    if status in StackStatus.__members__:
        return StackStatus[status]
    return stack_status_from_cloudformation(status)


@dataclass
class OnboardingStack:
    stack_id: str
    name: str = ""
    status: StackStatus = StackStatus.PENDING
    cloudformation_status: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.status is StackStatus.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stackId": self.stack_id,
            "name": self.name,
            "status": self.status.value,
            "cloudFormationStatus": self.cloudformation_status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OnboardingStack":
        return cls(
            stack_id=data["stackId"],
            name=data.get("name") or "",
            status=coerce_stack_status(data.get("status")),
            cloudformation_status=data.get("cloudFormationStatus"),
        )


@dataclass
class OnboardingWorkflow:
    tenant_id: str
    stacks: List[OnboardingStack] = field(default_factory=list)

    def stacks_complete(self) -> bool:
        return bool(self.stacks) and all(stack.is_complete for stack in self.stacks)

    @property
    def state(self) -> WorkflowState:
        return WorkflowState.COMPLETE if self.stacks_complete() else WorkflowState.INCOMPLETE

    def find_stack(self, stack_id: str) -> Optional[OnboardingStack]:
        return next((s for s in self.stacks if s.stack_id == stack_id), None)

    def add_stack(self, stack: OnboardingStack) -> WorkflowState:
        if self.find_stack(stack.stack_id) is not None:
            raise ArgumentError(
                f"Stack {stack.stack_id} already belongs to onboarding for tenant {self.tenant_id}"
            )
        self.stacks.append(stack)
        return self.state

    def update_stack_status(
        self, stack_id: str, status: Union[StackStatus, str]
    ) -> WorkflowState:
        """
        Move one stack to a new status. Terminal statuses are absorbing:
        repeating the same terminal status is a no-op, leaving it is an error.
        """
        stack = self.find_stack(stack_id)
        if stack is None:
            raise ArgumentError(
                f"Stack {stack_id} is not part of onboarding for tenant {self.tenant_id}"
            )
        new_status = coerce_stack_status(status)
        if new_status not in _ALLOWED_TRANSITIONS[stack.status]:
            raise InvalidTransitionError(
                f"Stack {stack_id} cannot move from {stack.status.value} to {new_status.value}",
                details={"stack_id": stack_id, "from": stack.status.value, "to": new_status.value},
            )
        stack.status = new_status
        if isinstance(status, str) and status not in StackStatus.__members__:
            stack.cloudformation_status = status
        return self.state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenantId": self.tenant_id,
            "stacks": [stack.to_dict() for stack in self.stacks],
            "stacksComplete": self.stacks_complete(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OnboardingWorkflow":
        return cls(
            tenant_id=data["tenantId"],
            stacks=[OnboardingStack.from_dict(s) for s in data.get("stacks") or []],
        )


def is_stack_level_event(event: StackStatusEvent) -> bool:
    """Child resources report under their parent StackId; only the stack itself counts."""
    return event.resource_type == CFN_STACK_RESOURCE_TYPE and (
        event.logical_resource_id is None or event.logical_resource_id == event.stack_name
    )


def apply_stack_event(workflow: OnboardingWorkflow, event: StackStatusEvent) -> bool:
    """
    Feed a decoded stack notification into the workflow.

    Returns True when a tracked stack changed. Notifications for stacks the
    workflow does not own, and late notifications that would leave a terminal
    status, are ignored.
    """
    if not is_stack_level_event(event):
        return False

    stack = workflow.find_stack(event.stack_id)
    if stack is None:
        logger.debug(
            "onboarding_stack_untracked",
            tenant_id=workflow.tenant_id,
            stack_id=event.stack_id,
        )
        return False

    previous = stack.status
    try:
        workflow.update_stack_status(event.stack_id, event.resource_status)
    except InvalidTransitionError as e:
        logger.warning(
            "onboarding_stack_transition_ignored",
            tenant_id=workflow.tenant_id,
            stack_id=event.stack_id,
            error=e.message,
        )
        return False

    if stack.status is not previous:
        logger.info(
            "onboarding_stack_status_changed",
            tenant_id=workflow.tenant_id,
            stack_id=event.stack_id,
            status=stack.status.value,
            workflow_state=workflow.state.value,
        )
    return stack.status is not previous
