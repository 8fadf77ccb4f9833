"""
Onboarding Stack Schemas

Value types passed between the listener stages. All are immutable and live for
a single notification.
"""

from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class StackStatusEvent(BaseModel):
    """One CloudFormation status-change notification, decoded."""
    model_config = ConfigDict(frozen=True)

    stack_id: str = Field(..., min_length=1)
    stack_name: str = Field(..., min_length=1)
    resource_type: str = Field(..., min_length=1)
    resource_status: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None
    logical_resource_id: Optional[str] = None
    physical_resource_id: Optional[str] = None
    status_reason: Optional[str] = None


class StackContext(BaseModel):
    """The tenant and application service a stack was provisioned for."""
    model_config = ConfigDict(frozen=True)

    tenant_id: str
    service_name: str


class ResourceDescriptor(BaseModel):
    """A provisioned resource exposed to the tenant resource registry."""
    model_config = ConfigDict(frozen=True)

    kind: str
    name: str
    arn: str
    console_url: str

    def registry_entry(self) -> Dict[str, str]:
        """Shape stored under the namespaced key in the tenant's resources map."""
        return {"name": self.name, "arn": self.arn, "consoleUrl": self.console_url}
