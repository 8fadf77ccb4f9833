import structlog

from app.schemas.onboarding import StackContext
from app.shared.adapters.cloudformation import CloudFormationAdapter
from app.shared.core.exceptions import ResolutionError

logger = structlog.get_logger()


class StackContextResolver:
    """Looks up which tenant and application service a stack was run for."""

    def __init__(
        self,
        cloudformation: CloudFormationAdapter,
        tenant_id_parameter: str = "TenantId",
        service_name_parameter: str = "ServiceName",
    ):
        self.cloudformation = cloudformation
        self.tenant_id_parameter = tenant_id_parameter
        self.service_name_parameter = service_name_parameter

    async def resolve(self, stack_id: str) -> StackContext:
        parameters = await self.cloudformation.describe_stack_parameters(stack_id)
        if parameters is None:
            raise ResolutionError(
                f"Stack {stack_id} not found", details={"stack_id": stack_id}
            )

        missing = [
            name
            for name in (self.tenant_id_parameter, self.service_name_parameter)
            if not (parameters.get(name) or "").strip()
        ]
        if missing:
            raise ResolutionError(
                f"Stack {stack_id} is missing parameters: {', '.join(missing)}",
                details={"stack_id": stack_id, "missing": missing},
            )

        context = StackContext(
            tenant_id=parameters[self.tenant_id_parameter],
            service_name=parameters[self.service_name_parameter],
        )
        logger.info(
            "stack_context_resolved",
            stack_id=stack_id,
            tenant_id=context.tenant_id,
            service_name=context.service_name,
        )
        return context
