"""
AWS Resource Locators

Renders the ARN and console URL for each kind of resource a tenant stack can
expose. Kinds are a closed enumeration; supporting a new kind means adding a
row to RESOURCE_LOCATORS.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
from urllib.parse import quote

from app.shared.adapters.aws_utils import parse_function_arn
from app.shared.core.exceptions import ArgumentError


class AwsResource(str, Enum):
    CODE_PIPELINE = "CODE_PIPELINE"
    ECR_REPO = "ECR_REPO"
    ECS_CLUSTER = "ECS_CLUSTER"
    RDS_INSTANCE = "RDS_INSTANCE"
    RDS_CLUSTER = "RDS_CLUSTER"
    LOG_GROUP = "LOG_GROUP"


@dataclass(frozen=True)
class LocatorContext:
    """Where rendered resources live: the partition, region and account of this function."""
    partition: str
    region: str
    account_id: str

    @classmethod
    def from_function_arn(cls, function_arn: str, region: Optional[str] = None) -> "LocatorContext":
        parsed = parse_function_arn(function_arn)
        return cls(
            partition=parsed["partition"],
            region=region or parsed["region"],
            account_id=parsed["account_id"],
        )

    @property
    def console_domain(self) -> str:
        if self.partition == "aws-us-gov":
            return "console.amazonaws-us-gov.com"
        if self.partition == "aws-cn":
            return "console.amazonaws.cn"
        return "console.aws.amazon.com"


@dataclass(frozen=True)
class ResourceLocator:
    cfn_type: str
    arn_template: str
    url_template: str
    # Applied to the name before it is placed in the console URL
    url_name_encoder: Optional[Callable[[str], str]] = None

    def format_arn(self, context: LocatorContext, name: str) -> str:
        return self.arn_template.format(
            partition=context.partition,
            region=context.region,
            account=context.account_id,
            name=name,
        )

    def format_url(self, context: LocatorContext, name: str) -> str:
        return self.url_template.format(
            domain=context.console_domain,
            region=context.region,
            account=context.account_id,
            name=self.url_name_encoder(name) if self.url_name_encoder else name,
        )


def cloudwatch_fragment_quote(name: str) -> str:
    """
    CloudWatch Logs console fragments percent-encode names and then escape the
    percent sign itself as $25, so "/" becomes "$252F".
    """
    return quote(name, safe="").replace("%", "$25")


RESOURCE_LOCATORS: Dict[AwsResource, ResourceLocator] = {
    AwsResource.CODE_PIPELINE: ResourceLocator(
        cfn_type="AWS::CodePipeline::Pipeline",
        arn_template="arn:{partition}:codepipeline:{region}:{account}:{name}",
        url_template="https://{region}.{domain}/codesuite/codepipeline/pipelines/{name}/view?region={region}",
    ),
    AwsResource.ECR_REPO: ResourceLocator(
        cfn_type="AWS::ECR::Repository",
        arn_template="arn:{partition}:ecr:{region}:{account}:repository/{name}",
        url_template="https://{region}.{domain}/ecr/repositories/private/{account}/{name}?region={region}",
    ),
    AwsResource.ECS_CLUSTER: ResourceLocator(
        cfn_type="AWS::ECS::Cluster",
        arn_template="arn:{partition}:ecs:{region}:{account}:cluster/{name}",
        url_template="https://{region}.{domain}/ecs/v2/clusters/{name}/services?region={region}",
    ),
    AwsResource.RDS_INSTANCE: ResourceLocator(
        cfn_type="AWS::RDS::DBInstance",
        arn_template="arn:{partition}:rds:{region}:{account}:db:{name}",
        url_template="https://{region}.{domain}/rds/home?region={region}#database:id={name};is-cluster=false",
    ),
    AwsResource.RDS_CLUSTER: ResourceLocator(
        cfn_type="AWS::RDS::DBCluster",
        arn_template="arn:{partition}:rds:{region}:{account}:cluster:{name}",
        url_template="https://{region}.{domain}/rds/home?region={region}#database:id={name};is-cluster=true",
    ),
    AwsResource.LOG_GROUP: ResourceLocator(
        cfn_type="AWS::Logs::LogGroup",
        arn_template="arn:{partition}:logs:{region}:{account}:log-group:{name}",
        url_template="https://{region}.{domain}/cloudwatch/home?region={region}#logsV2:log-groups/log-group/{name}",
        url_name_encoder=cloudwatch_fragment_quote,
    ),
}

_KIND_BY_CFN_TYPE = {locator.cfn_type: kind for kind, locator in RESOURCE_LOCATORS.items()}


def resource_kind_for_type(cfn_type: str) -> Optional[AwsResource]:
    """Map a CloudFormation resource type to its kind, or None if it has no locator."""
    return _KIND_BY_CFN_TYPE.get(cfn_type)


def resource_name_from_physical_id(physical_id: str) -> str:
    """
    Physical ids are usually bare names; some resource types report a full ARN.
    For ARNs the name is the resource part with any type prefix removed.
    """
    if not physical_id.startswith("arn:"):
        return physical_id
    tail = physical_id.split(":", 6)[-1]
    return tail.rsplit("/", 1)[-1]


def render_locators(
    kind: AwsResource, context: LocatorContext, physical_id: str
) -> tuple[str, str, str]:
    """Return (name, arn, console_url) for a provisioned resource."""
    if not physical_id:
        raise ArgumentError(f"{kind.value} resource has no physical id")
    locator = RESOURCE_LOCATORS[kind]
    name = resource_name_from_physical_id(physical_id)
    arn = physical_id if physical_id.startswith("arn:") else locator.format_arn(context, name)
    return name, arn, locator.format_url(context, name)
