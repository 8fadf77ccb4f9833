import pytest

from app.shared.adapters.aws_resources import (
    RESOURCE_LOCATORS,
    AwsResource,
    LocatorContext,
    render_locators,
    resource_kind_for_type,
    resource_name_from_physical_id,
)
from app.shared.core.exceptions import ArgumentError


def test_every_kind_has_a_locator():
    assert set(RESOURCE_LOCATORS) == set(AwsResource)


def test_cfn_types_are_unique():
    types = [locator.cfn_type for locator in RESOURCE_LOCATORS.values()]
    assert len(types) == len(set(types))


@pytest.mark.parametrize(
    "cfn_type,kind",
    [
        ("AWS::CodePipeline::Pipeline", AwsResource.CODE_PIPELINE),
        ("AWS::ECR::Repository", AwsResource.ECR_REPO),
        ("AWS::RDS::DBInstance", AwsResource.RDS_INSTANCE),
        ("AWS::IAM::Role", None),
    ],
)
def test_resource_kind_for_type(cfn_type, kind):
    assert resource_kind_for_type(cfn_type) is kind


def test_locator_context_from_function_arn():
    context = LocatorContext.from_function_arn(
        "arn:aws-cn:lambda:cn-north-1:123456789012:function:listener"
    )
    assert context == LocatorContext(partition="aws-cn", region="cn-north-1", account_id="123456789012")
    assert context.console_domain == "console.amazonaws.cn"


def test_locator_context_region_override():
    context = LocatorContext.from_function_arn(
        "arn:aws:lambda:us-east-1:123456789012:function:listener", region="us-west-2"
    )
    assert context.region == "us-west-2"


def test_render_pipeline(locator_context):
    name, arn, url = render_locators(AwsResource.CODE_PIPELINE, locator_context, "tenant-pipeline")
    assert name == "tenant-pipeline"
    assert arn == "arn:aws:codepipeline:us-east-1:123456789012:tenant-pipeline"
    assert url == (
        "https://us-east-1.console.aws.amazon.com/codesuite/codepipeline/pipelines/"
        "tenant-pipeline/view?region=us-east-1"
    )


def test_render_rds_instance(locator_context):
    _, arn, url = render_locators(AwsResource.RDS_INSTANCE, locator_context, "tenant-db")
    assert arn == "arn:aws:rds:us-east-1:123456789012:db:tenant-db"
    assert url.endswith("#database:id=tenant-db;is-cluster=false")


def test_render_log_group_escapes_console_fragment(locator_context):
    name, arn, url = render_locators(
        AwsResource.LOG_GROUP, locator_context, "/aws/ecs/sb-test-tenant-abc12345-web"
    )
    assert name == "/aws/ecs/sb-test-tenant-abc12345-web"
    assert arn == "arn:aws:logs:us-east-1:123456789012:log-group:/aws/ecs/sb-test-tenant-abc12345-web"
    assert url == (
        "https://us-east-1.console.aws.amazon.com/cloudwatch/home?region=us-east-1"
        "#logsV2:log-groups/log-group/$252Faws$252Fecs$252Fsb-test-tenant-abc12345-web"
    )


def test_render_leaves_other_kinds_unencoded(locator_context):
    _, _, url = render_locators(AwsResource.ECR_REPO, locator_context, "tenant/web")
    assert "/private/123456789012/tenant/web?region=" in url


def test_render_keeps_physical_arn(locator_context):
    physical = "arn:aws:ecs:us-east-1:123456789012:cluster/tenant-cluster"
    name, arn, url = render_locators(AwsResource.ECS_CLUSTER, locator_context, physical)
    assert name == "tenant-cluster"
    assert arn == physical
    assert "/ecs/v2/clusters/tenant-cluster/" in url


def test_render_gov_cloud_console():
    context = LocatorContext(partition="aws-us-gov", region="us-gov-west-1", account_id="123456789012")
    _, arn, url = render_locators(AwsResource.CODE_PIPELINE, context, "p1")
    assert arn.startswith("arn:aws-us-gov:codepipeline:us-gov-west-1:")
    assert url.startswith("https://us-gov-west-1.console.amazonaws-us-gov.com/")


def test_render_requires_physical_id(locator_context):
    with pytest.raises(ArgumentError):
        render_locators(AwsResource.CODE_PIPELINE, locator_context, "")


@pytest.mark.parametrize(
    "physical_id,name",
    [
        ("plain-name", "plain-name"),
        ("arn:aws:ecs:us-east-1:123456789012:cluster/c1", "c1"),
        ("arn:aws:rds:us-east-1:123456789012:db:db1", "db1"),
    ],
)
def test_resource_name_from_physical_id(physical_id, name):
    assert resource_name_from_physical_id(physical_id) == name
