import re

from app.shared.core.exceptions import ArgumentError

_WHITESPACE = re.compile(r"\s+")


def service_resource_key(service_name: str, resource_kind: str) -> str:
    """
    Key a service's resource in the tenant's flat resources map.

    The tenant resources map is keyed by string, and many services each own a
    resource of the same kind, so the key is SERVICE_<SERVICE NAME>_<KIND>.
    All of a tenant's pipelines can then be found by that pattern.
    """
    if service_name is None or not service_name.strip():
        raise ArgumentError("Service name must not be blank")
    if resource_kind is None or not resource_kind.strip():
        raise ArgumentError("Resource type must not be blank")
    service = _WHITESPACE.sub("_", service_name.strip().upper())
    kind = _WHITESPACE.sub("_", resource_kind.strip().upper())
    return f"SERVICE_{service}_{kind}"
