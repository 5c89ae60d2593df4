"""IBM Cloud API access: session, Resource Controller, COS and PowerVS."""

from pvsadm.cloud.api import (
    ENVIRONMENTS,
    CloudAPIError,
    CloudSession,
    Endpoints,
    api_request,
    get_iam_token,
    open_session,
    send_request,
)
from pvsadm.cloud.cos import list_buckets
from pvsadm.cloud.powervs import (
    find_workspace,
    get_image,
    get_image_by_name,
    get_job,
    get_storage_tiers,
    import_image,
    zone_to_region,
)
from pvsadm.cloud.resource_controller import (
    COS_RESOURCE_ID,
    POWER_IAAS_RESOURCE_ID,
    create_resource_key,
    get_resource_key,
    list_resource_instances,
    list_resource_keys,
)
from pvsadm.cloud.types import (
    HMACCredentials,
    Image,
    Job,
    JobReference,
    ResourceInstance,
    ResourceKey,
    StorageTier,
)

__all__ = [
    "ENVIRONMENTS",
    "Endpoints",
    "CloudSession",
    "CloudAPIError",
    "open_session",
    "get_iam_token",
    "api_request",
    "send_request",
    "list_buckets",
    "COS_RESOURCE_ID",
    "POWER_IAAS_RESOURCE_ID",
    "list_resource_instances",
    "list_resource_keys",
    "get_resource_key",
    "create_resource_key",
    "find_workspace",
    "zone_to_region",
    "get_storage_tiers",
    "import_image",
    "get_job",
    "get_image",
    "get_image_by_name",
    "ResourceInstance",
    "ResourceKey",
    "HMACCredentials",
    "StorageTier",
    "JobReference",
    "Job",
    "Image",
]
