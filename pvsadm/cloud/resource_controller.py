"""Resource Controller v2: service instances and service credentials (resource keys)."""

import logging

from pvsadm.cloud.api import api_request
from pvsadm.cloud.types import ResourceInstance, ResourceKey

logger = logging.getLogger(__name__)

# Catalog service ids, see `ibmcloud catalog service <name>`
COS_RESOURCE_ID = "dff97f5c-bc5e-4455-b470-411c3edbe49c"
POWER_IAAS_RESOURCE_ID = "abd259f0-9990-11e8-acc8-b9f54a8f1661"


def _url(session, path):
    return f"{session.endpoints.resource_controller_url}{path}"


async def list_resource_instances(session, resource_id):
    """List every service instance of a catalog service.

    GET /v2/resource_instances?resource_id=..., following ``next_url`` pages.
    """
    url = _url(session, "/v2/resource_instances")
    params = {"resource_id": resource_id}
    instances = []
    while url:
        result = await api_request(session, "GET", url, params=params)
        instances.extend(ResourceInstance.from_api(r) for r in result.get("resources", []))
        next_url = result.get("next_url")
        # next_url already carries the query string
        url = _url(session, next_url) if next_url else None
        params = None
    return instances


async def list_resource_keys(session, instance_guid):
    """List the resource keys of a service instance.

    GET /v2/resource_instances/{guid}/resource_keys
    """
    result = await api_request(session, "GET", _url(session, f"/v2/resource_instances/{instance_guid}/resource_keys"))
    return [ResourceKey.from_api(r) for r in result.get("resources", [])]


async def get_resource_key(session, key_id):
    """GET /v2/resource_keys/{id}"""
    result = await api_request(session, "GET", _url(session, f"/v2/resource_keys/{key_id}"))
    return ResourceKey.from_api(result)


async def create_resource_key(session, name, source_crn, role, parameters=None):
    """Create a service credential on the instance identified by *source_crn*.

    POST /v2/resource_keys
    """
    data = {"name": name, "source": source_crn, "role": role}
    if parameters:
        data["parameters"] = parameters
    result = await api_request(session, "POST", _url(session, "/v2/resource_keys"), json=data)
    return ResourceKey.from_api(result)
