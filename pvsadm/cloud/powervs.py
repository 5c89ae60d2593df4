"""PowerVS workspace API: storage tiers, COS image import, jobs and images."""

import logging
import re

from pvsadm.cloud.api import api_request
from pvsadm.cloud.resource_controller import POWER_IAAS_RESOURCE_ID, list_resource_instances
from pvsadm.cloud.types import Image, Job, JobReference, StorageTier

logger = logging.getLogger(__name__)

# Zone prefix (region_id without the trailing datacenter number) -> API region
_ZONE_PREFIX_TO_REGION = {
    "dal": "us-south",
    "us-south": "us-south",
    "wdc": "us-east",
    "us-east": "us-east",
    "eu-de": "eu-de",
    "fra": "eu-de",
    "lon": "lon",
    "mad": "mad",
    "mon": "mon",
    "osa": "osa",
    "sao": "sao",
    "syd": "syd",
    "tok": "tok",
    "tor": "tor",
    "che": "che",
}


def zone_to_region(zone):
    """Map a workspace zone (e.g. ``lon04``, ``eu-de-1``, ``dal12``) to its API region."""
    prefix = re.sub(r"-?\d+$", "", zone)
    return _ZONE_PREFIX_TO_REGION.get(prefix, prefix)


async def find_workspace(session, workspace_id="", workspace_name=""):
    """Find a PowerVS workspace by GUID or, failing that, by name.

    Raises:
        RuntimeError: if no workspace matches.
    """
    workspaces = await list_resource_instances(session, POWER_IAAS_RESOURCE_ID)
    for workspace in workspaces:
        if workspace_id and workspace.guid == workspace_id:
            return workspace
    for workspace in workspaces:
        if workspace_name and workspace.name == workspace_name:
            return workspace
    wanted = workspace_id or workspace_name
    raise RuntimeError(f"PowerVS workspace '{wanted}' not found")


def _workspace_url(session, workspace, path=""):
    region = zone_to_region(workspace.region_id)
    base = session.endpoints.power_iaas_url.format(region=region)
    return f"{base}/pcloud/v1/cloud-instances/{workspace.guid}{path}"


async def _workspace_request(session, workspace, method, path, json=None, expect=dict):
    # Every PowerVS call is scoped to the workspace through the CRN header
    return await api_request(
        session, method, _workspace_url(session, workspace, path), json=json,
        headers={"CRN": workspace.crn}, expect=expect,
    )


async def get_storage_tiers(session, workspace):
    """GET /pcloud/v1/cloud-instances/{id}/storage-tiers"""
    result = await _workspace_request(session, workspace, "GET", "/storage-tiers", expect=list)
    return [StorageTier(name=t.get("name", ""), state=t.get("state", "")) for t in result]


async def import_image(
    session,
    workspace,
    image_name,
    image_filename,
    region,
    access_key,
    secret_key,
    bucket_name,
    storage_type,
    bucket_access="private",
):
    """Start a COS image import job.

    POST /pcloud/v1/cloud-instances/{id}/cos-images

    Returns:
        JobReference of the import job.
    """
    data = {
        "imageName": image_name,
        "imageFilename": image_filename,
        "region": region,
        "bucketName": bucket_name,
        "bucketAccess": bucket_access,
        "storageType": storage_type,
    }
    # Public buckets are read anonymously
    if access_key and secret_key:
        data["accessKey"] = access_key
        data["secretKey"] = secret_key
    result = await _workspace_request(session, workspace, "POST", "/cos-images", json=data)
    job_id = result.get("id")
    if not job_id:
        raise RuntimeError(f"import of image '{image_name}' was accepted without a job ID")
    return JobReference(id=job_id)


async def get_job(session, workspace, job_id):
    """GET /pcloud/v1/cloud-instances/{id}/jobs/{job_id}"""
    result = await _workspace_request(session, workspace, "GET", f"/jobs/{job_id}")
    return Job.from_api(result)


async def get_image(session, workspace, image_id):
    """GET /pcloud/v1/cloud-instances/{id}/images/{image_id}"""
    result = await _workspace_request(session, workspace, "GET", f"/images/{image_id}")
    return Image.from_api(result)


async def get_image_by_name(session, workspace, image_name):
    """Find an image of the workspace by name.

    Raises:
        RuntimeError: if no image has that name.
    """
    result = await _workspace_request(session, workspace, "GET", "/images")
    for data in result.get("images", []):
        if data.get("name") == image_name:
            return Image.from_api(data)
    raise RuntimeError(f"image '{image_name}' not found in workspace {workspace.name}")
