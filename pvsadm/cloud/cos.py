"""Cloud Object Storage: bucket listing over the S3-compatible API with IAM auth."""

import logging
import xml.etree.ElementTree as ET

from pvsadm.cloud.api import CloudAPIError, send_request

logger = logging.getLogger(__name__)


def _local_name(tag):
    return tag.rsplit("}", 1)[-1]


def parse_bucket_names(xml_text):
    """Extract bucket names from an S3 ListAllMyBucketsResult document."""
    root = ET.fromstring(xml_text)
    names = []
    for element in root.iter():
        if _local_name(element.tag) != "Bucket":
            continue
        for child in element:
            if _local_name(child.tag) == "Name" and child.text:
                names.append(child.text)
    return names


async def list_buckets(session, instance_guid, region):
    """List the buckets owned by a COS service instance in *region*.

    GET / on the regional endpoint with the ``ibm-service-instance-id`` header.
    """
    url = session.endpoints.cos_url.format(region=region) + "/"
    logger.debug(f"Listing buckets of COS instance {instance_guid} in {region}")
    resp = await send_request(
        session,
        "GET",
        url,
        headers={"ibm-service-instance-id": instance_guid, "Accept": "application/xml"},
    )
    try:
        return parse_bucket_names(resp.text)
    except ET.ParseError as e:
        raise CloudAPIError(resp.status_code, f"malformed bucket listing: {e}", url) from e
