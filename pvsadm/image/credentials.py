"""COS HMAC credential discovery: find the bucket's COS instance, reuse or create an HMAC key."""

import logging

import httpx

from pvsadm.cloud.api import CloudAPIError
from pvsadm.cloud.cos import list_buckets
from pvsadm.cloud.resource_controller import (
    COS_RESOURCE_ID,
    create_resource_key,
    get_resource_key,
    list_resource_instances,
    list_resource_keys,
)
from pvsadm.cloud.types import HMACCredentials
from pvsadm.image.errors import ImageImportError
from pvsadm.image.options import SERVICE_CRED_PREFIX
from pvsadm.redact import register_secret

logger = logging.getLogger(__name__)

ACCESS_KEY_ID = "access_key_id"
COS_HMAC_KEYS = "cos_hmac_keys"
CRN_SERVICE_ROLE_WRITER = "crn:v1:bluemix:public:iam::::serviceRole:Writer"
SECRET_ACCESS_KEY = "secret_access_key"


async def find_cos_instance(session, instances, bucket_name, region):
    """Return the COS instance that owns *bucket_name*, or None.

    Instances whose buckets cannot be listed are skipped with a warning.
    """
    for instance in instances:
        try:
            buckets = await list_buckets(session, instance.guid, region)
        except (CloudAPIError, httpx.HTTPError) as e:
            logger.warning(f"cannot list buckets in the resource instance {instance.name}. err: {e}")
            continue
        if bucket_name in buckets:
            return instance
    return None


async def create_hmac_credentials(session, cos_crn, service_cred_name):
    """Create a Writer service credential with HMAC keys on the COS instance."""
    logger.debug(f"Auto generating COS service credentials to import image: {service_cred_name}")
    try:
        return await create_resource_key(
            session,
            name=service_cred_name,
            source_crn=cos_crn,
            role=CRN_SERVICE_ROLE_WRITER,
            parameters={"HMAC": True},
        )
    except CloudAPIError as e:
        raise ImageImportError(f"error while creating HMAC credentials. err: {e}") from e


def extract_hmac_credentials(key):
    """Pull the access/secret key pair out of a resource key's credentials."""
    hmac_keys = key.credentials.get(COS_HMAC_KEYS)
    if hmac_keys is None:
        raise ImageImportError("unable to retrieve COS HMAC keys")
    if not isinstance(hmac_keys, dict):
        raise ImageImportError(f"malformed COS HMAC keys in credential '{key.name}'")

    access_key = hmac_keys.get(ACCESS_KEY_ID)
    secret_key = hmac_keys.get(SECRET_ACCESS_KEY)
    if not isinstance(access_key, str) or not isinstance(secret_key, str) or not access_key or not secret_key:
        raise ImageImportError(f"incomplete COS HMAC keys in credential '{key.name}'")
    return HMACCredentials(access_key=access_key, secret_key=secret_key)


async def _find_hmac_key(session, keys):
    # Several credentials may exist without any of them carrying HMAC keys
    for summary in keys:
        try:
            key = await get_resource_key(session, summary.id)
        except CloudAPIError as e:
            raise ImageImportError(f"an error occurred while retrieving the resource key. err: {e}") from e
        if key.credentials.get(COS_HMAC_KEYS) is not None:
            logger.info(f"HMAC keys are available from the credential '{key.name}', re-using the same for image upload")
            return key
        logger.info(f"No credentials found in the key '{key.name}'.")
    return None


async def resolve_hmac_credentials(session, bucket_name, region, service_cred_name=""):
    """Discover or create HMAC credentials able to read *bucket_name*.

    Steps:
        1. Find the COS instance holding the bucket
        2. Reuse the first service credential carrying HMAC keys
        3. Otherwise create one named *service_cred_name*
           (default ``pvsadm-service-cred-<COS name>``)

    Returns:
        HMACCredentials. The secret key is registered for log redaction.
    """
    try:
        instances = await list_resource_instances(session, COS_RESOURCE_ID)
    except CloudAPIError as e:
        raise ImageImportError(f"failed to list the resource instances: {e}") from e
    if not instances:
        raise ImageImportError("no service instances were found")

    cos_instance = await find_cos_instance(session, instances, bucket_name, region)
    if cos_instance is None:
        raise ImageImportError(f"failed to find the COS instance for the bucket mentioned: {bucket_name}")
    logger.info(f"Identified bucket '{bucket_name}' in service instance: {cos_instance.name}")

    try:
        keys = await list_resource_keys(session, cos_instance.guid)
    except CloudAPIError as e:
        raise ImageImportError(f"cannot list the resource keys for instance. err: {e}") from e

    service_cred_name = service_cred_name or f"{SERVICE_CRED_PREFIX}-{cos_instance.name}"

    key = None
    if keys:
        logger.debug("Reading the existing service credential")
        key = await _find_hmac_key(session, keys)
    if key is None:
        key = await create_hmac_credentials(session, cos_instance.crn, service_cred_name)

    creds = extract_hmac_credentials(key)
    register_secret(creds.secret_key)
    return creds
