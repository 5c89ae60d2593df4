"""Image import workflow: storage tier check, credentials, import job, activation watch."""

import dataclasses
import logging

from pvsadm.cloud import powervs
from pvsadm.cloud.api import CloudAPIError
from pvsadm.image.credentials import resolve_hmac_credentials
from pvsadm.image.errors import ImageImportError
from pvsadm.image.options import VALID_STORAGE_TYPES, format_duration
from pvsadm.poll import LoopClock, poll_until

logger = logging.getLogger(__name__)

IMAGE_POLL_INTERVAL = 10
IMAGE_STATE_ACTIVE = "active"
JOB_POLL_INTERVAL = 120
JOB_STATE_COMPLETED = "completed"
JOB_STATE_FAILED = "failed"
STORAGE_TIER_INACTIVE = "inactive"


async def check_storage_tier_availability(session, workspace, storage_type):
    """Confirm the workspace supports *storage_type*.

    Supported tiers are tier0, tier1, tier3 and tier5k. Fixed IOPS (tier5k)
    is limited to volumes of 200 GB or less, the break-even size with tier0
    (200 GB @ 25 IOPS/GB = 5000 IOPS).

    Raises:
        ImageImportError: unknown type, or the tier is inactive in the workspace.
    """
    storage_type = storage_type.lower()
    if storage_type not in VALID_STORAGE_TYPES:
        raise ImageImportError(f"provide valid StorageType. Allowable values are {VALID_STORAGE_TYPES}")

    try:
        tiers = await powervs.get_storage_tiers(session, workspace)
    except CloudAPIError as e:
        raise ImageImportError(f"an error occurred while retrieving the storage tier availability. err: {e}") from e

    for tier in tiers:
        if tier.name == storage_type and tier.state == STORAGE_TIER_INACTIVE:
            raise ImageImportError(
                "the requested storage tier is not available in the provided cloud instance. "
                "Please retry with a different tier"
            )


async def import_image(session, workspace, opts, clock=None):
    """Import ``opts.object_name`` from the COS bucket as a workspace image.

    Steps:
        1. Validate the storage tier
        2. Resolve HMAC credentials for private buckets without explicit keys
        3. Start the import job and poll it until completed/failed
        4. Look the image up by name
        5. With ``opts.watch``, poll the image until it is active

    Each poll phase gets its own ``opts.watch_timeout`` deadline.

    Returns:
        The imported Image (its last observed state).

    Raises:
        ImageImportError: a step failed or the job reported failure.
        PollTimeoutError: a poll phase ran out of time.
    """
    clock = clock or LoopClock()

    await check_storage_tier_availability(session, workspace, opts.storage_type)

    if opts.needs_credentials:
        creds = await resolve_hmac_credentials(session, opts.bucket, opts.region, opts.service_cred_name)
        opts = dataclasses.replace(opts, access_key=creds.access_key, secret_key=creds.secret_key)

    logger.info(f"Importing image {opts.image_name}. Please wait...")
    job_ref = await powervs.import_image(
        session,
        workspace,
        image_name=opts.image_name,
        image_filename=opts.object_name,
        region=opts.region,
        access_key=opts.access_key,
        secret_key=opts.secret_key,
        bucket_name=opts.bucket,
        storage_type=opts.storage_type.lower(),
        bucket_access=opts.bucket_access,
    )
    start = clock.time()

    async def job_done():
        try:
            job = await powervs.get_job(session, workspace, job_ref.id)
        except CloudAPIError as e:
            raise ImageImportError(f"image import job failed to complete, err: {e}") from e
        if job.state == JOB_STATE_COMPLETED:
            logger.debug(f"Image uploaded successfully, took {format_duration(clock.time() - start)}")
            return True
        if job.state == JOB_STATE_FAILED:
            raise ImageImportError(f"image import job failed to complete, err: {job.message}")
        logger.info(f"Image import is in-progress, current state: {job.state}")
        return False

    await poll_until(JOB_POLL_INTERVAL, opts.watch_timeout, job_done, description=f"import job {job_ref.id}", clock=clock)

    logger.info("Retrieving image details")
    # The job result carries no image id; the name is the only correlation
    image = await powervs.get_image_by_name(session, workspace, opts.image_name)

    if not opts.watch:
        logger.info(
            f"Image import for {image.name} is currently in {image.state} state, "
            "Please check the progress in the IBM cloud UI"
        )
        return image

    logger.info(f"Waiting for image {opts.image_name} to be active. Please wait...")

    async def image_active():
        nonlocal image
        try:
            current = await powervs.get_image(session, workspace, image.image_id)
        except CloudAPIError as e:
            raise ImageImportError(
                f"failed to import the image, err: {e}\n\n"
                f'Run the command "pvsadm get events -i {workspace.guid}" to get more information about the failure'
            ) from e
        image = current
        if current.state == IMAGE_STATE_ACTIVE:
            logger.info(
                f"Successfully imported the image: {current.name} with ID: {current.image_id} "
                f"Total time taken: {format_duration(clock.time() - start)}"
            )
            return True
        logger.info(f"Waiting for image to be active. Current state: {current.state}")
        return False

    await poll_until(IMAGE_POLL_INTERVAL, opts.watch_timeout, image_active, description=f"image {image.name} to be active", clock=clock)
    return image
