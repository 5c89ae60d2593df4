"""`image import` CLI handler: import a COS object as a PowerVS workspace image."""

import argparse
import asyncio
import logging
import os
import sys

import httpx

from pvsadm.cloud.api import ENVIRONMENTS, open_session
from pvsadm.cloud.powervs import find_workspace
from pvsadm.image.importer import import_image
from pvsadm.image.options import (
    DEFAULT_STORAGE_TYPE,
    SERVICE_CRED_PREFIX,
    build_options,
    load_config,
)
from pvsadm.poll import PollTimeoutError
from pvsadm.redact import register_secret

logger = logging.getLogger(__name__)

EXAMPLES = """\
Set the API key or feed the --api-key commandline argument:
  export IBMCLOUD_API_KEY=<IBM_CLOUD_API_KEY>

To import the image across two different IBM accounts use the --accesskey and --secretkey options.
To import the image from a public bucket use the --public-bucket or -p option.

examples:
  # import image using default storage type (service credential will be autogenerated)
  pvsadm image import --workspace-name upstream-core-lon04 -b <BUCKETNAME> --object rhel-83-10032020.ova.gz \\
      --pvs-image-name test-image -r <REGION>

  # import image with the access key and secret key given explicitly
  pvsadm image import --workspace-name upstream-core-lon04 -b <BUCKETNAME> --accesskey <ACCESSKEY> \\
      --secretkey <SECRETKEY> --object rhel-83-10032020.ova.gz --pvs-image-name test-image -r <REGION>

  # with user provided storage type
  pvsadm image import --workspace-name upstream-core-lon04 -b <BUCKETNAME> --pvs-storagetype <STORAGETYPE> \\
      --object rhel-83-10032020.ova.gz --pvs-image-name test-image -r <REGION>

  # import image from a public IBM Cloud Storage bucket
  pvsadm image import --workspace-name upstream-core-lon04 -b <BUCKETNAME> --object rhel-83-10032020.ova.gz \\
      --pvs-image-name test-image -r <REGION> --public-bucket
"""

STORAGE_TYPE_HELP = (
    "PowerVS storage type, accepted values are [tier1, tier3, tier0, tier5k]. "
    "Tier 0: 25 IOPS/GB, Tier 1: 10 IOPS/GB, Tier 3: 3 IOPS/GB, "
    "Fixed IOPS/Tier5k: 5000 IOPS regardless of size (volumes of 200 GB or less) "
    f"(default: {DEFAULT_STORAGE_TYPE})"
)


class DeprecatedFlag(argparse.Action):
    """Store the value like a regular flag but warn that the flag is deprecated."""

    def __init__(self, option_strings, dest, notice="", **kwargs):
        self.notice = notice
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        logger.warning(f"Flag {option_string} has been deprecated, {self.notice}")
        setattr(namespace, self.dest, values)


def _resolve_api_key(args_api_key):
    """Return the API key from the CLI flag or IBMCLOUD_API_KEY env var.

    Raises SystemExit if neither is set.
    """
    api_key = args_api_key or os.environ.get("IBMCLOUD_API_KEY")
    if not api_key:
        logger.error("Error: IBM Cloud API key required. Use --api-key or set IBMCLOUD_API_KEY.")
        sys.exit(1)
    register_secret(api_key)
    return api_key


def _resolve_environment(args_env, config):
    environment = args_env or config.get("env") or os.environ.get("IBMCLOUD_ENV") or "prod"
    if environment not in ENVIRONMENTS:
        logger.error(f"Error: unknown environment '{environment}'. Allowed values are {sorted(ENVIRONMENTS)}")
        sys.exit(1)
    return environment


# ── CLI handlers ───────────────────────────────────────────────────


def handle_import(args):
    """CLI handler for 'image import'."""
    asyncio.run(_handle_import(args))


async def _handle_import(args):
    try:
        config = load_config(args.config) if args.config else {}
        opts = build_options(args, config.get("image_import"))
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    api_key = _resolve_api_key(args.api_key)
    environment = _resolve_environment(args.env, config)
    register_secret(opts.secret_key)

    try:
        async with open_session(api_key, environment) as session:
            workspace = await find_workspace(session, opts.workspace_id, opts.workspace_name)
            logger.debug(f"Using workspace {workspace.name} ({workspace.guid}) in {workspace.region_id}")
            await import_image(session, workspace, opts)
    except PollTimeoutError as e:
        logger.error(f"Error: {e}. The import may still be running, check its status in the IBM Cloud UI.")
        sys.exit(1)
    except (RuntimeError, httpx.HTTPError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


# ── Registration ───────────────────────────────────────────────────


def register_import_target(subparsers):
    """Register the 'import' action under 'image'."""
    parser = subparsers.add_parser(
        "import",
        help="Import the image into a PowerVS workspace",
        description="Import the image into a PowerVS workspace",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--workspace-name", default=None, help="PowerVS workspace name")
    parser.add_argument("--workspace-id", default=None, help="PowerVS workspace ID")
    parser.add_argument(
        "--pvs-instance-name", "-n", dest="workspace_name", action=DeprecatedFlag,
        notice="--workspace-name should be used", help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--pvs-instance-id", "-i", dest="workspace_id", action=DeprecatedFlag,
        notice="--workspace-id should be used", help=argparse.SUPPRESS,
    )
    parser.add_argument("--bucket", "-b", default=None, help="Cloud Object Storage bucket name (required)")
    parser.add_argument(
        "--cos-instance-name", "-s", dest="cos_instance_name", action=DeprecatedFlag,
        notice="it will be removed in a future version", help=argparse.SUPPRESS,
    )
    parser.add_argument("--bucket-region", "-r", dest="region", default=None, help="Cloud Object Storage bucket location (required)")
    parser.add_argument("--object", "-o", dest="object_name", default=None, help="Cloud Object Storage object name (required)")
    parser.add_argument("--accesskey", dest="access_key", default=None, help="Cloud Object Storage HMAC access key")
    parser.add_argument("--secretkey", dest="secret_key", default=None, help="Cloud Object Storage HMAC secret key")
    parser.add_argument("--pvs-image-name", dest="image_name", default=None, help="Name of the imported PowerVS image (required)")
    parser.add_argument("--public-bucket", "-p", dest="public", action="store_true", default=None, help="Cloud Object Storage public bucket")
    parser.add_argument(
        "--watch", "-w", action="store_true", default=None,
        help="After image import watch for image to be published and ready to use",
    )
    parser.add_argument("--watch-timeout", default=None, help="Watch timeout, e.g. 1h, 30m, 90s (default: 1h)")
    parser.add_argument("--pvs-storagetype", dest="storage_type", default=None, help=STORAGE_TYPE_HELP)
    parser.add_argument(
        "--cos-service-cred", dest="service_cred_name", default=None,
        help=f"IBM COS service credential name to be auto generated (default: {SERVICE_CRED_PREFIX}-<COS Name>)",
    )
    parser.add_argument("--api-key", default=None, help="IBM Cloud API key (fallback: IBMCLOUD_API_KEY env var)")
    parser.add_argument(
        "--env", default=None, choices=sorted(ENVIRONMENTS),
        help="IBM Cloud environment (fallback: IBMCLOUD_ENV env var, default: prod)",
    )
    parser.add_argument("--config", default=None, help="YAML file with default values for the import options")
    parser.set_defaults(func=handle_import)
