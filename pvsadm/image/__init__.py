"""Image workflows: options, COS credential discovery, import."""

from pvsadm.image.credentials import (
    create_hmac_credentials,
    extract_hmac_credentials,
    find_cos_instance,
    resolve_hmac_credentials,
)
from pvsadm.image.errors import ImageImportError
from pvsadm.image.importer import check_storage_tier_availability, import_image
from pvsadm.image.options import ImportOptions, build_options, load_config, parse_duration

__all__ = [
    "ImageImportError",
    "ImportOptions",
    "build_options",
    "load_config",
    "parse_duration",
    "find_cos_instance",
    "create_hmac_credentials",
    "extract_hmac_credentials",
    "resolve_hmac_credentials",
    "check_storage_tier_availability",
    "import_image",
]
