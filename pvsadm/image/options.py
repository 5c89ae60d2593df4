"""Image import options: the explicit configuration value passed to the workflow."""

import math
import re
from dataclasses import dataclass, fields

import yaml

DEFAULT_STORAGE_TYPE = "tier3"
DEFAULT_WATCH_TIMEOUT = 3600.0
SERVICE_CRED_PREFIX = "pvsadm-service-cred"
VALID_STORAGE_TYPES = ["tier3", "tier1", "tier0", "tier5k"]

# Option field -> flag named in error messages
_REQUIRED_FLAGS = {
    "bucket": "--bucket",
    "region": "--bucket-region",
    "image_name": "--pvs-image-name",
    "object_name": "--object",
}

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def _finite(seconds, value):
    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration: {value!r}")
    return seconds


@dataclass
class ImportOptions:
    """Everything `image import` needs to run, resolved from flags and config."""

    bucket: str
    region: str
    object_name: str
    image_name: str
    workspace_id: str = ""
    workspace_name: str = ""
    access_key: str = ""
    secret_key: str = ""
    public: bool = False
    watch: bool = False
    watch_timeout: float = DEFAULT_WATCH_TIMEOUT
    storage_type: str = DEFAULT_STORAGE_TYPE
    service_cred_name: str = ""

    @property
    def bucket_access(self) -> str:
        return "public" if self.public else "private"

    @property
    def needs_credentials(self) -> bool:
        """True when HMAC keys must be discovered or created for a private bucket."""
        return not self.public and not (self.access_key and self.secret_key)


_OPTION_FIELDS = [f.name for f in fields(ImportOptions)]


def parse_duration(value) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) or Go-style strings such as ``1h``,
    ``1h30m``, ``90s`` or ``500ms``.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return _finite(float(value), value)

    text = str(value).strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return _finite(seconds, value)

    total = 0.0
    pos = 0
    for match in _DURATION_PART_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def format_duration(seconds) -> str:
    """Format seconds, rounded to the second, as ``1h2m3s``."""
    seconds = int(round(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def load_config(config_path: str) -> dict:
    """Load a YAML config file.

    Expected layout::

        env: prod
        image_import:
          region: us-south
          storage_type: tier1

    Keys under ``image_import`` are ImportOptions field names; hyphens may
    stand in for underscores.
    """
    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ValueError(f"Config file '{config_path}' not found") from None
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML config: {e}") from e

    if not isinstance(config, dict):
        raise ValueError(f"Config file '{config_path}' must contain a mapping")
    section = config.get("image_import") or {}
    if not isinstance(section, dict):
        raise ValueError("'image_import' section must be a mapping")
    config["image_import"] = {str(k).replace("-", "_"): v for k, v in section.items()}
    return config


def validate_options(opts: ImportOptions) -> None:
    """Check flag combinations before any API call.

    Raises:
        ValueError: on a missing or inconsistent option.
    """
    # Both, the access key and secret key are either set or unset
    if bool(opts.access_key) != bool(opts.secret_key):
        raise ValueError("required both --accesskey and --secretkey values")
    if not opts.workspace_id and not opts.workspace_name:
        raise ValueError("--workspace-id or --workspace-name required")
    if not math.isfinite(opts.watch_timeout) or opts.watch_timeout <= 0:
        raise ValueError(f"--watch-timeout must be a positive duration, got {opts.watch_timeout}")


def build_options(args, config=None) -> ImportOptions:
    """Merge parsed CLI args over config-file values into a validated ImportOptions.

    Args:
        args: argparse namespace; attributes left at None fall through to
            *config* and then to the dataclass defaults.
        config: mapping of option field name to value (the ``image_import``
            section of the config file).
    """
    values = {}
    config = config or {}
    unknown = sorted(set(config) - set(_OPTION_FIELDS))
    if unknown:
        raise ValueError(f"Unknown image_import option(s) in config: {', '.join(unknown)}")
    values.update(config)

    for name in _OPTION_FIELDS:
        value = getattr(args, name, None)
        if value is not None:
            values[name] = value

    missing = [flag for name, flag in _REQUIRED_FLAGS.items() if not values.get(name)]
    if missing:
        raise ValueError(f"required flag(s) {', '.join(missing)} not set")

    if "watch_timeout" in values:
        values["watch_timeout"] = parse_duration(values["watch_timeout"])

    opts = ImportOptions(**values)
    validate_options(opts)
    return opts
