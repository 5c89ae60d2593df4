"""CLI logging setup: simple %(message)s format on stdout."""

import logging
import sys

from pvsadm.redact import SecretRedactingFilter


def setup_cli_logging(debug=False):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). With *debug*, verbose progress
    messages and HTTP request lines are shown too.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    # Filters on a logger don't see records propagated from child loggers
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.INFO if debug else logging.WARNING)
