#!/usr/bin/env python3
"""PowerVS admin tools: CLI entrypoint."""

import argparse

from pvsadm.commands.image import register_image_command
from pvsadm.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(prog="pvsadm", description="PowerVS admin tools")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_image_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(debug=args.debug)
    args.func(args)


if __name__ == "__main__":
    main()
