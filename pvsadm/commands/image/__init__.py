"""Image management: import images into PowerVS workspaces."""


def register_image_command(subparsers):
    """Register the 'image' command with its action subparsers."""
    from pvsadm.commands.image.import_cmd import register_import_target

    image_parser = subparsers.add_parser("image", help="Manage PowerVS images")
    action_subparsers = image_parser.add_subparsers(dest="action", required=True)

    register_import_target(action_subparsers)
