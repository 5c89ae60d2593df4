"""Exceptions raised by the image workflows."""


class ImageImportError(RuntimeError):
    """The image import, or a step it depends on, failed."""
