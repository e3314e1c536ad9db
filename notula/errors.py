from __future__ import annotations


class RenderError(RuntimeError):
    """A render call failed as a whole; no partial document exists."""


class ReferenceFetchError(RenderError):
    """Users, units or branding could not be read from the record store."""


class ImageDecodeError(ValueError):
    """An image payload could not be decoded. Always recovered locally."""
