"""
Error Types Module
Exceptions raised by the image diff and style extraction pipeline.
"""


class UIDiffError(Exception):
    """Base class for all pipeline errors."""
    http_status = 500


class DecodeError(UIDiffError):
    """Input bytes are not a supported raster image."""
    http_status = 400


class InvalidDimensionError(UIDiffError):
    """Decoded image has zero width or height."""
    http_status = 400


class DimensionMismatchError(UIDiffError):
    """Diff was requested on rasters of different size."""
    http_status = 500


class ElementNotFoundError(UIDiffError):
    """Selector did not match any element within the wait timeout."""
    http_status = 404


class NavigationError(UIDiffError):
    """Target page failed to load within the navigation timeout."""
    http_status = 502


class PersistenceError(UIDiffError):
    """Style snapshot could not be written to disk."""
    http_status = 500


class UpstreamServiceError(UIDiffError):
    """External report service failed or returned no usable text."""
    http_status = 502
