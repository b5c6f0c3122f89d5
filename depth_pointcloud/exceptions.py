"""
Error types raised by the depth-to-pointcloud converter.
"""


class DepthPointCloudError(Exception):
    """Base class for all fatal converter errors."""


class UsageError(DepthPointCloudError):
    """Raised when the command line is missing required information."""


class InputFormatError(DepthPointCloudError, ValueError):
    """Raised when the depth image cannot be decoded or lacks a depth channel."""


class DegenerateInputError(DepthPointCloudError, ValueError):
    """Raised when every depth sample holds the same value."""
