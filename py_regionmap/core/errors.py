"""Error kinds raised by the region generation core.

Every error is fatal to the current generation run; nothing in the core
retries or returns a partial result.
"""


class RegionMapError(Exception):
    """Base class for region generation failures."""


class InvalidArgument(RegionMapError, ValueError):
    """Non-positive dimensions, negative density or an inconsistent option."""


class PreconditionViolation(RegionMapError, RuntimeError):
    """An operation was invoked before the state it needs exists."""


class ResourceExhaustion(RegionMapError, MemoryError):
    """The grid or a working array does not fit in available memory."""
