class ReconError(Exception):
    """Base class for errors surfaced to callers of the engines."""


class InputError(ReconError, ValueError):
    """Missing or malformed target, IP range or port list. Nothing was attempted."""


class PersistenceError(ReconError):
    """The finding store rejected a batch insert."""
