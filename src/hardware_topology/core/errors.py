"""
Error taxonomy.

We separate error types so callers can react correctly.
Example:
ConfigurationMissing is raised before any store call is attempted.
StoreUnavailable means the store could not be reached, callers decide the status.
KeyNotFound is normalized into an empty result by topology queries.
ParseFailure means a stored value or request body is not the expected JSON.
"""


class TopologyError(Exception):
    """Base class for all topology exceptions."""


class ConfigurationMissing(TopologyError):
    """Raised when no key store gateway was supplied."""


class StoreUnavailable(TopologyError):
    """Raised when the key store cannot be reached or has no leader."""


class KeyNotFound(TopologyError):
    """Raised by a gateway when a prefix yields no entries."""


class PermissionDenied(TopologyError):
    """Raised when the key store rejects a write."""


class ParseFailure(TopologyError):
    """Raised when a stored value or request body is not valid for its key."""
