"""
Key store interfaces.

Goal
Define the narrow set of key value store capabilities the topology pipeline
needs, without binding it to a specific store client.

Design notes
Gateways report failures with the error taxonomy in core.errors:
StoreUnavailable for transport or leader problems
KeyNotFound when a prefix holds no entries
PermissionDenied when a write is rejected

Gateways do not retry. Timeouts, if any, belong to the gateway and surface as
StoreUnavailable.
"""

from __future__ import annotations

from typing import Protocol


class KeyStoreGateway(Protocol):
    """
    Capability set consumed by the topology service.

    get_raw_values_by_prefix
    Returns full key path to raw string value for every key under prefix.
    Folder keys may map to None.

    get_keys_by_prefix
    Returns the full key paths under prefix, without values.

    get_leader_status
    Returns the address of the current store leader. Used as a liveness probe.

    write_key_value
    Stores a single raw string value under key.
    """

    def get_raw_values_by_prefix(self, prefix: str) -> dict[str, str | None]:
        """Read every value under prefix."""

    def get_keys_by_prefix(self, prefix: str) -> list[str]:
        """List every key under prefix."""

    def get_leader_status(self) -> str:
        """Return the leader address."""

    def write_key_value(self, key: str, value: str) -> bool:
        """Write value under key."""
