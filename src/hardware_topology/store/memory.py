"""
In memory key store.

This gateway is used for tests and local simulations.
It behaves like a flat key value database keyed by full key path.

Features
- Prefix scans in insertion order, like a store enumerating its keys
- Raises KeyNotFound for empty prefixes, like the Consul HTTP API
- Can inject failures per operation for error path testing
- Can deny writes for chosen keys
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hardware_topology.core.errors import KeyNotFound, PermissionDenied, StoreUnavailable
from hardware_topology.store.base import KeyStoreGateway


@dataclass
class InMemoryKeyStore(KeyStoreGateway):
    """
    In memory gateway.

    data
    Full key path to raw value. None marks a folder key.

    failures
    Optional mapping of operation name to exception. When an operation is
    listed, it raises that exception instead of touching data.
    Operation names: scan_values, scan_keys, leader, write.

    read_only_keys
    Writes to these keys raise PermissionDenied.
    """

    data: dict[str, str | None] = field(default_factory=dict)
    leader: str = "127.0.0.1:8300"
    failures: dict[str, Exception] = field(default_factory=dict)
    read_only_keys: set[str] = field(default_factory=set)
    writes: list[tuple[str, str]] = field(default_factory=list)

    def _maybe_fail(self, operation: str) -> None:
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    def get_raw_values_by_prefix(self, prefix: str) -> dict[str, str | None]:
        self._maybe_fail("scan_values")
        found = {k: v for k, v in self.data.items() if k.startswith(prefix)}
        if not found:
            raise KeyNotFound(f"no keys under prefix {prefix}")
        return found

    def get_keys_by_prefix(self, prefix: str) -> list[str]:
        self._maybe_fail("scan_keys")
        found = [k for k in self.data if k.startswith(prefix)]
        if not found:
            raise KeyNotFound(f"no keys under prefix {prefix}")
        return found

    def get_leader_status(self) -> str:
        self._maybe_fail("leader")
        if not self.leader:
            raise StoreUnavailable("no cluster leader")
        return self.leader

    def write_key_value(self, key: str, value: str) -> bool:
        self._maybe_fail("write")
        if key in self.read_only_keys:
            raise PermissionDenied(f"write denied for {key}")
        self.data[key] = value
        self.writes.append((key, value))
        return True
