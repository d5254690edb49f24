"""
Core types.

This file defines the shared data structures used across the topology pipeline.

Important design choice
Hardware descriptors in the store are loosely typed. We model them as an open
record: the fields the pipeline inspects are typed, everything else is kept in
a passthrough mapping so unknown fields survive a read and render cycle.

Key layout
inventory      <flp_hardware_path>/<host>/cards
configuration  <readout_path>/<host>/<kind>/<serial>/<endpoint>
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict

_TYPED_FIELDS = ("type", "serial", "endpoint")


class UnitKind(StrEnum):
    """
    Readout card type codes.

    cru
      Common Readout Unit. The only kind with configuration in the store.

    crorc
      Legacy readout card. Present in inventory only, never configured here.
    """

    cru = "cru"
    crorc = "crorc"


@dataclass
class HardwareUnit:
    """
    A single readout card as described by the hardware inventory.

    type is compared case insensitively, the original spelling is kept.
    serial is always a string, numeric serials from the store are coerced.
    endpoint defaults to 0 when the descriptor does not carry one.
    extra holds every other field, for example pciAddress or numaNode.

    raw is the descriptor exactly as read from the store. The typed fields are
    used for filtering, identity and ordering only; to_dict renders raw.
    """

    type: str = ""
    serial: str = ""
    endpoint: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> HardwareUnit:
        """Raises ValueError when endpoint is present but not an integer."""
        serial = obj.get("serial", "")
        endpoint = obj.get("endpoint", 0)
        if endpoint is None:
            endpoint = 0
        if isinstance(endpoint, bool) or not isinstance(endpoint, int):
            raise ValueError(f"endpoint must be an integer, got {endpoint!r}")
        return cls(
            type=str(obj.get("type", "")),
            serial="" if serial is None else str(serial),
            endpoint=endpoint,
            extra={k: v for k, v in obj.items() if k not in _TYPED_FIELDS},
            raw=dict(obj),
        )

    def is_kind(self, kind: UnitKind) -> bool:
        return self.type.lower() == kind.value

    def to_dict(self) -> Dict[str, Any]:
        if self.raw is not None:
            return dict(self.raw)
        out: Dict[str, Any] = {"type": self.type, "serial": self.serial, "endpoint": self.endpoint}
        out.update(self.extra)
        return out


@dataclass
class MergedUnitRecord:
    """
    Inventory identity joined with stored configuration.

    config is an empty dict until a configuration entry for the same UnitId
    is found under the readout path.
    """

    info: HardwareUnit
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"info": self.info.to_dict(), "config": self.config}


@dataclass(frozen=True)
class KVPair:
    """One key value entry ready to be written to the store."""

    key: str
    value: str


RawHardwareRecord = Dict[str, HardwareUnit]
HostTopology = Dict[str, Dict[str, MergedUnitRecord]]


def make_unit_id(kind: str, serial: str, endpoint: int | str) -> str:
    """Build the canonical kind_serial_endpoint identifier."""
    return f"{kind.lower()}_{serial}_{endpoint}"


def split_unit_id(unit_id: str) -> tuple[str, str, str]:
    """
    Split a UnitId into kind, serial and endpoint.

    kind ends at the first underscore and endpoint starts after the last one,
    so serials containing underscores are preserved.
    """
    kind, sep, rest = unit_id.partition("_")
    serial, sep2, endpoint = rest.rpartition("_")
    if not sep or not sep2 or not kind or not endpoint:
        raise ValueError(f"malformed unit id: {unit_id}")
    return kind, serial, endpoint


def dump_config(config: Dict[str, Any]) -> str:
    """Compact JSON used for configuration values in the store."""
    return json.dumps(config, separators=(",", ":"))
