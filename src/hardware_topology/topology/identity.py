"""
Unit identity resolution.

Purpose
Turn per host inventory into a map keyed by UnitId, the stable identifier used
both in memory and as the configuration key path.

Steps per host
1  drop units whose type is not the accepted kind, case insensitive
2  sort the rest by serial, numeric, then by endpoint
3  assign in sorted order into UnitId to MergedUnitRecord with empty config

Duplicates
Two inventory entries with the same serial and endpoint resolve to one UnitId.
Python sorts are stable, so equal units keep their inventory order and the
entry seen later wins.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Dict, Mapping

from hardware_topology.core.types import (
    HardwareUnit,
    HostTopology,
    MergedUnitRecord,
    RawHardwareRecord,
    UnitKind,
    make_unit_id,
)


def _serial_key(serial: str) -> tuple[int, int, str]:
    # numeric serials first, by value; anything else after, lexically
    if serial.isascii() and serial.isdigit():
        return (0, int(serial), "")
    return (1, 0, serial)


def compare_units(a: HardwareUnit, b: HardwareUnit) -> int:
    """
    Order units by serial then endpoint.

    Returns -1 when a sorts first, 1 when b sorts first, 0 for the same identity.
    Serials compare by numeric value, so "9" sorts before "10".
    """
    ka = (_serial_key(a.serial), a.endpoint)
    kb = (_serial_key(b.serial), b.endpoint)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def resolve_host_units(cards: RawHardwareRecord, kind: UnitKind = UnitKind.cru) -> Dict[str, MergedUnitRecord]:
    """Resolve one host. See module docstring."""
    units = [unit for unit in cards.values() if unit.is_kind(kind)]
    units.sort(key=cmp_to_key(compare_units))

    resolved: Dict[str, MergedUnitRecord] = {}
    for unit in units:
        unit_id = make_unit_id(kind.value, unit.serial, unit.endpoint)
        resolved[unit_id] = MergedUnitRecord(info=unit, config={})
    return resolved


def resolve_units(
    cards_by_host: Mapping[str, RawHardwareRecord],
    kind: UnitKind = UnitKind.cru,
) -> HostTopology:
    """
    Resolve every host.

    Hosts without a matching unit are kept with an empty map, so the caller can
    still see the host was inventoried.
    """
    return {host: resolve_host_units(cards, kind) for host, cards in cards_by_host.items()}
