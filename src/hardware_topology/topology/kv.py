"""
Key value serialization for configuration write back.

to_kv_pairs flattens a merged topology into one store entry per unit.
topology_from_json reads the same topology back from a request body, in the
shape produced by core.serialization.topology_to_json.
"""

from __future__ import annotations

from typing import Any, List

from hardware_topology.core.errors import ParseFailure
from hardware_topology.core.types import (
    HardwareUnit,
    HostTopology,
    KVPair,
    MergedUnitRecord,
    UnitKind,
    dump_config,
    split_unit_id,
)


def to_kv_pairs(topology: HostTopology, readout_path: str) -> List[KVPair]:
    """
    One KVPair per unit in topology iteration order.

    key is <readout_path>/<host>/<kind>/<serial>/<endpoint>, value is the unit
    config as compact JSON. info is never written.
    """
    base = readout_path.rstrip("/")
    pairs: List[KVPair] = []
    for host, units in topology.items():
        for unit_id, record in units.items():
            kind, serial, endpoint = split_unit_id(unit_id)
            pairs.append(
                KVPair(
                    key=f"{base}/{host}/{kind}/{serial}/{endpoint}",
                    value=dump_config(record.config),
                )
            )
    return pairs


_KINDS = {kind.value for kind in UnitKind}


def _check_segment(value: str, what: str) -> None:
    if not value or "/" in value or value in {".", ".."}:
        raise ParseFailure(f"invalid {what}: {value!r}")


def _check_unit_id(unit_id: str) -> None:
    """Reject ids that would not map onto exactly kind/serial/endpoint under a host."""
    try:
        kind, serial, endpoint = split_unit_id(unit_id)
    except ValueError as exc:
        raise ParseFailure(str(exc)) from exc
    if kind not in _KINDS:
        raise ParseFailure(f"unknown unit kind in {unit_id!r}")
    _check_segment(serial, "serial")
    if not (endpoint.isascii() and endpoint.isdigit()):
        raise ParseFailure(f"endpoint of {unit_id!r} must be an integer")


def _record_from_json(host: str, unit_id: str, obj: Any) -> MergedUnitRecord:
    where = f"{host}/{unit_id}"
    if not isinstance(obj, dict):
        raise ParseFailure(f"{where} must be an object")
    _check_unit_id(unit_id)

    info = obj.get("info", {}) or {}
    config = obj.get("config", {})
    if config is None:
        config = {}
    if not isinstance(info, dict):
        raise ParseFailure(f"{where}.info must be an object")
    if not isinstance(config, dict):
        raise ParseFailure(f"{where}.config must be an object")
    try:
        unit = HardwareUnit.from_dict(info)
    except (TypeError, ValueError) as exc:
        raise ParseFailure(f"{where}.info is malformed: {exc}") from exc
    return MergedUnitRecord(info=unit, config=dict(config))


def topology_from_json(body: Any) -> HostTopology:
    """Parse {host: {unitId: {info, config}}} into a HostTopology."""
    if not isinstance(body, dict):
        raise ParseFailure("topology must be an object keyed by host")

    topology: HostTopology = {}
    for host, units in body.items():
        _check_segment(str(host), "host")
        if not isinstance(units, dict):
            raise ParseFailure(f"units of {host} must be an object keyed by unit id")
        topology[str(host)] = {
            str(unit_id): _record_from_json(str(host), str(unit_id), obj)
            for unit_id, obj in units.items()
        }
    return topology
