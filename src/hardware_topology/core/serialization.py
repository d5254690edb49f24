from __future__ import annotations

from typing import Any, Dict

from hardware_topology.core.types import HostTopology, RawHardwareRecord


def cards_to_json(cards_by_host: Dict[str, RawHardwareRecord]) -> Dict[str, Any]:
    """
    Raw inventory transport shape.

    host to inventory index to unit descriptor.
    """
    return {
        host: {index: unit.to_dict() for index, unit in cards.items()}
        for host, cards in cards_by_host.items()
    }


def topology_to_json(topology: HostTopology) -> Dict[str, Any]:
    """
    Merged topology transport shape.

    host to UnitId to {info, config}.
    """
    return {
        host: {unit_id: record.to_dict() for unit_id, record in units.items()}
        for host, units in topology.items()
    }


def topology_info_to_json(topology: HostTopology) -> Dict[str, Any]:
    """
    Identity only view.

    Same as topology_to_json with configuration stripped, UnitId maps to info.
    """
    return {
        host: {unit_id: record.info.to_dict() for unit_id, record in units.items()}
        for host, units in topology.items()
    }
