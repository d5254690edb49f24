"""
Configuration merge.

Joins the identity skeleton from the resolver with the configuration entries
stored under the readout path.

Key shape
<readout_path>/<host>/<kind>/<serial>/<endpoint>

Policy
An entry whose UnitId exists for its host replaces that record's config.
An entry with no matching identity refers to hardware that is gone or not yet
discovered, it is skipped without error.
A matching entry with invalid JSON raises ParseFailure.

The skeleton passed in is never mutated. The merged topology is built only once
every matching value has parsed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

from hardware_topology.core.errors import ParseFailure
from hardware_topology.core.types import HostTopology, MergedUnitRecord, make_unit_id

logger = logging.getLogger(__name__)


def unit_ref_from_key(key: str, readout_path: str) -> tuple[str, str] | None:
    """
    Return host and UnitId for a configuration key.

    None when the key does not have the host/kind/serial/endpoint shape.
    """
    prefix = readout_path.rstrip("/") + "/"
    if not key.startswith(prefix):
        return None
    parts = key[len(prefix):].split("/")
    if len(parts) != 4 or not all(parts):
        return None
    host, kind, serial, endpoint = parts
    return host, make_unit_id(kind, serial, endpoint)


def merge_configuration(
    skeleton: HostTopology,
    raw_values: Mapping[str, str | None],
    readout_path: str,
) -> HostTopology:
    """Attach stored configuration to the matching units."""
    configs: Dict[tuple[str, str], Dict[str, Any]] = {}
    ignored = 0

    for key, raw in raw_values.items():
        ref = unit_ref_from_key(key, readout_path)
        if ref is None or raw is None:
            continue
        host, unit_id = ref
        if unit_id not in skeleton.get(host, {}):
            ignored += 1
            logger.debug("no inventory match for configuration key %s", key)
            continue
        try:
            configs[ref] = json.loads(raw)
        except ValueError as exc:
            raise ParseFailure(f"invalid json under {key}: {exc}") from exc

    if ignored:
        logger.debug("ignored %d configuration entries without inventory match", ignored)

    merged: HostTopology = {}
    for host, units in skeleton.items():
        merged[host] = {
            unit_id: MergedUnitRecord(info=record.info, config=configs.get((host, unit_id), dict(record.config)))
            for unit_id, record in units.items()
        }
    return merged
