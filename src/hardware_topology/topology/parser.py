"""
Inventory parser.

Turns the raw values of a prefix scan over the hardware inventory path into
typed readout card maps grouped by host.

Key shape
<flp_hardware_path>/<host>/<leaf>

Only the cards leaf carries unit descriptors. Other leaves, such as info, are
ignored even when they live under the same host.

Value shape
{"0": {"type": "CRU", "serial": "1041", "endpoint": 0, "pciAddress": "3b:00.0"}, ...}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

from hardware_topology.core.errors import ParseFailure
from hardware_topology.core.types import HardwareUnit, RawHardwareRecord

logger = logging.getLogger(__name__)

CARDS_LEAF = "cards"


def host_and_leaf(key: str, hardware_path: str) -> tuple[str, str] | None:
    """
    Extract host and leaf from a full inventory key.

    Returns None for keys outside hardware_path or with a different depth.
    """
    prefix = hardware_path.rstrip("/") + "/"
    if not key.startswith(prefix):
        return None
    parts = key[len(prefix):].split("/")
    if len(parts) != 2 or not parts[0]:
        return None
    return parts[0], parts[1]


def _parse_cards(key: str, raw: str) -> RawHardwareRecord:
    try:
        data: Any = json.loads(raw)
    except ValueError as exc:
        raise ParseFailure(f"invalid json under {key}: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseFailure(f"cards under {key} must be an object")

    cards: RawHardwareRecord = {}
    for index, obj in data.items():
        if not isinstance(obj, dict):
            raise ParseFailure(f"card {index} under {key} must be an object")
        try:
            cards[str(index)] = HardwareUnit.from_dict(obj)
        except (TypeError, ValueError) as exc:
            raise ParseFailure(f"card {index} under {key} is malformed: {exc}") from exc
    return cards


def parse_cards_by_host(
    raw_values: Mapping[str, str | None],
    hardware_path: str,
    leaf: str = CARDS_LEAF,
) -> Dict[str, RawHardwareRecord]:
    """
    Group inventory cards by host.

    A host appears only if it has an eligible leaf. When several eligible keys
    resolve to the same host, their indexes are merged in scan order.
    """
    cards_by_host: Dict[str, RawHardwareRecord] = {}
    for key, raw in raw_values.items():
        parsed = host_and_leaf(key, hardware_path)
        if parsed is None or parsed[1] != leaf:
            logger.debug("ignoring inventory key %s", key)
            continue
        if raw is None:
            continue
        host = parsed[0]
        cards_by_host.setdefault(host, {}).update(_parse_cards(key, raw))
    return cards_by_host
