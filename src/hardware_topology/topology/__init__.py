"""
Topology package.

This makes the topology folder an explicit package so both Python and mypy
resolve modules consistently.
"""

from hardware_topology.topology.service import GATEWAY_MISSING_MESSAGE, TopologyService

__all__ = ["GATEWAY_MISSING_MESSAGE", "TopologyService"]
