"""
Host catalog.

Derives the list of FLP hosts from inventory key names and the externally
visible prefixes an operator uses to browse readout and QC configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from hardware_topology.config.settings import ConnectorSettings


@dataclass(frozen=True)
class HostCatalogView:
    hosts: List[str]
    readout_prefix: str
    qc_prefix: str


def list_hosts(keys: Iterable[str], hardware_path: str) -> List[str]:
    """
    Distinct host names in first seen order.

    The host is the path segment right after hardware_path. Keys outside
    hardware_path are dropped.
    """
    prefix = hardware_path.rstrip("/") + "/"
    seen: dict[str, None] = {}
    for key in keys:
        if not key.startswith(prefix):
            continue
        host = key[len(prefix):].split("/", 1)[0]
        if host:
            seen.setdefault(host, None)
    return list(seen)


def build_prefixes(settings: ConnectorSettings) -> tuple[str, str]:
    """Return readout and QC prefixes, both empty unless hostname and port are set."""
    if not settings.hostname or settings.port is None:
        return "", ""
    base = f"{settings.hostname}:{settings.port}"
    return f"{base}/{settings.readout_subpath}", f"{base}/{settings.qc_subpath}"


def describe_hosts(keys: Iterable[str], settings: ConnectorSettings) -> HostCatalogView:
    readout_prefix, qc_prefix = build_prefixes(settings)
    return HostCatalogView(
        hosts=list_hosts(keys, settings.flp_hardware_path),
        readout_prefix=readout_prefix,
        qc_prefix=qc_prefix,
    )
