"""
Topology service.

Purpose
Compose the topology pipeline against a key store gateway:

list_hosts                keys scan, then host catalog
cards_by_host             values scan of the inventory, then parser
crus_by_host              cards_by_host, then identity resolution
crus_with_configuration   crus_by_host, then values scan of the readout path and merge
save_configuration        serialize, then one write per unit

Every call rebuilds its result from the store. Nothing is cached between
calls, the store stays the single source of truth.

Reads within a call are sequential. The configuration scan only makes sense
once identities are known.

Failures
ConfigurationMissing is raised before any I/O when no gateway was supplied.
KeyNotFound from a scan is treated as an empty prefix.
Everything else from the gateway propagates unchanged.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from hardware_topology.config.settings import ConnectorSettings
from hardware_topology.core.errors import ConfigurationMissing, KeyNotFound
from hardware_topology.core.types import HostTopology, KVPair, RawHardwareRecord, UnitKind
from hardware_topology.store.base import KeyStoreGateway
from hardware_topology.topology.catalog import HostCatalogView, describe_hosts
from hardware_topology.topology.identity import resolve_units
from hardware_topology.topology.kv import to_kv_pairs
from hardware_topology.topology.merge import merge_configuration
from hardware_topology.topology.parser import parse_cards_by_host

logger = logging.getLogger(__name__)

GATEWAY_MISSING_MESSAGE = "Unable to retrieve configuration of consul service"


class TopologyService:
    """
    Readout card topology over a key store.

    gateway may be None. The service is still constructible so callers can
    report a configuration problem per request instead of failing at startup.
    """

    def __init__(
        self,
        gateway: KeyStoreGateway | None,
        settings: ConnectorSettings | None = None,
        kind: UnitKind = UnitKind.cru,
    ) -> None:
        self._gateway = gateway
        self._settings = settings or ConnectorSettings()
        self._kind = kind

    @property
    def settings(self) -> ConnectorSettings:
        return self._settings

    def _require_gateway(self) -> KeyStoreGateway:
        if self._gateway is None:
            raise ConfigurationMissing(GATEWAY_MISSING_MESSAGE)
        return self._gateway

    def _scan_values(self, prefix: str) -> Dict[str, str | None]:
        try:
            return self._require_gateway().get_raw_values_by_prefix(prefix)
        except KeyNotFound:
            logger.debug("no values under %s", prefix)
            return {}

    def _scan_keys(self, prefix: str) -> List[str]:
        try:
            return self._require_gateway().get_keys_by_prefix(prefix)
        except KeyNotFound:
            logger.debug("no keys under %s", prefix)
            return []

    def leader(self) -> str:
        return self._require_gateway().get_leader_status()

    def list_hosts(self) -> HostCatalogView:
        keys = self._scan_keys(self._settings.flp_hardware_path)
        return describe_hosts(keys, self._settings)

    def cards_by_host(self) -> Dict[str, RawHardwareRecord]:
        raw = self._scan_values(self._settings.flp_hardware_path)
        return parse_cards_by_host(raw, self._settings.flp_hardware_path)

    def crus_by_host(self) -> HostTopology:
        return resolve_units(self.cards_by_host(), self._kind)

    def crus_with_configuration(self) -> HostTopology:
        skeleton = self.crus_by_host()
        raw = self._scan_values(self._settings.readout_path)
        return merge_configuration(skeleton, raw, self._settings.readout_path)

    def save_configuration(self, topology: HostTopology) -> List[KVPair]:
        """
        Write the config of every unit in topology.

        Writes go out in topology order and stop at the first failure, which
        propagates to the caller.
        """
        gateway = self._require_gateway()
        pairs = to_kv_pairs(topology, self._settings.readout_path)
        for pair in pairs:
            gateway.write_key_value(pair.key, pair.value)
        logger.info("saved configuration for %d units", len(pairs))
        return pairs
