from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from hardware_topology.config.settings import ConnectorSettings
from hardware_topology.core.errors import (
    ConfigurationMissing,
    ParseFailure,
    PermissionDenied,
    StoreUnavailable,
    TopologyError,
)
from hardware_topology.core.serialization import cards_to_json, topology_info_to_json, topology_to_json
from hardware_topology.store.base import KeyStoreGateway
from hardware_topology.topology.kv import topology_from_json
from hardware_topology.topology.service import TopologyService

logger = logging.getLogger(__name__)

SAVED_MESSAGE = "CRUs configuration saved"


@dataclass(frozen=True)
class ServiceResponse:
    """Status code and JSON body handed to the HTTP layer."""

    status: int
    body: dict[str, Any]


def _status_for(exc: TopologyError) -> int:
    if isinstance(exc, PermissionDenied):
        return 403
    if isinstance(exc, (ConfigurationMissing, StoreUnavailable, ParseFailure)):
        return 502
    return 500


class TopologyConnector:
    """
    Request facing adapter over TopologyService.

    Each method returns a ServiceResponse and never raises for topology errors.
    Response bodies keep the field names the operator GUI expects.
    """

    def __init__(self, gateway: KeyStoreGateway | None, settings: ConnectorSettings | Any = None) -> None:
        if not isinstance(settings, ConnectorSettings):
            settings = ConnectorSettings.from_mapping(settings)
        self._service = TopologyService(gateway, settings)

    @property
    def service(self) -> TopologyService:
        return self._service

    def _respond(self, build: Callable[[], dict[str, Any]]) -> ServiceResponse:
        try:
            return ServiceResponse(200, build())
        except TopologyError as exc:
            status = _status_for(exc)
            logger.error("request failed with %d: %s", status, exc)
            return ServiceResponse(status, {"message": str(exc)})

    def test_store_status(self) -> bool:
        """Liveness probe. Logs the outcome and reports it, never raises."""
        try:
            leader = self._service.leader()
        except TopologyError as exc:
            logger.error("unable to connect to consul: %s", exc)
            return False
        logger.info("successfully connected to consul, leader at %s", leader)
        return True

    def get_flps(self) -> ServiceResponse:
        def build() -> dict[str, Any]:
            view = self._service.list_hosts()
            return {
                "flps": view.hosts,
                "consulReadoutPrefix": view.readout_prefix,
                "consulQcPrefix": view.qc_prefix,
            }

        return self._respond(build)

    def get_cards(self) -> ServiceResponse:
        return self._respond(lambda: cards_to_json(self._service.cards_by_host()))

    def get_crus(self) -> ServiceResponse:
        return self._respond(lambda: topology_info_to_json(self._service.crus_by_host()))

    def get_crus_with_configuration(self) -> ServiceResponse:
        return self._respond(lambda: topology_to_json(self._service.crus_with_configuration()))

    def save_crus_configuration(self, body: Any) -> ServiceResponse:
        """
        Write the config part of a {host: {unitId: {info, config}}} body.

        A malformed body is a client error and yields 400 before any write.
        """
        try:
            topology = topology_from_json(body)
        except ParseFailure as exc:
            logger.error("rejected configuration body: %s", exc)
            return ServiceResponse(400, {"message": str(exc)})

        def build() -> dict[str, Any]:
            self._service.save_configuration(topology)
            return {"info": {"message": SAVED_MESSAGE}}

        return self._respond(build)
