"""
Connector settings.

Construction time options for the topology service.

Recognized keys, camel case as they appear in the GUI configuration file
flpHardwarePath   inventory prefix, default o2/hardware/flps
readoutPath       configuration prefix, default o2/components/readoutcard
hostname          externally visible Consul host, optional
port              externally visible Consul port, optional
readoutSubpath    path appended to host:port for the readout view
qcSubpath         path appended to host:port for the QC view

Absent or non mapping configuration falls back to defaults. Each key is read
on its own, so a file that only sets hostname still gets every other default.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from hardware_topology.core.errors import ParseFailure

DEFAULT_FLP_HARDWARE_PATH = "o2/hardware/flps"
DEFAULT_READOUT_PATH = "o2/components/readoutcard"
DEFAULT_READOUT_SUBPATH = "test/o2/readout/components/"
DEFAULT_QC_SUBPATH = "test/o2/qc/"


def _str_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _optional_port(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


@dataclass(frozen=True)
class ConnectorSettings:
    """
    Settings for TopologyService and TopologyConnector.

    hostname and port are only used to build the external prefixes returned
    with the host list. They do not control how the gateway connects.
    """

    flp_hardware_path: str = DEFAULT_FLP_HARDWARE_PATH
    readout_path: str = DEFAULT_READOUT_PATH
    hostname: str | None = None
    port: int | None = None
    readout_subpath: str = DEFAULT_READOUT_SUBPATH
    qc_subpath: str = DEFAULT_QC_SUBPATH

    @classmethod
    def from_mapping(cls, obj: Any) -> ConnectorSettings:
        if not isinstance(obj, Mapping):
            return cls()
        return cls(
            flp_hardware_path=_str_or(obj.get("flpHardwarePath"), DEFAULT_FLP_HARDWARE_PATH),
            readout_path=_str_or(obj.get("readoutPath"), DEFAULT_READOUT_PATH),
            hostname=_optional_str(obj.get("hostname")),
            port=_optional_port(obj.get("port")),
            readout_subpath=_str_or(obj.get("readoutSubpath"), DEFAULT_READOUT_SUBPATH),
            qc_subpath=_str_or(obj.get("qcSubpath"), DEFAULT_QC_SUBPATH),
        )


def load_settings(path: Path, section: str = "consul") -> ConnectorSettings:
    """
    Load settings from a YAML or JSON file.

    When the root holds a section with the given name, that section is used,
    otherwise the root itself. Empty files yield defaults.
    """
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text) if text.strip() else None
        else:
            raise ParseFailure(f"unsupported settings format: {path.suffix}")
    except (yaml.YAMLError, ValueError) as exc:
        raise ParseFailure(f"invalid settings file {path}: {exc}") from exc

    if isinstance(data, Mapping) and isinstance(data.get(section), Mapping):
        data = data[section]
    return ConnectorSettings.from_mapping(data)
