import pytest

from hardware_topology.core.errors import ParseFailure
from hardware_topology.core.types import HardwareUnit, MergedUnitRecord
from hardware_topology.topology.merge import merge_configuration, unit_ref_from_key

RO = "o2/components/readoutcard"


def make_skeleton():
    return {
        "hostA": {
            "cru_123_0": MergedUnitRecord(info=HardwareUnit(type="CRU", serial="123", endpoint=0)),
            "cru_123_1": MergedUnitRecord(info=HardwareUnit(type="CRU", serial="123", endpoint=1)),
        },
        "hostB": {
            "cru_323_0": MergedUnitRecord(info=HardwareUnit(type="CRU", serial="323", endpoint=0)),
        },
    }


def test_configuration_is_attached_by_unit_id():
    raw = {
        RO + "/hostA/cru/123/0": '{"cru":{"type":"CRU"},"link":{"enabled":true}}',
        RO + "/hostA/cru/123/1": '{"cru":{"type":"CRU"},"link":{"enabled":false}}',
        RO + "/hostB/cru/323/0": '{"cru":{"type":"CRU"},"link":{"enabled":true}}',
    }

    merged = merge_configuration(make_skeleton(), raw, RO)

    assert merged["hostA"]["cru_123_0"].config == {"cru": {"type": "CRU"}, "link": {"enabled": True}}
    assert merged["hostA"]["cru_123_1"].config == {"cru": {"type": "CRU"}, "link": {"enabled": False}}
    assert merged["hostB"]["cru_323_0"].config == {"cru": {"type": "CRU"}, "link": {"enabled": True}}
    assert merged["hostA"]["cru_123_0"].info.serial == "123"


def test_configuration_without_identity_is_ignored():
    raw = {
        RO + "/hostA/cru/999/0": '{"link":{"enabled":true}}',
        RO + "/hostC/cru/123/0": '{"link":{"enabled":true}}',
    }

    merged = merge_configuration(make_skeleton(), raw, RO)

    assert list(merged) == ["hostA", "hostB"]
    assert all(r.config == {} for units in merged.values() for r in units.values())


def test_unit_without_configuration_keeps_empty_config():
    raw = {RO + "/hostA/cru/123/0": '{"link":{"enabled":true}}'}

    merged = merge_configuration(make_skeleton(), raw, RO)

    assert merged["hostA"]["cru_123_1"].config == {}
    assert merged["hostB"]["cru_323_0"].config == {}


def test_invalid_json_propagates_and_input_is_untouched():
    skeleton = make_skeleton()
    raw = {
        RO + "/hostA/cru/123/0": '{"link":{"enabled":true}}',
        RO + "/hostA/cru/123/1": "{broken",
    }

    with pytest.raises(ParseFailure):
        merge_configuration(skeleton, raw, RO)

    assert skeleton["hostA"]["cru_123_0"].config == {}


def test_merge_returns_new_records():
    skeleton = make_skeleton()
    raw = {RO + "/hostA/cru/123/0": '{"link":{"enabled":true}}'}

    merged = merge_configuration(skeleton, raw, RO)

    assert merged["hostA"]["cru_123_0"] is not skeleton["hostA"]["cru_123_0"]
    assert skeleton["hostA"]["cru_123_0"].config == {}


def test_unit_ref_from_key():
    assert unit_ref_from_key(RO + "/hostA/cru/123/0", RO) == ("hostA", "cru_123_0")
    assert unit_ref_from_key(RO + "/hostA/CRU/123/0", RO) == ("hostA", "cru_123_0")
    assert unit_ref_from_key(RO + "/hostA/cru/123", RO) is None
    assert unit_ref_from_key(RO + "/", RO) is None
    assert unit_ref_from_key("o2/other/hostA/cru/123/0", RO) is None
