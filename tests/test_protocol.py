"""Tests for the pytapohub protocol layer."""

import base64

import pytest

from pytapohub import control_child, decode_nickname, normalize_child_device
from pytapohub.protocol import parse_device_page

from fake_hub import make_record, make_sensor_record


class TestControlChildEnvelope:
    """Tests for the control_child request builder."""

    def test_set_device_info_envelope(self):
        request = control_child("dev1", "set_device_info", {"device_on": True})
        assert request == {
            "method": "control_child",
            "params": {
                "device_id": "dev1",
                "requestData": {
                    "method": "multipleRequest",
                    "params": {
                        "requests": [
                            {"method": "set_device_info", "params": {"device_on": True}}
                        ]
                    },
                },
            },
        }

    def test_params_default_to_empty_dict(self):
        request = control_child("dev1", "get_device_info")
        inner = request["params"]["requestData"]["params"]["requests"]
        assert inner == [{"method": "get_device_info", "params": {}}]

    def test_single_inner_request(self):
        request = control_child("abc", "get_device_info", {})
        assert len(request["params"]["requestData"]["params"]["requests"]) == 1


class TestDecodeNickname:
    """Tests for base64 nickname decoding."""

    def test_decodes_base64(self):
        encoded = base64.b64encode("Living Room".encode()).decode()
        assert decode_nickname(encoded) == "Living Room"

    def test_decodes_utf8(self):
        encoded = base64.b64encode("Küche".encode("utf-8")).decode()
        assert decode_nickname(encoded) == "Küche"

    @pytest.mark.parametrize("name", ["Living Room", "Hall", "Kitchen 2"])
    def test_decodes_unpadded_base64(self, name):
        encoded = base64.b64encode(name.encode()).decode().rstrip("=")
        assert decode_nickname(encoded) == name

    def test_decodes_bytes(self):
        assert decode_nickname(base64.b64encode(b"Porch")) == "Porch"

    @pytest.mark.parametrize(
        "value",
        [None, "", "not base64!!", "abc", "x", "@@@@", 42, ["x"], "/w==", "ü"],
    )
    def test_malformed_falls_back_to_unknown(self, value):
        assert decode_nickname(value) == "Unknown"


class TestNormalizeChildDevice:
    """Tests for raw record normalization."""

    def test_switch_record(self):
        device = normalize_child_device(
            make_record("dev1", model="S220", nickname="Hall", device_on=True)
        )
        assert device.device_id == "dev1"
        assert device.model == "S220"
        assert device.nickname == "Hall"
        assert device.is_on is True
        assert device.low_battery is False
        assert device.rssi == -60
        assert device.signal_level == 2
        assert device.status == "online"

    def test_missing_nickname(self):
        record = make_record("dev1")
        del record["nickname"]
        assert normalize_child_device(record).nickname == "Unknown"

    def test_malformed_nickname(self):
        record = make_record("dev1", nickname="x")
        record["nickname"] = "%%%"
        assert normalize_child_device(record).nickname == "Unknown"

    def test_raw_is_kept(self):
        record = make_sensor_record("dev2")
        device = normalize_child_device(record)
        assert device.raw["current_temp"] == 21.5
        assert device.raw["report_interval"] == 16

    def test_raw_is_a_copy(self):
        record = make_record("dev1")
        device = normalize_child_device(record)
        record["device_on"] = True
        assert device.raw["device_on"] is False

    def test_missing_state_fields_default_off(self):
        device = normalize_child_device({"device_id": "bare"})
        assert device.is_on is False
        assert device.low_battery is False
        assert device.model is None


class TestParseDevicePage:
    """Tests for child device list page parsing."""

    def test_sum_and_records(self):
        page = parse_device_page(
            {"sum": 23, "child_device_list": [make_record("a"), make_record("b")]}
        )
        assert page.total == 23
        assert [r["device_id"] for r in page.records] == ["a", "b"]

    def test_missing_sum(self):
        page = parse_device_page({"child_device_list": [make_record("a")]})
        assert page.total is None

    def test_zero_sum_is_no_total(self):
        assert parse_device_page({"sum": 0, "child_device_list": []}).total is None

    def test_missing_list(self):
        page = parse_device_page({"sum": 3})
        assert page.records == []

    def test_non_dict_response(self):
        page = parse_device_page(None)
        assert page.total is None
        assert page.records == []

    def test_non_dict_items_skipped(self):
        page = parse_device_page({"child_device_list": ["junk", make_record("a")]})
        assert len(page.records) == 1
