"""Tests for robot_api/client/endpoints.py — request preparation."""

import pytest

from robot_api.client.endpoints import ENDPOINTS, EndpointSpec, Param
from robot_api.client.errors import InvalidParameterError, MissingParameterError
from robot_api.client.robot import RobotClient


class TestEndpointTable:

    def test_every_operation_is_a_client_method(self):
        for name in ENDPOINTS:
            assert callable(getattr(RobotClient, name)), name

    def test_operations_match_table(self):
        assert RobotClient.operations == frozenset(ENDPOINTS)

    def test_boot_operations_present(self):
        for system in ("rescue", "linux", "vnc", "windows", "plesk", "cpanel"):
            for verb in ("query", "enable", "disable"):
                assert f"{verb}_{system}" in ENDPOINTS
        assert "query_last_rescue" in ENDPOINTS
        assert "query_last_linux" in ENDPOINTS
        assert "query_last_vnc" not in ENDPOINTS


class TestPrepare:

    def test_path_substitution(self):
        prepared = ENDPOINTS["query_server"].prepare(ip="1.2.3.4")
        assert prepared.method == "GET"
        assert prepared.path == "/server/1.2.3.4"
        assert prepared.params == {}

    def test_fingerprint_colons_kept(self):
        prepared = ENDPOINTS["query_key"].prepare(fingerprint="aa:bb:cc")
        assert prepared.path == "/key/aa:bb:cc"

    def test_path_values_quoted(self):
        prepared = ENDPOINTS["delete_snapshot"].prepare(storagebox_id=1, snapshot_name="a b/c")
        assert prepared.path == "/storagebox/1/snapshot/a%20b%2Fc"

    def test_missing_required(self):
        with pytest.raises(MissingParameterError, match="Server IP is missing.") as exc_info:
            ENDPOINTS["query_server"].prepare()
        assert exc_info.value.parameter == "ip"

    def test_missing_named_field(self):
        with pytest.raises(MissingParameterError, match="New server name is missing."):
            ENDPOINTS["update_server_name"].prepare(ip="1.2.3.4")

    def test_field_renamed_on_wire(self):
        prepared = ENDPOINTS["update_server_name"].prepare(ip="1.2.3.4", new_name="web-1")
        assert prepared.method == "POST"
        assert prepared.data == {"server_name": "web-1"}

    def test_reset_defaults_to_software(self):
        prepared = ENDPOINTS["reset_server"].prepare(ip="1.2.3.4")
        assert prepared.data == {"type": "sw"}

    def test_invalid_choice(self):
        with pytest.raises(InvalidParameterError):
            ENDPOINTS["reset_server"].prepare(ip="1.2.3.4", reset_type="reboot")

    def test_boot_defaults(self):
        prepared = ENDPOINTS["enable_linux"].prepare(ip="1.2.3.4", distribution="Debian 12 base")
        assert prepared.data == {"dist": "Debian 12 base", "arch": 64, "lang": "en"}

    def test_list_fields_use_brackets(self):
        prepared = ENDPOINTS["enable_rescue"].prepare(
            ip="1.2.3.4", operating_system="linux", keys=["aa:bb", "cc:dd"],
        )
        assert prepared.data == {"os": "linux", "arch": 64, "authorized_key[]": ["aa:bb", "cc:dd"]}

    def test_empty_list_omitted(self):
        prepared = ENDPOINTS["enable_rescue"].prepare(ip="1.2.3.4", operating_system="linux", keys=[])
        assert "authorized_key[]" not in prepared.data

    def test_get_fields_go_to_query(self):
        prepared = ENDPOINTS["list_ips"].prepare(server_ip="1.2.3.4")
        assert prepared.params == {"server_ip": "1.2.3.4"}
        assert prepared.data == {}

    def test_optional_none_omitted(self):
        prepared = ENDPOINTS["list_ips"].prepare()
        assert prepared.params == {}

    def test_fixed_fields_merged(self):
        prepared = ENDPOINTS["revert_snapshot"].prepare(storagebox_id=7, snapshot_name="snap")
        assert prepared.data == {"revert": "true"}

    def test_command_shortcut(self):
        prepared = ENDPOINTS["stop_vserver"].prepare(ip="1.2.3.4")
        assert prepared.path == "/vserver/1.2.3.4/command"
        assert prepared.data == {"type": "stop"}

    def test_traffic_renames(self):
        prepared = ENDPOINTS["query_traffic"].prepare(
            traffic_type="month", date_from="2024-01", date_to="2024-02", ips=["1.2.3.4"],
        )
        assert prepared.data == {
            "type": "month",
            "from": "2024-01",
            "to": "2024-02",
            "ip[]": ["1.2.3.4"],
        }

    def test_false_is_not_missing(self):
        prepared = ENDPOINTS["update_traffic_warnings"].prepare(
            ip="1.2.3.4", enable_warnings=False,
            hourly_threshold=1, daily_threshold=2, monthly_threshold=3,
        )
        assert prepared.data["traffic_warnings"] is False

    def test_unexpected_argument(self):
        with pytest.raises(TypeError):
            ENDPOINTS["list_servers"].prepare(ip="1.2.3.4")


class TestParam:

    def test_display_name_from_name(self):
        assert Param("snapshot_name").display_name == "Snapshot name"

    def test_wire_name_default(self):
        assert Param("name").wire_name == "name"

    def test_path_params(self):
        spec = EndpointSpec("x", "GET", "/a/{one}/b/{two}")
        assert spec.path_params == frozenset({"one", "two"})
