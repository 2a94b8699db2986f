"""Declarative table of every Robot API operation.

Each ``EndpointSpec`` maps one client operation onto an HTTP verb, a path
template and a set of parameters. Parameters named in the path template are
substituted into the URL; the rest travel in the query string for ``GET``
requests and in the form body otherwise, under the wire field name the
Robot service expects.
"""

import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

from robot_api.client.errors import InvalidParameterError, MissingParameterError
from robot_api.client.models import PreparedRequest

BOOT_SYSTEMS = ("rescue", "linux", "vnc", "windows", "plesk", "cpanel")
RESET_TYPES = ("sw", "hw", "man")
TRAFFIC_TYPES = ("day", "month", "year")
VSERVER_COMMANDS = ("start", "stop", "shutdown")


@dataclass(frozen=True)
class Param:
    name: str
    field: str = ""  # wire name; defaults to `name`
    required: bool = False
    default: Any = None
    choices: tuple = ()
    label: str = ""  # human name used in error messages

    @property
    def wire_name(self) -> str:
        return self.field or self.name

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()


@dataclass(frozen=True)
class EndpointSpec:
    name: str
    method: str
    path: str
    params: tuple[Param, ...] = ()
    fixed: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def path_params(self) -> frozenset[str]:
        return frozenset(
            name for _, name, _, _ in string.Formatter().parse(self.path) if name
        )

    def prepare(self, **arguments: Any) -> PreparedRequest:
        """Validate arguments and build the request for this operation.

        Raises MissingParameterError / InvalidParameterError synchronously,
        before any network activity. Unknown keywords raise TypeError.
        """
        known = {p.name for p in self.params}
        unexpected = set(arguments) - known
        if unexpected:
            raise TypeError(
                f"{self.name}() got unexpected argument(s): {', '.join(sorted(unexpected))}"
            )

        values: dict[str, Any] = {}
        for param in self.params:
            value = arguments.get(param.name)
            if value is None:
                if param.required:
                    raise MissingParameterError(param.name, param.display_name)
                value = param.default
            if value is not None and param.choices and value not in param.choices:
                raise InvalidParameterError(param.name, value, param.choices)
            values[param.name] = value

        path_params = self.path_params
        path = self.path.format(**{
            name: quote(str(values[name]), safe=":")
            for name in path_params
        })

        fields: dict[str, Any] = {}
        for param in self.params:
            value = values[param.name]
            if param.name in path_params or value is None:
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                if value:
                    fields[f"{param.wire_name}[]"] = list(value)
                continue
            fields[param.wire_name] = value

        if self.method == "GET":
            return PreparedRequest(method=self.method, path=path, params=fields)
        return PreparedRequest(
            method=self.method, path=path, data={**fields, **self.fixed}
        )


def _ip(label: str = "Server IP") -> Param:
    return Param("ip", required=True, label=label)


def _storagebox_id() -> Param:
    return Param("storagebox_id", required=True, label="Storage box ID")


def _fixed(**fields: Any) -> Mapping[str, Any]:
    return MappingProxyType(fields)


def _boot_endpoints(system: str, enable_params: tuple[Param, ...], has_last: bool) -> list[EndpointSpec]:
    path = f"/boot/{{ip}}/{system}"
    specs = [
        EndpointSpec(f"query_{system}", "GET", path, (_ip(),)),
        EndpointSpec(f"enable_{system}", "POST", path, (_ip(), *enable_params)),
        EndpointSpec(f"disable_{system}", "DELETE", path, (_ip(),)),
    ]
    if has_last:
        specs.append(EndpointSpec(f"query_last_{system}", "GET", f"{path}/last", (_ip(),)))
    return specs


_ARCH = Param("architecture", "arch", default=64, choices=(32, 64))
_LANG = Param("language", "lang", default="en")
_KEYS = Param("keys", "authorized_key")
_DIST = Param("distribution", "dist", required=True, label="Installation distribution")
_HOSTNAME = Param("hostname", required=True, label="Installation hostname")

_SPECS: list[EndpointSpec] = [
    # Servers
    EndpointSpec("list_servers", "GET", "/server"),
    EndpointSpec("query_server", "GET", "/server/{ip}", (_ip(),)),
    EndpointSpec("update_server_name", "POST", "/server/{ip}", (
        _ip(),
        Param("new_name", "server_name", required=True, label="New server name"),
    )),

    # Cancellation
    EndpointSpec("query_cancellation", "GET", "/server/{ip}/cancellation", (_ip(),)),
    EndpointSpec("cancel_server", "POST", "/server/{ip}/cancellation", (
        _ip(),
        Param("cancellation_date", required=True, label="Server cancellation date"),
        Param("cancellation_reason"),
    )),
    EndpointSpec("revoke_cancellation", "DELETE", "/server/{ip}/cancellation", (_ip(),)),

    # IPs and traffic warnings
    EndpointSpec("list_ips", "GET", "/ip", (Param("server_ip"),)),
    EndpointSpec("query_ip", "GET", "/ip/{ip}", (_ip("IP address"),)),
    EndpointSpec("update_traffic_warnings", "POST", "/ip/{ip}", (
        _ip("IP address"),
        Param("enable_warnings", "traffic_warnings", required=True,
              label="Traffic warning enable switch"),
        Param("hourly_threshold", "traffic_hourly", required=True,
              label="Hourly traffic threshold"),
        Param("daily_threshold", "traffic_daily", required=True,
              label="Daily traffic threshold"),
        Param("monthly_threshold", "traffic_monthly", required=True,
              label="Monthly traffic threshold"),
    )),

    # Reset
    EndpointSpec("list_resets", "GET", "/reset"),
    EndpointSpec("query_reset", "GET", "/reset/{ip}", (_ip(),)),
    EndpointSpec("reset_server", "POST", "/reset/{ip}", (
        _ip(),
        Param("reset_type", "type", default="sw", choices=RESET_TYPES),
    )),

    # Wake on LAN
    EndpointSpec("query_wol", "GET", "/wol/{ip}", (_ip(),)),
    EndpointSpec("send_wol", "POST", "/wol/{ip}", (_ip(),)),

    # Boot configuration
    EndpointSpec("query_boot_config", "GET", "/boot/{ip}", (_ip(),)),
    *_boot_endpoints("rescue", (
        Param("operating_system", "os", required=True, label="Operating system"),
        _ARCH,
        _KEYS,
    ), has_last=True),
    *_boot_endpoints("linux", (_DIST, _ARCH, _LANG, _KEYS), has_last=True),
    *_boot_endpoints("vnc", (_DIST, _ARCH, _LANG), has_last=False),
    *_boot_endpoints("windows", (_LANG,), has_last=False),
    *_boot_endpoints("plesk", (_DIST, _HOSTNAME, _ARCH, _LANG), has_last=False),
    *_boot_endpoints("cpanel", (_DIST, _HOSTNAME, _ARCH, _LANG), has_last=False),

    # Reverse DNS
    EndpointSpec("list_rdns", "GET", "/rdns"),
    EndpointSpec("query_rdns", "GET", "/rdns/{ip}", (_ip("IP address"),)),
    EndpointSpec("create_rdns", "PUT", "/rdns/{ip}", (
        _ip("IP address"),
        Param("pointer_record", "ptr", required=True, label="Pointer record name"),
    )),
    EndpointSpec("update_rdns", "POST", "/rdns/{ip}", (
        _ip("IP address"),
        Param("pointer_record", "ptr", required=True, label="Pointer record name"),
    )),
    EndpointSpec("delete_rdns", "DELETE", "/rdns/{ip}", (_ip("IP address"),)),

    # Traffic statistics
    EndpointSpec("query_traffic", "POST", "/traffic", (
        Param("traffic_type", "type", required=True, choices=TRAFFIC_TYPES, label="Traffic type"),
        Param("date_from", "from", required=True, label="Start date"),
        Param("date_to", "to", required=True, label="End date"),
        Param("ips", "ip"),
        Param("subnets", "subnet"),
    )),

    # SSH keys
    EndpointSpec("list_keys", "GET", "/key"),
    EndpointSpec("query_key", "GET", "/key/{fingerprint}", (
        Param("fingerprint", required=True, label="Key fingerprint"),
    )),
    EndpointSpec("create_key", "POST", "/key", (
        Param("name", required=True, label="Key name"),
        Param("data", required=True, label="Key data"),
    )),
    EndpointSpec("update_key_name", "POST", "/key/{fingerprint}", (
        Param("fingerprint", required=True, label="Key fingerprint"),
        Param("name", required=True, label="Key name"),
    )),
    EndpointSpec("delete_key", "DELETE", "/key/{fingerprint}", (
        Param("fingerprint", required=True, label="Key fingerprint"),
    )),

    # Storage boxes
    EndpointSpec("list_storage_boxes", "GET", "/storagebox"),
    EndpointSpec("query_storage_box", "GET", "/storagebox/{storagebox_id}", (_storagebox_id(),)),
    EndpointSpec("update_storage_box_name", "POST", "/storagebox/{storagebox_id}", (
        _storagebox_id(),
        Param("new_name", "storagebox_name", required=True, label="New storage box name"),
    )),

    # Storage box snapshots
    EndpointSpec("list_snapshots", "GET", "/storagebox/{storagebox_id}/snapshot", (_storagebox_id(),)),
    EndpointSpec("create_snapshot", "POST", "/storagebox/{storagebox_id}/snapshot", (_storagebox_id(),)),
    EndpointSpec("delete_snapshot", "DELETE", "/storagebox/{storagebox_id}/snapshot/{snapshot_name}", (
        _storagebox_id(),
        Param("snapshot_name", required=True, label="Snapshot name"),
    )),
    EndpointSpec("revert_snapshot", "POST", "/storagebox/{storagebox_id}/snapshot/{snapshot_name}", (
        _storagebox_id(),
        Param("snapshot_name", required=True, label="Snapshot name"),
    ), fixed=_fixed(revert="true")),

    # Virtual servers
    EndpointSpec("vserver_command", "POST", "/vserver/{ip}/command", (
        _ip("Virtual server IP"),
        Param("command", "type", required=True, choices=VSERVER_COMMANDS, label="Command"),
    )),
    *(
        EndpointSpec(f"{command}_vserver", "POST", "/vserver/{ip}/command",
                     (_ip("Virtual server IP"),), fixed=_fixed(type=command))
        for command in VSERVER_COMMANDS
    ),
]

ENDPOINTS: Mapping[str, EndpointSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})
