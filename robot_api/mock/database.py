"""In-memory account data for the mock Robot service.

Each authenticated user owns one ``MockAccount`` seeded with a fixed set
of servers, IPs, storage boxes, virtual servers and SSH keys. Lookups raise
``MockApiError`` with the error codes the real service uses.
"""

import base64
import copy
import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone

BOOT_SYSTEMS = ("rescue", "linux", "vnc", "windows", "plesk", "cpanel")


class MockApiError(Exception):
    """Rendered by the mock app as ``{"error": {"status", "code", "message"}}``."""

    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status} {code}: {message}")


def _server(number: int, name: str) -> dict:
    return {
        "server_ip": f"{number}.{number}.{number}.{number}",
        "server_number": number,
        "server_name": name,
        "product": "DS 3000",
        "dc": 6,
        "traffic": "5 TB",
        "flatrate": True,
        "status": "ready",
        "throttled": True,
        "cancelled": False,
        "paid_until": "2099-10-10",
    }


def _ip(number: int) -> dict:
    return {
        "ip": f"{number}.{number}.{number}.{number}",
        "server_ip": f"{number}.{number}.{number}.{number}",
        "server_number": number,
        "locked": False,
        "separate_mac": None,
        "traffic_warnings": False,
        "traffic_hourly": 200,
        "traffic_daily": 2000,
        "traffic_monthly": 20,
    }


def _storage_box(box_id: int, name: str) -> dict:
    return {
        "id": box_id,
        "login": "test",
        "name": name,
        "product": "EX40",
        "cancelled": False,
        "paid_until": "2099-10-10",
    }


SEED_SNAPSHOTS = [
    {"name": "2015-12-21T12-40-38", "timestamp": "2015-12-21T13:40:38+01:00", "size": 400},
    {"name": "2015-12-21T12-40-39", "timestamp": "2015-12-21T13:40:39+01:00", "size": 420},
    {"name": "2015-12-21T12-40-41", "timestamp": "2015-12-21T13:40:41+01:00", "size": 450},
]

SEED_KEYS = [
    {
        "name": "key1",
        "fingerprint": "56:29:99:a4:5d:ed:ac:95:c1:f5:88:82:90:5d:dd:10",
        "type": "ECDSA",
        "size": 521,
        "data": "ecdsa-sha2-nistp521 AAAAE2VjZHNh ...",
    },
    {
        "name": "key2",
        "fingerprint": "15:28:b0:03:95:f0:77:b3:10:56:15:6b:77:22:a5:bb",
        "type": "ED25519",
        "size": 256,
        "data": "ssh-ed25519 AAAAC3NzaC1 ...",
    },
]

SEED_VSERVERS = [
    {"name": "vserver-1", "vserver_ip": "223.223.223.223", "online": True},
    {"name": "vserver-2", "vserver_ip": "224.224.224.224", "online": True},
    {"name": "vserver-3", "vserver_ip": "225.225.225.225", "online": False},
]


def _default_boot(server: dict) -> dict:
    base = {"server_ip": server["server_ip"], "server_number": server["server_number"], "active": False}
    return {
        "rescue": {**base, "os": ["linux", "linuxold", "freebsd", "vkvm"], "arch": [64, 32],
                   "authorized_key": [], "host_key": [], "password": None},
        "linux": {**base, "dist": ["Debian 12 base", "Ubuntu 24.04 base"], "arch": [64, 32],
                  "lang": ["en", "de"], "authorized_key": [], "host_key": [], "password": None},
        "vnc": {**base, "dist": ["Fedora 40"], "arch": [64, 32], "lang": ["en", "de"], "password": None},
        "windows": {**base, "dist": ["standard"], "lang": ["en", "de"], "password": None},
        "plesk": {**base, "dist": ["Debian 12 base"], "arch": [64], "lang": ["en", "de"],
                  "hostname": None, "password": None},
        "cpanel": {**base, "dist": ["CentOS 7 base"], "arch": [64], "lang": ["en"],
                   "hostname": None, "password": None},
    }


def fingerprint_for(data: str) -> str:
    """MD5 fingerprint of an OpenSSH public key, colon separated."""
    parts = data.split()
    blob = parts[1] if len(parts) > 1 else data
    try:
        raw = base64.b64decode(blob, validate=True)
    except ValueError:
        raw = data.encode()
    digest = hashlib.md5(raw).hexdigest()
    return ":".join(digest[i:i + 2] for i in range(0, len(digest), 2))


@dataclass
class MockAccount:
    servers: list[dict] = field(default_factory=list)
    ips: list[dict] = field(default_factory=list)
    storage_boxes: list[dict] = field(default_factory=list)
    snapshots: dict[int, list[dict]] = field(default_factory=dict)
    vservers: list[dict] = field(default_factory=list)
    ssh_keys: list[dict] = field(default_factory=list)
    rdns: dict[str, str] = field(default_factory=dict)
    cancellations: dict[str, dict] = field(default_factory=dict)
    boot: dict[str, dict] = field(default_factory=dict)
    last_boot: dict[tuple[str, str], dict] = field(default_factory=dict)

    # --- lookups ---

    def find_server(self, ip: str) -> dict:
        if not self.servers:
            raise MockApiError(404, "NOT_FOUND", "No server found")
        for server in self.servers:
            if server["server_ip"] == ip:
                return server
        raise MockApiError(404, "SERVER_NOT_FOUND", f"Server with IP {ip} not found")

    def find_ip(self, ip: str) -> dict:
        for entry in self.ips:
            if entry["ip"] == ip:
                return entry
        raise MockApiError(404, "NOT_FOUND", f"IP {ip} not found")

    def find_storage_box(self, box_id: int) -> dict:
        if not self.storage_boxes:
            raise MockApiError(404, "NOT_FOUND", "No storagebox found")
        for box in self.storage_boxes:
            if box["id"] == box_id:
                return box
        raise MockApiError(404, "STORAGEBOX_NOT_FOUND", f"Storagebox with ID {box_id} not found")

    def find_snapshot(self, box_id: int, name: str) -> dict:
        self.find_storage_box(box_id)
        for snapshot in self.snapshots.get(box_id, []):
            if snapshot["name"] == name:
                return snapshot
        raise MockApiError(404, "SNAPSHOT_NOT_FOUND", f"Snapshot with name {name} not found")

    def find_key(self, fingerprint: str) -> dict:
        if not self.ssh_keys:
            raise MockApiError(404, "NOT_FOUND", "No keys found")
        for key in self.ssh_keys:
            if key["fingerprint"] == fingerprint:
                return key
        raise MockApiError(404, "NOT_FOUND", "Key not found")

    def find_vserver(self, ip: str) -> dict:
        for vserver in self.vservers:
            if vserver["vserver_ip"] == ip:
                return vserver
        raise MockApiError(404, "SERVER_NOT_FOUND", f"Server with IP {ip} not found")

    def boot_config(self, ip: str) -> dict:
        server = self.find_server(ip)
        if ip not in self.boot:
            self.boot[ip] = _default_boot(server)
        return self.boot[ip]

    # --- mutations ---

    def reset_boot(self, ip: str, system: str) -> dict:
        config = self.boot_config(ip)
        config[system] = _default_boot(self.find_server(ip))[system]
        return config[system]

    def create_snapshot(self, box_id: int) -> dict:
        self.find_storage_box(box_id)
        snapshots = self.snapshots.setdefault(box_id, [])
        now = datetime.now(timezone.utc)
        name = now.strftime("%Y-%m-%dT%H-%M-%S")
        taken = {s["name"] for s in snapshots}
        suffix = 1
        unique = name
        while unique in taken:
            unique = f"{name}-{suffix}"
            suffix += 1
        snapshot = {"name": unique, "timestamp": now.isoformat(timespec="seconds"), "size": 0}
        snapshots.append(snapshot)
        return snapshot

    def key_in_use(self, fingerprint: str) -> bool:
        """True when an active boot activation authorises this key."""
        return any(
            fingerprint in (system.get("authorized_key") or [])
            for config in self.boot.values()
            for system in config.values()
            if system["active"]
        )

    def delete_key(self, fingerprint: str) -> None:
        key = self.find_key(fingerprint)
        if self.key_in_use(fingerprint):
            raise MockApiError(500, "KEY_DELETE_FAILED",
                               "Deleting the key failed: it is in use by an active boot configuration")
        self.ssh_keys.remove(key)


def seed_account() -> MockAccount:
    """A fresh account holding the standard fixture data."""
    servers = [_server(123, "server1"), _server(124, "server2"), _server(125, "server3")]
    boxes = [
        _storage_box(123456, "test-box-1"),
        _storage_box(123457, "test-box-2"),
        _storage_box(123458, "test-box-3"),
    ]
    return MockAccount(
        servers=servers,
        ips=[_ip(123), _ip(124), _ip(125)],
        storage_boxes=boxes,
        snapshots={box["id"]: copy.deepcopy(SEED_SNAPSHOTS) for box in boxes},
        vservers=copy.deepcopy(SEED_VSERVERS),
        ssh_keys=copy.deepcopy(SEED_KEYS),
    )
