"""Robot API client — one method per Robot web service operation.

Every operation validates its arguments immediately and returns an
awaitable. A missing required argument raises ``MissingParameterError`` at
call time, before any request exists; a request rejected by the service
raises ``RobotApiError`` when the awaitable is awaited.

Usage:
    client = RobotClient({"username": "user", "password": "secret"})
    servers = await client.list_servers()

    server = client.register_server("123.123.123.123")
    await server.update_server_name("web-1")
    assert client.servers["123.123.123.123"] is server
"""

from collections.abc import Awaitable, Mapping, Sequence
from typing import Any

import httpx

from robot_api.client.endpoints import ENDPOINTS
from robot_api.client.errors import MissingConfigurationError
from robot_api.client.executor import RequestExecutor
from robot_api.client.models import BindingKind, ClientConfig
from robot_api.client.registry import BoundHandle, InstanceRegistry, RegistryView
from robot_api.config.settings import Settings, get_settings


class RobotClient:
    """Async client for the Robot web service.

    Args:
        config: A ``ClientConfig`` or a mapping with ``username``,
            ``password`` and optionally ``base_url``, ``response_format``
            and ``timeout``.
        transport: Optional httpx transport, e.g. ``httpx.ASGITransport``
            to talk to the mock service in-process.
    """

    operations: frozenset[str] = frozenset(ENDPOINTS)

    def __init__(
        self,
        config: ClientConfig | Mapping | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if config is None:
            raise MissingConfigurationError()
        if not isinstance(config, ClientConfig):
            config = ClientConfig.from_mapping(config)

        self.config = config
        self._executor = RequestExecutor(config, transport=transport)
        self._registry = InstanceRegistry(self)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RobotClient":
        """Build a client from ROBOT_* environment settings."""
        settings = settings or get_settings()
        return cls(
            {
                "username": settings.robot_username,
                "password": settings.robot_password,
                "base_url": settings.robot_base_url,
                "response_format": settings.robot_response_format,
                "timeout": settings.robot_timeout,
            },
            transport=transport,
        )

    def _call(self, operation: str, **arguments: Any) -> Awaitable[Any]:
        prepared = ENDPOINTS[operation].prepare(**arguments)
        return self._executor.perform(
            prepared.method,
            prepared.path,
            params=prepared.params,
            data=prepared.data,
        )

    # ========== Registered instances ==========

    def register_server(self, ip: str) -> BoundHandle:
        """Bind a server IP once and call operations without repeating it."""
        return self._registry.register(BindingKind.SERVER, ip)

    def register_storage_box(self, storagebox_id: int) -> BoundHandle:
        """Bind a storage box ID once and call operations without repeating it."""
        return self._registry.register(BindingKind.STORAGE_BOX, storagebox_id)

    def unregister_server(self, ip: str) -> None:
        self._registry.unregister(BindingKind.SERVER, ip)

    def unregister_storage_box(self, storagebox_id: int) -> None:
        self._registry.unregister(BindingKind.STORAGE_BOX, storagebox_id)

    @property
    def servers(self) -> RegistryView:
        """Registered server handles keyed by IP."""
        return self._registry.view(BindingKind.SERVER)

    @property
    def storage_boxes(self) -> RegistryView:
        """Registered storage box handles keyed by ID."""
        return self._registry.view(BindingKind.STORAGE_BOX)

    @property
    def registry(self) -> InstanceRegistry:
        return self._registry

    # ========== Servers ==========

    def list_servers(self) -> Awaitable[Any]:
        """List all servers of the account."""
        return self._call("list_servers")

    def query_server(self, ip: str) -> Awaitable[Any]:
        """Get details of a single server."""
        return self._call("query_server", ip=ip)

    def update_server_name(self, ip: str, new_name: str) -> Awaitable[Any]:
        """Rename a server."""
        return self._call("update_server_name", ip=ip, new_name=new_name)

    def query_cancellation(self, ip: str) -> Awaitable[Any]:
        """Get the cancellation status of a server."""
        return self._call("query_cancellation", ip=ip)

    def cancel_server(
        self,
        ip: str,
        cancellation_date: str,
        cancellation_reason: str | None = None,
    ) -> Awaitable[Any]:
        """Cancel a server as of ``cancellation_date`` (YYYY-MM-DD or "now")."""
        return self._call(
            "cancel_server",
            ip=ip,
            cancellation_date=cancellation_date,
            cancellation_reason=cancellation_reason,
        )

    def revoke_cancellation(self, ip: str) -> Awaitable[Any]:
        """Withdraw a pending server cancellation."""
        return self._call("revoke_cancellation", ip=ip)

    # ========== IPs ==========

    def list_ips(self, server_ip: str | None = None) -> Awaitable[Any]:
        """List all IPs, optionally only those of one server."""
        return self._call("list_ips", server_ip=server_ip)

    def query_ip(self, ip: str) -> Awaitable[Any]:
        return self._call("query_ip", ip=ip)

    def update_traffic_warnings(
        self,
        ip: str,
        enable_warnings: bool,
        hourly_threshold: int,
        daily_threshold: int,
        monthly_threshold: int,
    ) -> Awaitable[Any]:
        """Configure traffic warnings for an IP. Thresholds are in MB (monthly in GB)."""
        return self._call(
            "update_traffic_warnings",
            ip=ip,
            enable_warnings=enable_warnings,
            hourly_threshold=hourly_threshold,
            daily_threshold=daily_threshold,
            monthly_threshold=monthly_threshold,
        )

    # ========== Reset / Wake on LAN ==========

    def list_resets(self) -> Awaitable[Any]:
        """Reset options for all servers."""
        return self._call("list_resets")

    def query_reset(self, ip: str) -> Awaitable[Any]:
        return self._call("query_reset", ip=ip)

    def reset_server(self, ip: str, reset_type: str | None = None) -> Awaitable[Any]:
        """Reset a server: "sw" (default), "hw" or "man"."""
        return self._call("reset_server", ip=ip, reset_type=reset_type)

    def query_wol(self, ip: str) -> Awaitable[Any]:
        return self._call("query_wol", ip=ip)

    def send_wol(self, ip: str) -> Awaitable[Any]:
        """Send a Wake on LAN packet to a server."""
        return self._call("send_wol", ip=ip)

    # ========== Boot configuration ==========

    def query_boot_config(self, ip: str) -> Awaitable[Any]:
        """Boot configuration of all systems for a server."""
        return self._call("query_boot_config", ip=ip)

    def query_rescue(self, ip: str) -> Awaitable[Any]:
        return self._call("query_rescue", ip=ip)

    def enable_rescue(
        self,
        ip: str,
        operating_system: str,
        architecture: int | None = None,
        keys: Sequence[str] | None = None,
    ) -> Awaitable[Any]:
        """Activate the rescue system.

        Args:
            ip: Server IP.
            operating_system: Rescue OS (linux, linuxold, freebsd, vkvm, ...).
            architecture: 32 or 64, defaults to 64.
            keys: SSH key fingerprints to authorize.
        """
        return self._call(
            "enable_rescue",
            ip=ip,
            operating_system=operating_system,
            architecture=architecture,
            keys=keys,
        )

    def disable_rescue(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_rescue", ip=ip)

    def query_last_rescue(self, ip: str) -> Awaitable[Any]:
        """Data of the last rescue system activation."""
        return self._call("query_last_rescue", ip=ip)

    def query_linux(self, ip: str) -> Awaitable[Any]:
        return self._call("query_linux", ip=ip)

    def enable_linux(
        self,
        ip: str,
        distribution: str,
        architecture: int | None = None,
        language: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> Awaitable[Any]:
        """Activate a Linux installation (architecture 64, language "en" by default)."""
        return self._call(
            "enable_linux",
            ip=ip,
            distribution=distribution,
            architecture=architecture,
            language=language,
            keys=keys,
        )

    def disable_linux(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_linux", ip=ip)

    def query_last_linux(self, ip: str) -> Awaitable[Any]:
        return self._call("query_last_linux", ip=ip)

    def query_vnc(self, ip: str) -> Awaitable[Any]:
        return self._call("query_vnc", ip=ip)

    def enable_vnc(
        self,
        ip: str,
        distribution: str,
        architecture: int | None = None,
        language: str | None = None,
    ) -> Awaitable[Any]:
        """Activate a VNC installation."""
        return self._call(
            "enable_vnc",
            ip=ip,
            distribution=distribution,
            architecture=architecture,
            language=language,
        )

    def disable_vnc(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_vnc", ip=ip)

    def query_windows(self, ip: str) -> Awaitable[Any]:
        return self._call("query_windows", ip=ip)

    def enable_windows(self, ip: str, language: str | None = None) -> Awaitable[Any]:
        """Activate a Windows installation."""
        return self._call("enable_windows", ip=ip, language=language)

    def disable_windows(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_windows", ip=ip)

    def query_plesk(self, ip: str) -> Awaitable[Any]:
        return self._call("query_plesk", ip=ip)

    def enable_plesk(
        self,
        ip: str,
        distribution: str,
        hostname: str,
        architecture: int | None = None,
        language: str | None = None,
    ) -> Awaitable[Any]:
        """Activate a Plesk installation on top of ``distribution``."""
        return self._call(
            "enable_plesk",
            ip=ip,
            distribution=distribution,
            hostname=hostname,
            architecture=architecture,
            language=language,
        )

    def disable_plesk(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_plesk", ip=ip)

    def query_cpanel(self, ip: str) -> Awaitable[Any]:
        return self._call("query_cpanel", ip=ip)

    def enable_cpanel(
        self,
        ip: str,
        distribution: str,
        hostname: str,
        architecture: int | None = None,
        language: str | None = None,
    ) -> Awaitable[Any]:
        """Activate a cPanel installation on top of ``distribution``."""
        return self._call(
            "enable_cpanel",
            ip=ip,
            distribution=distribution,
            hostname=hostname,
            architecture=architecture,
            language=language,
        )

    def disable_cpanel(self, ip: str) -> Awaitable[Any]:
        return self._call("disable_cpanel", ip=ip)

    # ========== Reverse DNS ==========

    def list_rdns(self) -> Awaitable[Any]:
        return self._call("list_rdns")

    def query_rdns(self, ip: str) -> Awaitable[Any]:
        return self._call("query_rdns", ip=ip)

    def create_rdns(self, ip: str, pointer_record: str) -> Awaitable[Any]:
        """Create a PTR record for an IP."""
        return self._call("create_rdns", ip=ip, pointer_record=pointer_record)

    def update_rdns(self, ip: str, pointer_record: str) -> Awaitable[Any]:
        """Create or update a PTR record for an IP."""
        return self._call("update_rdns", ip=ip, pointer_record=pointer_record)

    def delete_rdns(self, ip: str) -> Awaitable[Any]:
        return self._call("delete_rdns", ip=ip)

    # ========== Traffic ==========

    def query_traffic(
        self,
        traffic_type: str,
        date_from: str,
        date_to: str,
        ips: Sequence[str] | None = None,
        subnets: Sequence[str] | None = None,
    ) -> Awaitable[Any]:
        """Traffic statistics ("day", "month" or "year") for IPs and subnets."""
        return self._call(
            "query_traffic",
            traffic_type=traffic_type,
            date_from=date_from,
            date_to=date_to,
            ips=ips,
            subnets=subnets,
        )

    # ========== SSH keys ==========

    def list_keys(self) -> Awaitable[Any]:
        return self._call("list_keys")

    def query_key(self, fingerprint: str) -> Awaitable[Any]:
        return self._call("query_key", fingerprint=fingerprint)

    def create_key(self, name: str, data: str) -> Awaitable[Any]:
        """Upload a public key in OpenSSH format."""
        return self._call("create_key", name=name, data=data)

    def update_key_name(self, fingerprint: str, name: str) -> Awaitable[Any]:
        return self._call("update_key_name", fingerprint=fingerprint, name=name)

    def delete_key(self, fingerprint: str) -> Awaitable[Any]:
        return self._call("delete_key", fingerprint=fingerprint)

    # ========== Storage boxes ==========

    def list_storage_boxes(self) -> Awaitable[Any]:
        return self._call("list_storage_boxes")

    def query_storage_box(self, storagebox_id: int) -> Awaitable[Any]:
        return self._call("query_storage_box", storagebox_id=storagebox_id)

    def update_storage_box_name(self, storagebox_id: int, new_name: str) -> Awaitable[Any]:
        return self._call("update_storage_box_name", storagebox_id=storagebox_id, new_name=new_name)

    def list_snapshots(self, storagebox_id: int) -> Awaitable[Any]:
        return self._call("list_snapshots", storagebox_id=storagebox_id)

    def create_snapshot(self, storagebox_id: int) -> Awaitable[Any]:
        return self._call("create_snapshot", storagebox_id=storagebox_id)

    def delete_snapshot(self, storagebox_id: int, snapshot_name: str) -> Awaitable[Any]:
        return self._call("delete_snapshot", storagebox_id=storagebox_id, snapshot_name=snapshot_name)

    def revert_snapshot(self, storagebox_id: int, snapshot_name: str) -> Awaitable[Any]:
        """Roll a storage box back to a snapshot."""
        return self._call("revert_snapshot", storagebox_id=storagebox_id, snapshot_name=snapshot_name)

    # ========== Virtual servers ==========

    def vserver_command(self, ip: str, command: str) -> Awaitable[Any]:
        """Send a power command ("start", "stop" or "shutdown")."""
        return self._call("vserver_command", ip=ip, command=command)

    def start_vserver(self, ip: str) -> Awaitable[Any]:
        return self._call("start_vserver", ip=ip)

    def stop_vserver(self, ip: str) -> Awaitable[Any]:
        return self._call("stop_vserver", ip=ip)

    def shutdown_vserver(self, ip: str) -> Awaitable[Any]:
        """Gracefully shut a virtual server down."""
        return self._call("shutdown_vserver", ip=ip)

    # ========== Lifecycle ==========

    async def close(self) -> None:
        """Close the pooled HTTP connection."""
        await self._executor.close()

    async def __aenter__(self) -> "RobotClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
