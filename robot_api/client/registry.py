"""Instance registry — per-client map of binding key → bound handle.

A bound handle is "the client, pre-bound to one server IP or storage box
ID": any client operation called on it receives the bound key as its first
argument. Handles are cached by identity, so looking the same key up twice
returns the very same object.
"""

import functools
import threading
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from robot_api.client.errors import (
    AlreadyRegisteredError,
    InvalidKeyError,
    NotRegisteredError,
    UnknownOperationError,
)
from robot_api.client.models import BindingKind

if TYPE_CHECKING:
    from robot_api.client.robot import RobotClient


class BoundHandle:
    """Forwards client operations with a fixed binding key.

    ``handle.update_server_name("web-1")`` is the same call as
    ``client.update_server_name(handle.key, "web-1")``. The set of
    forwardable names is checked against the client on every attribute
    lookup; anything else raises ``UnknownOperationError``.

    Callers may attach their own attributes to a handle. They are visible
    through every reference to it, since lookups return the same object.
    """

    def __init__(self, client: "RobotClient", kind: BindingKind, key: str | int):
        self.client = client
        self.kind = kind
        self.key = key

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Only reached for names not found on the handle itself
        client = self.__dict__.get("client")
        if client is None or name.startswith("_"):
            raise AttributeError(name)
        if name not in client.operations:
            raise UnknownOperationError(name)

        operation = getattr(client, name)

        @functools.wraps(operation)
        def forward(*args: Any, **kwargs: Any) -> Any:
            return operation(self.key, *args, **kwargs)

        return forward

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.client.operations))

    def __repr__(self) -> str:
        return f"<BoundHandle {self.kind.label} {self.key!r}>"


class InstanceRegistry:
    """Registered handles of one client, one namespace per ``BindingKind``.

    Only in-memory state: register/unregister/resolve never suspend and
    never touch the network. A lock guards mutation for threaded callers.
    """

    def __init__(self, client: "RobotClient"):
        self._client = client
        self._handles: dict[BindingKind, dict[str | int, BoundHandle]] = {}
        self._lock = threading.RLock()

    def register(self, kind: BindingKind, key: object) -> BoundHandle:
        """Create and store a handle for ``key``.

        Raises:
            InvalidKeyError: key is empty or not valid for ``kind``.
            AlreadyRegisteredError: the key is registered already.
        """
        key = kind.normalize_key(key)
        with self._lock:
            handles = self._handles.setdefault(kind, {})
            if key in handles:
                raise AlreadyRegisteredError(kind, key)
            handle = BoundHandle(self._client, kind, key)
            handles[key] = handle
            return handle

    def unregister(self, kind: BindingKind, key: object) -> None:
        """Drop the lookup entry. Handles already handed out keep working."""
        key = kind.normalize_key(key)
        with self._lock:
            handles = self._handles.get(kind, {})
            if key not in handles:
                raise NotRegisteredError(kind, key)
            del handles[key]

    def resolve(self, kind: BindingKind, key: object) -> BoundHandle | None:
        """Return the registered handle for ``key``, or None."""
        key = kind.normalize_key(key)
        with self._lock:
            return self._handles.get(kind, {}).get(key)

    def keys(self, kind: BindingKind) -> list[str | int]:
        with self._lock:
            return list(self._handles.get(kind, {}))

    def view(self, kind: BindingKind) -> "RegistryView":
        return RegistryView(self, kind)


class RegistryView(Mapping):
    """Read-only mapping over one kind's handles, e.g. ``client.servers``.

    Keys that are not valid for the kind are simply absent: lookups raise
    ``NotRegisteredError`` (a ``KeyError``), so ``get`` and ``in`` work.
    """

    def __init__(self, registry: InstanceRegistry, kind: BindingKind):
        self._registry = registry
        self._kind = kind

    def __getitem__(self, key: object) -> BoundHandle:
        try:
            handle = self._registry.resolve(self._kind, key)
        except InvalidKeyError:
            handle = None
        if handle is None:
            raise NotRegisteredError(self._kind, key)
        return handle

    def __iter__(self) -> Iterator[str | int]:
        return iter(self._registry.keys(self._kind))

    def __len__(self) -> int:
        return len(self._registry.keys(self._kind))
