"""Client configuration and binding models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from robot_api.client.errors import (
    ConfigurationError,
    InvalidKeyError,
    MissingConfigurationError,
    MissingPasswordError,
    MissingUsernameError,
)
from robot_api.config.settings import DEFAULT_BASE_URL

SUPPORTED_FORMATS = ("json",)
KNOWN_FORMATS = ("json", "yaml")


@dataclass(frozen=True)
class ClientConfig:
    username: str
    password: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    response_format: str = "json"  # "json" | "yaml"
    timeout: float = 1.0

    def __post_init__(self):
        if not isinstance(self.username, str) or not self.username:
            raise MissingUsernameError()
        if not isinstance(self.password, str) or not self.password:
            raise MissingPasswordError()
        if not self.base_url:
            object.__setattr__(self, "base_url", DEFAULT_BASE_URL)
        if self.response_format not in KNOWN_FORMATS:
            raise ConfigurationError(f"Unknown response format: {self.response_format!r}")
        if self.response_format not in SUPPORTED_FORMATS:
            raise ConfigurationError(f"Response format {self.response_format!r} is not supported")
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping | None) -> "ClientConfig":
        """Build a config from a plain mapping, e.g. parsed JSON.

        Accepts both ``base_url``/``response_format`` and the camelCase
        ``baseUrl``/``responseFormat`` spellings.
        """
        if data is None:
            raise MissingConfigurationError()
        if not data.get("username"):
            raise MissingUsernameError()
        if not data.get("password"):
            raise MissingPasswordError()

        return cls(
            username=data["username"],
            password=data["password"],
            base_url=data.get("base_url") or data.get("baseUrl") or DEFAULT_BASE_URL,
            response_format=data.get("response_format") or data.get("responseFormat") or "json",
            timeout=float(data["timeout"]) if data.get("timeout") is not None else 1.0,
        )


class BindingKind(Enum):
    """What a bound handle is bound to. Each kind is its own key namespace."""

    SERVER = "server"
    STORAGE_BOX = "storage_box"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")

    def normalize_key(self, key: object) -> str | int:
        """Validate a binding key, returning its canonical form.

        Server keys are non-empty strings (an IP address). Storage box keys
        are positive integers; a string of digits is accepted and converted.
        """
        if self is BindingKind.SERVER:
            if not isinstance(key, str) or not key.strip():
                raise InvalidKeyError(self, key)
            return key.strip()

        if isinstance(key, bool):
            raise InvalidKeyError(self, key)
        if isinstance(key, str) and key.strip().isdigit():
            key = int(key.strip())
        if not isinstance(key, int) or key <= 0:
            raise InvalidKeyError(self, key)
        return key


@dataclass
class PreparedRequest:
    method: str
    path: str
    params: dict = field(default_factory=dict)
    data: dict = field(default_factory=dict)
