"""Exception hierarchy for the Robot API client.

Configuration, parameter and registry errors are programmer errors and are
raised synchronously. ``RobotApiError`` is the only error raised when a
pending request is awaited.
"""


class RobotError(Exception):
    """Base class for every error raised by this package."""


# --- Configuration ---

class ConfigurationError(RobotError, ValueError):
    """The client configuration is unusable."""


class MissingConfigurationError(ConfigurationError):
    def __init__(self):
        super().__init__("Missing configuration data")


class MissingUsernameError(ConfigurationError):
    def __init__(self):
        super().__init__("Missing API username")


class MissingPasswordError(ConfigurationError):
    def __init__(self):
        super().__init__("Missing API password")


# --- Operation parameters ---

class ParameterError(RobotError, ValueError):
    """An operation was called with unusable arguments."""


class MissingParameterError(ParameterError):
    def __init__(self, parameter: str, label: str):
        self.parameter = parameter
        super().__init__(f"{label} is missing.")


class InvalidParameterError(ParameterError):
    def __init__(self, parameter: str, value: object, choices: tuple):
        self.parameter = parameter
        self.value = value
        allowed = ", ".join(str(c) for c in choices)
        super().__init__(f"Invalid value {value!r} for {parameter} (expected one of: {allowed})")


# --- Instance registry ---

class RegistryError(RobotError):
    """Base class for registration failures."""


class InvalidKeyError(RegistryError, ValueError):
    def __init__(self, kind, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"Invalid {kind.label} key: {key!r}")


class AlreadyRegisteredError(RegistryError):
    def __init__(self, kind, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.label.capitalize()} {key!r} is already registered")


class NotRegisteredError(RegistryError, KeyError):
    def __init__(self, kind, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.label.capitalize()} {key!r} is not registered")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class UnknownOperationError(RobotError, AttributeError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unknown API operation: {operation}")


# --- Remote failures ---

class RobotApiError(RobotError):
    """A request was rejected by the Robot service or never completed.

    ``status_code`` is ``None`` for transport failures (timeouts, refused
    connections); ``code`` carries the service's error code such as
    ``SERVER_NOT_FOUND`` or one of ``TIMEOUT``, ``CONNECTION_FAILED``,
    ``REQUEST_FAILED`` and ``UNKNOWN_ERROR``.
    """

    def __init__(self, code: str, message: str, status_code: int | None = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")
