from __future__ import annotations


class HealthProbeError(RuntimeError):
    pass


class ConfigError(HealthProbeError):
    pass


class ConfigReadError(ConfigError):
    """The checks file is missing or cannot be read."""


class ConfigDecodeError(ConfigError):
    """The checks file is not a valid list of checks."""


class NetworkError(HealthProbeError):
    """Transport failure while probing an endpoint.

    Never raised out of a check; it is attached to the failing CheckResult.
    """
