"""
Exception hierarchy for poe-guard.

    PoeGuardError (RuntimeError)
    ├── ConfigurationError
    ├── ControllerError
    │   └── LoginError
    ├── ProfileNotFoundError
    ├── ReservedProfileError
    ├── SwitchNotFoundError
    └── PortNotFoundError

Setup errors abort the whole run; lookup and controller errors raised while
handling a single event only abort that event.
"""

from typing import Any, Dict, Optional


class PoeGuardError(RuntimeError):
    """Base class for all poe-guard errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(PoeGuardError):
    """Invalid or missing configuration value."""


class ControllerError(PoeGuardError):
    """The controller rejected a request or returned something unusable."""


class LoginError(ControllerError):
    """Authentication against the controller failed."""


class ProfileNotFoundError(PoeGuardError):
    """A named port profile does not exist on the site."""

    def __init__(self, profile_name: str) -> None:
        super().__init__(f"Port profile not found: {profile_name!r}", {"profile": profile_name})
        self.profile_name = profile_name


class ReservedProfileError(PoeGuardError):
    """A reserved/default profile name was given where a real profile is required."""

    def __init__(self, profile_name: str) -> None:
        super().__init__(f"Port profile name is reserved: {profile_name!r}", {"profile": profile_name})
        self.profile_name = profile_name


class SwitchNotFoundError(PoeGuardError):
    def __init__(self, switch_name: str) -> None:
        super().__init__(f"Switch not found: {switch_name!r}", {"switch": switch_name})
        self.switch_name = switch_name


class PortNotFoundError(PoeGuardError):
    def __init__(self, switch_name: str, port_index: int) -> None:
        super().__init__(
            f"No port override for port {port_index} on switch {switch_name!r}",
            {"switch": switch_name, "port": port_index},
        )
        self.switch_name = switch_name
        self.port_index = port_index


# Errors that abort a run before any event is processed.
SetupError = (ConfigurationError, ControllerError, ProfileNotFoundError, ReservedProfileError)
