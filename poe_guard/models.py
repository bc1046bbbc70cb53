from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

POE_DISCONNECT_KEY = "EVT_SW_PoeDisconnect"

# Profile names that select controller defaults rather than a real port profile.
RESERVED_PROFILE_NAMES = frozenset({"", "all", "disabled"})


class Acknowledgement(Enum):
    """Acknowledgement state of a disconnect alarm.

    UNKNOWN means the controller did not report the ``archived`` field at all,
    which is not the same as an explicit ``archived: false`` (ACTIVE).
    """

    ARCHIVED = 0
    ACTIVE = 1
    UNKNOWN = 2

    @property
    def is_active(self) -> bool:
        return self is not Acknowledgement.ARCHIVED

    @classmethod
    def from_archived(cls, archived: Optional[bool]) -> "Acknowledgement":
        if archived is None:
            return cls.UNKNOWN
        return cls.ARCHIVED if archived else cls.ACTIVE

    def merge(self, other: "Acknowledgement") -> "Acknowledgement":
        """Return the most active of two observations of the same port."""
        return self if self.value >= other.value else other


@dataclass(frozen=True)
class RawAlarmRecord:
    """One alarm as delivered by the controller, not yet decoded."""

    key: str
    payload: Union[str, bytes, Mapping[str, Any]]


@dataclass(frozen=True)
class DisconnectEvent:
    """Canonical PoE disconnect record for one switch port."""

    switch_name: str
    port_index: int
    acknowledgement: Acknowledgement = Acknowledgement.UNKNOWN

    @property
    def key(self) -> Tuple[str, int]:
        return (self.switch_name, self.port_index)


@dataclass(frozen=True)
class PortProfile:
    id: str
    name: str


@dataclass
class PortOverride:
    """
    Explicit per-port configuration of a switch.

    Only port_index, profile_id and name are interpreted; all other controller
    fields are kept in ``extra`` so a replace-write sends them back unchanged.
    """

    port_index: int
    profile_id: Optional[str]
    name: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PortOverride":
        extra = {k: v for k, v in raw.items() if k not in {"port_idx", "portconf_id", "name"}}
        return cls(
            port_index=int(raw["port_idx"]),
            profile_id=raw.get("portconf_id"),
            name=raw.get("name"),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out["port_idx"] = self.port_index
        if self.profile_id is not None:
            out["portconf_id"] = self.profile_id
        if self.name is not None:
            out["name"] = self.name
        return out


@dataclass
class SwitchOverrides:
    """A managed switch as seen through its port override collection."""

    name: str
    device_id: str
    overrides: List[PortOverride]


@dataclass
class RunCounters:
    """Mutable accumulator owned by a single reconcile run."""

    events: int = 0
    blocked: int = 0
    provisioned_block: int = 0
    provisioned_unblock: int = 0
    failures: int = 0

    def snapshot(self) -> "RunSummary":
        return RunSummary(
            events=self.events,
            blocked=self.blocked,
            provisioned_block=self.provisioned_block,
            provisioned_unblock=self.provisioned_unblock,
            failures=self.failures,
        )


@dataclass(frozen=True)
class RunSummary:
    """Immutable result of one reconcile run, handed to the reporter."""

    events: int = 0
    blocked: int = 0
    provisioned_block: int = 0
    provisioned_unblock: int = 0
    failures: int = 0
