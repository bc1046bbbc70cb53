import dataclasses
import logging
from enum import Enum
from typing import Iterable, Optional

from .exceptions import PoeGuardError
from .locator import DeviceDirectory, PortLocation, PortLocator
from .models import DisconnectEvent, PortOverride, PortProfile, RunCounters, RunSummary

logger = logging.getLogger(__name__)


class Transition(Enum):
    BLOCK = "block"
    ALREADY_BLOCKED = "already_blocked"
    RESTORE = "restore"
    NONE = "none"


class ReconciliationEngine:
    """
    Moves watched ports between the protected and the restrictive profile.

    Ports are only ever moved between these two profiles; ports carrying any
    other profile are left alone. Without a restrictive profile the engine runs
    in observation mode and never writes.
    """

    def __init__(
        self,
        directory: DeviceDirectory,
        protected: PortProfile,
        restrictive: Optional[PortProfile] = None,
        *,
        block_port_name: Optional[str] = None,
        restore_port_name: Optional[str] = None,
    ):
        self.directory = directory
        self.locator = PortLocator(directory)
        self.protected = protected
        self.restrictive = restrictive
        self.block_port_name = block_port_name or None
        self.restore_port_name = restore_port_name or None

    def classify(self, event: DisconnectEvent, override: PortOverride) -> Transition:
        profile_id = override.profile_id
        is_protected = profile_id == self.protected.id
        is_restrictive = self.restrictive is not None and profile_id == self.restrictive.id

        if event.acknowledgement.is_active:
            if is_protected:
                return Transition.BLOCK
            if is_restrictive:
                return Transition.ALREADY_BLOCKED
            return Transition.NONE

        if is_restrictive:
            return Transition.RESTORE
        return Transition.NONE

    def _write(self, location: PortLocation, profile: PortProfile, new_name: Optional[str]) -> None:
        current = location.override
        updated = dataclasses.replace(
            current,
            profile_id=profile.id,
            name=new_name if new_name else current.name,
            extra=dict(current.extra),
        )
        overrides = list(location.switch.overrides)
        overrides[location.position] = updated
        self.directory.set_port_overrides(location.switch.device_id, overrides)

    def reconcile(self, event: DisconnectEvent, counters: RunCounters) -> Transition:
        """Apply at most one transition for ``event``, recording it in ``counters``."""
        location = self.locator.locate(event.switch_name, event.port_index)
        transition = self.classify(event, location.override)
        where = f"{event.switch_name}/{event.port_index}"

        if transition is Transition.BLOCK:
            counters.events += 1
            if self.restrictive is None:
                logger.info("Port %s has an active disconnect (observation mode, not blocking)", where)
                return transition
            logger.warning("Blocking port %s: moving to profile %r", where, self.restrictive.name)
            self._write(location, self.restrictive, self.block_port_name)
            counters.provisioned_block += 1

        elif transition is Transition.ALREADY_BLOCKED:
            counters.events += 1
            counters.blocked += 1
            logger.info("Port %s is already blocked", where)

        elif transition is Transition.RESTORE:
            counters.blocked += 1
            logger.warning("Alarm for port %s archived: restoring profile %r", where, self.protected.name)
            self._write(location, self.protected, self.restore_port_name)
            counters.provisioned_unblock += 1

        else:
            logger.debug("Port %s needs no action (%s)", where, event.acknowledgement.name)

        return transition

    def run(self, events: Iterable[DisconnectEvent]) -> RunSummary:
        counters = RunCounters()
        for event in events:
            try:
                self.reconcile(event, counters)
            except PoeGuardError as exc:
                counters.failures += 1
                logger.error("Failed to reconcile %s/%s: %s", event.switch_name, event.port_index, exc)
            except Exception as exc:  # noqa: BLE001
                counters.failures += 1
                logger.exception(
                    "Unexpected error reconciling %s/%s: %s", event.switch_name, event.port_index, exc
                )
        return counters.snapshot()
