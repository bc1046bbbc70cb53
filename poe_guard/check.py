import logging
import time
from typing import List, Optional, Protocol, Tuple

from .config import Settings
from .dedup import deduplicate_events
from .decoder import decode_alarms
from .engine import ReconciliationEngine
from .exceptions import ConfigurationError, ReservedProfileError, SetupError
from .models import RESERVED_PROFILE_NAMES, PortOverride, PortProfile, RawAlarmRecord, SwitchOverrides
from .report import CheckResult, build_result, unknown
from .unifi_client import AlarmFilter

logger = logging.getLogger(__name__)


class Controller(Protocol):
    def login(self) -> None: ...

    def logout(self) -> None: ...

    def get_port_profile(self, name: str) -> PortProfile: ...

    def get_raw_alarms(self, alarm_filter: AlarmFilter) -> List[RawAlarmRecord]: ...

    def get_switch(self, name: str) -> Optional[SwitchOverrides]: ...

    def set_port_overrides(self, device_id: str, overrides: List[PortOverride]) -> None: ...


def resolve_profiles(
    client: Controller,
    protected_name: str,
    restrictive_name: Optional[str],
) -> Tuple[PortProfile, Optional[PortProfile]]:
    """
    Resolve the protected and (optional) restrictive port profile.

    Reserved names are rejected before the controller is asked. Both profiles
    resolving to the same id is a misconfiguration.
    """
    if protected_name.strip().lower() in RESERVED_PROFILE_NAMES:
        raise ReservedProfileError(protected_name)

    protected = client.get_port_profile(protected_name)
    restrictive = client.get_port_profile(restrictive_name) if restrictive_name else None

    if restrictive is not None and restrictive.id == protected.id:
        raise ConfigurationError(
            "Protected and restrictive profile are the same port profile",
            {"protected": protected_name, "restrictive": restrictive_name, "id": protected.id},
        )

    logger.info(
        "Watching profile %r (%s), restrictive profile %s",
        protected.name,
        protected.id,
        f"{restrictive.name!r} ({restrictive.id})" if restrictive else "not set (observation mode)",
    )
    return protected, restrictive


def run_check(settings: Settings, client: Controller) -> CheckResult:
    """
    One poll-and-reconcile pass:
    - log in and resolve the two port profiles (setup; any failure -> UNKNOWN)
    - fetch alarms, decode and deduplicate PoE disconnects
    - reconcile each affected port
    - build the plugin result from the run summary and execution time

    The controller session is always closed.
    """
    started = time.monotonic()

    try:
        client.login()
        try:
            protected, restrictive = resolve_profiles(
                client, settings.protected_profile, settings.restrictive_profile
            )
            raw_alarms = client.get_raw_alarms(settings.alarm_filter)

            events = deduplicate_events(decode_alarms(raw_alarms))
            logger.info("%s distinct port(s) with PoE disconnect alarms", len(events))

            engine = ReconciliationEngine(
                client,
                protected,
                restrictive,
                block_port_name=settings.block_port_name,
                restore_port_name=settings.restore_port_name,
            )
            summary = engine.run(events)
        finally:
            client.logout()
    except SetupError as exc:
        logger.error("Setup failed: %s", exc)
        return unknown(str(exc))

    elapsed = time.monotonic() - started
    logger.info("Run finished in %.2fs: %s", elapsed, summary)
    return build_result(summary, elapsed, settings.warning, settings.critical)
