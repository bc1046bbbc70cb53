"""Shared fixtures: an in-memory controller standing in for the UniFi API."""

import copy
from typing import Dict, List, Optional

import pytest

from poe_guard.exceptions import ControllerError, ProfileNotFoundError
from poe_guard.models import PortOverride, PortProfile, RawAlarmRecord, SwitchOverrides
from poe_guard.unifi_client import AlarmFilter

PROTECTED = PortProfile(id="pc-ap", name="AP-Public")
RESTRICTIVE = PortProfile(id="pc-off", name="Quarantine")
OTHER = PortProfile(id="pc-uplink", name="Uplink")


class FakeController:
    def __init__(self) -> None:
        self.profiles: Dict[str, PortProfile] = {p.name: p for p in (PROTECTED, RESTRICTIVE, OTHER)}
        self.switches: Dict[str, SwitchOverrides] = {}
        self.alarms: List[RawAlarmRecord] = []
        self.writes: List[tuple] = []
        self.calls: List[str] = []
        self.failing_writes: set = set()
        self.logged_in = False

    def add_switch(self, name: str, device_id: str, overrides: List[PortOverride]) -> None:
        self.switches[name] = SwitchOverrides(name=name, device_id=device_id, overrides=overrides)

    def add_alarm(self, switch_name: str, port: int, archived: Optional[bool] = None) -> None:
        payload: dict = {"key": "EVT_SW_PoeDisconnect", "sw_name": switch_name, "port": port}
        if archived is not None:
            payload["archived"] = archived
        self.alarms.append(RawAlarmRecord(key="EVT_SW_PoeDisconnect", payload=payload))

    def override(self, switch_name: str, port: int) -> PortOverride:
        for o in self.switches[switch_name].overrides:
            if o.port_index == port:
                return o
        raise KeyError(port)

    def login(self) -> None:
        self.calls.append("login")
        self.logged_in = True

    def logout(self) -> None:
        self.calls.append("logout")
        self.logged_in = False

    def get_port_profile(self, name: str) -> PortProfile:
        self.calls.append(f"get_port_profile:{name}")
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def get_raw_alarms(self, alarm_filter: AlarmFilter) -> List[RawAlarmRecord]:
        self.calls.append("get_raw_alarms")
        return list(self.alarms)

    def get_switch(self, name: str) -> Optional[SwitchOverrides]:
        self.calls.append(f"get_switch:{name}")
        switch = self.switches.get(name)
        return copy.deepcopy(switch)

    def set_port_overrides(self, device_id: str, overrides: List[PortOverride]) -> None:
        self.calls.append(f"set_port_overrides:{device_id}")
        if device_id in self.failing_writes:
            raise ControllerError("write rejected", {"device": device_id})
        self.writes.append((device_id, copy.deepcopy(overrides)))
        for switch in self.switches.values():
            if switch.device_id == device_id:
                switch.overrides = copy.deepcopy(overrides)


@pytest.fixture
def controller() -> FakeController:
    return FakeController()
