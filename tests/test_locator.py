"""Tests for port override lookup."""

import pytest

from poe_guard.exceptions import PortNotFoundError, SwitchNotFoundError
from poe_guard.locator import PortLocator
from poe_guard.models import PortOverride


def test_locate_finds_override(controller) -> None:
    controller.add_switch(
        "usw-lobby",
        "dev-1",
        [PortOverride(1, "pc-uplink"), PortOverride(7, "pc-ap", "Lobby AP")],
    )

    location = PortLocator(controller).locate("usw-lobby", 7)

    assert location.switch.device_id == "dev-1"
    assert location.position == 1
    assert location.override.name == "Lobby AP"
    assert controller.calls == ["get_switch:usw-lobby"]


def test_unknown_switch(controller) -> None:
    with pytest.raises(SwitchNotFoundError):
        PortLocator(controller).locate("usw-missing", 1)


def test_port_without_override_is_not_found(controller) -> None:
    controller.add_switch("usw-lobby", "dev-1", [PortOverride(1, "pc-ap")])

    with pytest.raises(PortNotFoundError) as excinfo:
        PortLocator(controller).locate("usw-lobby", 2)

    assert excinfo.value.port_index == 2
    assert controller.writes == []
