import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .exceptions import PortNotFoundError, SwitchNotFoundError
from .models import PortOverride, SwitchOverrides

logger = logging.getLogger(__name__)


class DeviceDirectory(Protocol):
    def get_switch(self, name: str) -> Optional[SwitchOverrides]: ...

    def set_port_overrides(self, device_id: str, overrides: List[PortOverride]) -> None: ...


@dataclass
class PortLocation:
    """A port override together with the collection it belongs to."""

    switch: SwitchOverrides
    position: int

    @property
    def override(self) -> PortOverride:
        return self.switch.overrides[self.position]


class PortLocator:
    """Resolves (switch name, port index) to the port's override record."""

    def __init__(self, directory: DeviceDirectory):
        self.directory = directory

    def locate(self, switch_name: str, port_index: int) -> PortLocation:
        switch = self.directory.get_switch(switch_name)
        if switch is None:
            raise SwitchNotFoundError(switch_name)

        # Ports at factory defaults have no override and cannot be acted on.
        for position, override in enumerate(switch.overrides):
            if override.port_index == port_index:
                return PortLocation(switch=switch, position=position)

        raise PortNotFoundError(switch_name, port_index)
