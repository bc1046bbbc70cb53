import logging
from typing import Dict, Iterable, List, Tuple

from .models import DisconnectEvent

logger = logging.getLogger(__name__)


def deduplicate_events(candidates: Iterable[DisconnectEvent]) -> List[DisconnectEvent]:
    """
    Fold decoded alarms into one event per (switch, port).

    Keys keep the order in which they were first seen. When a port shows up more
    than once, its acknowledgement becomes the most active observation, so an
    unresolved disconnect is never hidden by an archived duplicate. The result
    does not depend on where in the feed the duplicates appear.
    """
    merged: Dict[Tuple[str, int], DisconnectEvent] = {}
    duplicates = 0

    for event in candidates:
        seen = merged.get(event.key)
        if seen is None:
            merged[event.key] = event
            continue

        duplicates += 1
        ack = seen.acknowledgement.merge(event.acknowledgement)
        if ack is not seen.acknowledgement:
            merged[event.key] = DisconnectEvent(
                switch_name=seen.switch_name,
                port_index=seen.port_index,
                acknowledgement=ack,
            )

    if duplicates:
        logger.debug("Merged %s duplicate disconnect alarm(s)", duplicates)
    return list(merged.values())
