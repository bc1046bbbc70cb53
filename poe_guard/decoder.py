import json
import logging
from typing import Any, Iterable, List, Mapping, Optional

from .models import POE_DISCONNECT_KEY, Acknowledgement, DisconnectEvent, RawAlarmRecord

logger = logging.getLogger(__name__)


def _load_payload(payload: object) -> Optional[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        return payload
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            data = json.loads(payload)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
    return None


def decode_alarm(record: RawAlarmRecord) -> Optional[DisconnectEvent]:
    """
    Decode one raw alarm into a DisconnectEvent.

    Returns None when the alarm is not a PoE disconnect or its payload cannot
    be decoded. A bad record never affects the others.
    """
    if record.key != POE_DISCONNECT_KEY:
        return None

    data = _load_payload(record.payload)
    if data is None:
        logger.debug("Skipping %s alarm with undecodable payload", record.key)
        return None

    switch_name = data.get("sw_name")
    if not isinstance(switch_name, str) or not switch_name.strip():
        logger.debug("Skipping %s alarm without sw_name: %r", record.key, data)
        return None

    port = data.get("port")
    # bool is a subclass of int but never a valid port index
    if not isinstance(port, int) or isinstance(port, bool):
        logger.debug("Skipping %s alarm with invalid port %r on %s", record.key, port, switch_name)
        return None

    archived = data.get("archived")
    if archived is not None and not isinstance(archived, bool):
        logger.debug("Skipping %s alarm with invalid archived flag %r", record.key, archived)
        return None

    return DisconnectEvent(
        switch_name=switch_name,
        port_index=port,
        acknowledgement=Acknowledgement.from_archived(archived),
    )


def decode_alarms(records: Iterable[RawAlarmRecord]) -> List[DisconnectEvent]:
    """Decode a sequence of alarms, dropping everything that is not a PoE disconnect."""
    events: List[DisconnectEvent] = []
    skipped = 0
    for record in records:
        event = decode_alarm(record)
        if event is None:
            skipped += 1
            continue
        events.append(event)

    logger.info("Decoded %s PoE disconnect alarm(s), skipped %s other/invalid alarm(s)", len(events), skipped)
    return events
