"""Tests for alarm decoding."""

import json

from poe_guard.decoder import decode_alarm, decode_alarms
from poe_guard.models import Acknowledgement, DisconnectEvent, RawAlarmRecord

KEY = "EVT_SW_PoeDisconnect"


def test_decode_alarm_from_mapping() -> None:
    record = RawAlarmRecord(key=KEY, payload={"sw_name": "usw-lobby", "port": 7, "archived": False})

    assert decode_alarm(record) == DisconnectEvent("usw-lobby", 7, Acknowledgement.ACTIVE)


def test_decode_alarm_from_json_text() -> None:
    payload = json.dumps({"sw_name": "usw-lobby", "port": 3, "archived": True})

    event = decode_alarm(RawAlarmRecord(key=KEY, payload=payload.encode()))

    assert event is not None
    assert event.acknowledgement is Acknowledgement.ARCHIVED


def test_missing_archived_is_unknown_not_active() -> None:
    event = decode_alarm(RawAlarmRecord(key=KEY, payload={"sw_name": "usw-lobby", "port": 3}))

    assert event is not None
    assert event.acknowledgement is Acknowledgement.UNKNOWN
    assert event.acknowledgement.is_active


def test_other_alarm_keys_are_skipped() -> None:
    record = RawAlarmRecord(key="EVT_SW_Lost_Contact", payload={"sw_name": "usw-lobby", "port": 3})

    assert decode_alarm(record) is None


def test_malformed_payloads_are_skipped() -> None:
    bad = [
        "{not json",
        "[1, 2]",
        {"port": 3},
        {"sw_name": "", "port": 3},
        {"sw_name": "usw-lobby"},
        {"sw_name": "usw-lobby", "port": "3"},
        {"sw_name": "usw-lobby", "port": True},
        {"sw_name": "usw-lobby", "port": 3, "archived": "yes"},
    ]

    for payload in bad:
        assert decode_alarm(RawAlarmRecord(key=KEY, payload=payload)) is None, payload


def test_decode_alarms_keeps_going_after_bad_record() -> None:
    records = [
        RawAlarmRecord(key=KEY, payload="garbage"),
        RawAlarmRecord(key="EVT_AP_Lost_Contact", payload={}),
        RawAlarmRecord(key=KEY, payload={"sw_name": "usw-a", "port": 1}),
    ]

    assert decode_alarms(records) == [DisconnectEvent("usw-a", 1, Acknowledgement.UNKNOWN)]


def test_switch_name_is_passed_through_unchanged() -> None:
    event = decode_alarm(RawAlarmRecord(key=KEY, payload={"sw_name": " usw-lobby ", "port": 1}))

    assert event is not None
    assert event.switch_name == " usw-lobby "
