"""Unit tests for sending cases to Go.Data grouped by outbreak"""
import asyncio

import pytest

from case_copy.adapters.godata_client import GoDataClientError
from case_copy.domain.events import CasesSent
from case_copy.domain.exceptions import MalformedRecordError
from case_copy.services.case_sender import group_by_outbreak, send_cases_to_godata


CASES = [
    {"id": "T1", "outbreak": "O2", "classification": "X"},
    {"id": "T2", "outbreak": "O1", "classification": "X"},
    {"id": "T3", "outbreak": "O2", "classification": "X"},
]


def test_group_by_outbreak_keeps_first_seen_order():
    groups = group_by_outbreak(CASES)

    assert list(groups) == ["O2", "O1"]
    assert [c["id"] for c in groups["O2"]] == ["T1", "T3"]


def test_case_without_outbreak_is_rejected():
    with pytest.raises(MalformedRecordError) as excinfo:
        group_by_outbreak([{"id": "T9"}])

    assert excinfo.value.record_id == "T9"


async def test_login_once_then_activate_before_create(fake_godata_client):
    events = await send_cases_to_godata(fake_godata_client)(CASES)

    calls = fake_godata_client.calls
    assert calls[0] == ("login",)
    assert [c for c in calls if c[0] == "login"] == [("login",)]

    # Every create comes after the activation of its outbreak has completed
    for index, call in enumerate(calls):
        if call[0] == "create":
            activated = calls.index(("activated", "user-1", call[1]))
            assert activated < index

    assert events == [CasesSent("O2", 2), CasesSent("O1", 1)]


async def test_outbreak_field_is_removed_before_submission(fake_godata_client):
    await send_cases_to_godata(fake_godata_client)(CASES)

    submitted = fake_godata_client.cases["O2"]
    assert [c["id"] for c in submitted] == ["T1", "T3"]
    assert all("outbreak" not in c for c in submitted)
    # The caller's records are left untouched
    assert CASES[0]["outbreak"] == "O2"


async def test_no_cases_sends_nothing(fake_godata_client):
    events = await send_cases_to_godata(fake_godata_client)([])

    assert events == []
    assert fake_godata_client.calls == []


async def test_failed_create_cancels_remaining_creates(fake_godata_client):
    created = []

    async def create_outbreak_case(outbreak_id, case):
        if case["id"] == "T1":
            raise GoDataClientError("Go.Data request POST outbreaks/O2/cases failed with status 500")
        await asyncio.sleep(0.05)
        created.append(case["id"])
        return case

    fake_godata_client.create_outbreak_case = create_outbreak_case

    with pytest.raises(GoDataClientError, match="500"):
        await send_cases_to_godata(fake_godata_client)(CASES)
    await asyncio.sleep(0.1)

    assert created == []
    # The second outbreak is never activated
    assert ("activate", "user-1", "O1") not in fake_godata_client.calls
