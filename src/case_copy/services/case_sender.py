"""Send cases to Go.Data, grouped by outbreak."""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List

from case_copy.adapters.godata_client import AbstractGoDataClient
from case_copy.domain.events import CasesSent
from case_copy.domain.exceptions import MalformedRecordError
from case_copy.services.concurrency import gather_or_cancel

logger = logging.getLogger(__name__)


def group_by_outbreak(cases: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Group cases by their 'outbreak' field.

    Outbreaks keep the order in which they are first seen.

    Raises:
        MalformedRecordError: If a case has no outbreak
    """
    groups = {}  # type: Dict[str, List[Dict[str, Any]]]
    for case in cases:
        outbreak_id = case.get("outbreak")
        if not outbreak_id:
            raise MalformedRecordError(f"Case {case.get('id')} has no outbreak", case.get("id"))
        groups.setdefault(outbreak_id, []).append(case)
    return groups


def without_outbreak(case: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in case.items() if key != "outbreak"}


def send_cases_to_godata(
    godata: AbstractGoDataClient,
) -> Callable[[Iterable[Dict[str, Any]]], Awaitable[List[CasesSent]]]:
    """
    Build the sender for a Go.Data client.

    The sender logs in once, then for each outbreak activates it for the
    user and only afterwards creates its cases, concurrently within the
    outbreak. Returns one CasesSent event per outbreak.
    """
    async def send(cases: Iterable[Dict[str, Any]]) -> List[CasesSent]:
        outbreaks = group_by_outbreak(cases)
        events = []
        if not outbreaks:
            logger.info("No cases to send")
            return events

        user = await godata.login()
        user_id = user["userId"]

        for outbreak_id, outbreak_cases in outbreaks.items():
            logger.info(f"Activating outbreak {outbreak_id} for user {user_id}")
            await godata.activate_outbreak_for_user(user_id, outbreak_id)

            logger.info(f"Creating {len(outbreak_cases)} cases in outbreak {outbreak_id}")
            await gather_or_cancel(*[
                godata.create_outbreak_case(outbreak_id, without_outbreak(case))
                for case in outbreak_cases
            ])
            events.append(CasesSent(outbreak_id=outbreak_id, case_count=len(outbreak_cases)))

        return events

    return send
