"""Attach program stage data values, with their display names, to tracked entities."""

import dataclasses
from typing import Any, Callable, Dict, Iterable, Tuple

from case_copy.domain.model import DataValue, Event, ProgramStageIds, TrackedEntityInstance

# stage field on TrackedEntityInstance -> attribute of ProgramStageIds
STAGE_FIELDS = (
    ("clinical_examination", "clinical_examination"),
    ("lab_request_stage", "lab_request"),
    ("lab_result_stage", "lab_results"),
    ("symptoms", "symptoms"),
)


def find_and_transform_event(
    display_names: Dict[str, str],
    program_stage_id: str,
    events: Iterable[Event],
) -> Tuple[DataValue, ...]:
    """Data values of the first event of a program stage, named after their data element."""
    event = next((e for e in events if e.program_stage_id == program_stage_id), None)
    if event is None:
        return ()
    return tuple(
        dataclasses.replace(dv, display_name=display_names.get(dv.data_element_id))
        for dv in event.data_values
    )


def add_event(
    display_names: Dict[str, str],
    stage_field: str,
    program_stage_id: str,
) -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    def add(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        data_values = find_and_transform_event(display_names, program_stage_id, tei.events)
        return dataclasses.replace(tei, **{stage_field: data_values})

    return add


def enrich_events(
    data_elements: Iterable[Dict[str, Any]],
    program_stage_ids: ProgramStageIds,
) -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    """
    Build the stage that fills the four program stage fields of a tracked entity.

    Args:
        data_elements: DHIS2 data element catalog ({"id", "displayName"} records)
        program_stage_ids: Resolved ids of the clinical examination, lab
            request, lab results and symptoms stages

    A stage without an event yields an empty tuple. A data element missing
    from the catalog yields a data value whose display_name is None.
    """
    display_names = {}  # type: Dict[str, str]
    for element in data_elements:
        # First catalog entry wins
        display_names.setdefault(element.get("id"), element.get("displayName"))

    stages = [
        add_event(display_names, stage_field, getattr(program_stage_ids, ids_field))
        for stage_field, ids_field in STAGE_FIELDS
    ]

    def enrich(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        for stage in stages:
            tei = stage(tei)
        return tei

    return enrich
