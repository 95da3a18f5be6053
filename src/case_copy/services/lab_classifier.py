"""Lab result and case classification of enriched tracked entities."""

import dataclasses
import logging
from typing import Callable, Iterable, Optional, Sequence, Tuple

from case_copy.domain.model import (
    CaseClassification,
    DataValue,
    LabResult,
    TrackedEntityInstance,
)

logger = logging.getLogger(__name__)


def find_data_value_by_id(data_values: Iterable[DataValue], data_element_id: str) -> Optional[DataValue]:
    return next((dv for dv in data_values or () if dv.data_element_id == data_element_id), None)


def check_data_value(data_values: Iterable[DataValue], data_element_id: str, value) -> bool:
    """True if the data element is present and holds exactly the given value."""
    data_value = find_data_value_by_id(data_values, data_element_id)
    return data_value is not None and data_value.value == value


def check_data_values_conditions(
    conditions: Sequence[Tuple[str, str]],
) -> Callable[[TrackedEntityInstance], bool]:
    """All (data element id, expected value) conditions hold in the lab result stage."""
    def check(tei: TrackedEntityInstance) -> bool:
        return all(
            check_data_value(tei.lab_result_stage, data_element_id, value)
            for data_element_id, value in conditions
        )

    return check


def add_lab_result(
    confirmed_test_conditions: Sequence[Tuple[str, str]],
) -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    # TODO: support 'inconclusive' and 'not performed' lab results
    is_positive = check_data_values_conditions(confirmed_test_conditions)

    def add(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        if not tei.lab_result_stage:
            return tei
        result = LabResult.POSITIVE if is_positive(tei) else LabResult.NEGATIVE
        return dataclasses.replace(tei, lab_result=result)

    return add


def classify(tei: TrackedEntityInstance) -> CaseClassification:
    """
    Case classification by priority, first match wins:

    1. positive lab result                       -> CONFIRMED
    2. negative lab result with lab result data  -> NOT_A_CASE_DISCARDED
    3. lab request data                          -> PROBABLE
    4. anything else                             -> SUSPECT
    """
    if tei.lab_result == LabResult.POSITIVE:
        return CaseClassification.CONFIRMED
    if tei.lab_result == LabResult.NEGATIVE and tei.lab_result_stage:
        return CaseClassification.NOT_A_CASE_DISCARDED
    if tei.lab_request_stage:
        return CaseClassification.PROBABLE
    return CaseClassification.SUSPECT


def add_case_classification() -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    def add(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        return dataclasses.replace(tei, case_classification=classify(tei))

    return add


def add_lab_information(
    confirmed_test_conditions: Sequence[Tuple[str, str]],
) -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    """Build the stage that sets lab_result, then case_classification."""
    lab_result = add_lab_result(confirmed_test_conditions)
    case_classification = add_case_classification()

    def add(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        classified = case_classification(lab_result(tei))
        logger.debug(
            f"Tracked entity {tei.id}: lab result {classified.lab_result}, "
            f"classification {classified.case_classification}"
        )
        return classified

    return add
