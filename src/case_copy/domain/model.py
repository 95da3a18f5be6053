"""Records read from DHIS2 and Go.Data, and the resolved copy configuration."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from case_copy.domain.exceptions import MalformedRecordError


class LabResult(str, Enum):
    # Only two outcomes are modelled, inconclusive tests are not distinguished
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"


class CaseClassification(str, Enum):
    CONFIRMED = "CONFIRMED"
    NOT_A_CASE_DISCARDED = "NOT_A_CASE_DISCARDED"
    PROBABLE = "PROBABLE"
    SUSPECT = "SUSPECT"


@dataclass(frozen=True)
class OrganisationUnit:
    id: str
    parent_id: Optional[str] = None     # None for the root of the tree

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrganisationUnit":
        if "id" not in data:
            raise MalformedRecordError(f"Organisation unit without id: {data}")
        parent = data.get("parent") or {}
        return cls(id=data["id"], parent_id=parent.get("id"))


@dataclass(frozen=True)
class Outbreak:
    id: str
    location_ids: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Outbreak":
        if "id" not in data:
            raise MalformedRecordError(f"Outbreak without id: {data}")
        return cls(id=data["id"], location_ids=tuple(data.get("locationIds") or ()))


@dataclass(frozen=True)
class DataValue:
    data_element_id: str
    value: Any
    display_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataValue":
        if "dataElement" not in data:
            raise MalformedRecordError(f"Data value without data element: {data}")
        return cls(data_element_id=data["dataElement"], value=data.get("value"))


@dataclass(frozen=True)
class Event:
    program_stage_id: str
    data_values: Tuple[DataValue, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        if "programStage" not in data:
            raise MalformedRecordError(
                f"Event without program stage: {data.get('event', data)}", data.get("event")
            )
        return cls(
            program_stage_id=data["programStage"],
            data_values=tuple(DataValue.from_dict(dv) for dv in data.get("dataValues") or ()),
        )


@dataclass(frozen=True)
class TrackedEntityInstance:
    """
    A DHIS2 tracked entity instance moving through the copy pipeline.

    Every pipeline stage returns a new instance (dataclasses.replace) with
    its own fields filled in: outbreak, the four stage lists, lab_result
    and case_classification.
    """
    id: str
    org_unit_id: str
    events: Tuple[Event, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)   # attribute id -> value
    created: Optional[str] = None
    outbreak: Optional[str] = None
    clinical_examination: Tuple[DataValue, ...] = ()
    lab_request_stage: Tuple[DataValue, ...] = ()
    lab_result_stage: Tuple[DataValue, ...] = ()
    symptoms: Tuple[DataValue, ...] = ()
    lab_result: Optional[LabResult] = None
    case_classification: Optional[CaseClassification] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], events=()) -> "TrackedEntityInstance":
        instance_id = data.get("trackedEntityInstance")
        if not instance_id:
            raise MalformedRecordError(f"Tracked entity instance without id: {data}")
        if not data.get("orgUnit"):
            raise MalformedRecordError(
                f"Tracked entity instance {instance_id} has no organisation unit", instance_id
            )
        return cls(
            id=instance_id,
            org_unit_id=data["orgUnit"],
            events=tuple(Event.from_dict(e) for e in events),
            attributes={a["attribute"]: a.get("value") for a in data.get("attributes") or () if "attribute" in a},
            created=data.get("created"),
        )


@dataclass(frozen=True)
class ProgramStageIds:
    clinical_examination: str
    lab_request: str
    lab_results: str
    symptoms: str


@dataclass(frozen=True)
class ResolvedConfig:
    """Copy configuration with every display name replaced by its DHIS2 id."""
    cases_program_id: str
    program_stage_ids: ProgramStageIds
    root_id: str
    confirmed_test_conditions: Tuple[Tuple[str, str], ...] = ()   # (data element id, expected value)
    case_attributes: Tuple[Tuple[str, str], ...] = ()             # (Go.Data field, attribute id)
