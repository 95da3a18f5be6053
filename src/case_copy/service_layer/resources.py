"""Load reference data and tracked entities, and resolve the copy configuration."""

import dataclasses
import logging
from typing import Any, Dict, List, Sequence

from config import CopyConfig
from case_copy.adapters.dhis2_client import AbstractDHIS2Client
from case_copy.adapters.godata_client import AbstractGoDataClient
from case_copy.domain.exceptions import ConfigResolutionError
from case_copy.domain.model import (
    Event,
    OrganisationUnit,
    Outbreak,
    ProgramStageIds,
    ResolvedConfig,
    TrackedEntityInstance,
)
from case_copy.services.concurrency import gather_or_cancel

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Resources:
    """Reference data of one run, read-only once loaded."""
    programs: List[Dict[str, Any]]
    program_stages: List[Dict[str, Any]]
    data_elements: List[Dict[str, Any]]
    attributes: List[Dict[str, Any]]
    organisation_units: List[OrganisationUnit]
    outbreaks: List[Outbreak]


async def load_resources(
    dhis2: AbstractDHIS2Client,
    godata: AbstractGoDataClient,
    root_id: str,
) -> Resources:
    """Fetch DHIS2 metadata, the organisation unit subtree and Go.Data outbreaks concurrently."""
    (
        programs,
        program_stages,
        data_elements,
        attributes,
        organisation_units,
        outbreaks,
    ) = await gather_or_cancel(
        dhis2.get_programs(),
        dhis2.get_program_stages(),
        dhis2.get_data_elements(),
        dhis2.get_tracked_entity_attributes(),
        dhis2.get_organisation_units_from_parent(root_id),
        godata.get_outbreaks(),
    )
    return Resources(
        programs=programs,
        program_stages=program_stages,
        data_elements=data_elements,
        attributes=attributes,
        organisation_units=[OrganisationUnit.from_dict(ou) for ou in organisation_units],
        outbreaks=[Outbreak.from_dict(o) for o in outbreaks],
    )


def get_id_from_display_name(records: Sequence[Dict[str, Any]], display_name: str, kind: str = "resource") -> str:
    """
    Id of the first record with the given display name.

    Raises:
        ConfigResolutionError: If no record has that display name
    """
    for record in records:
        if record.get("displayName") == display_name:
            return record["id"]
    raise ConfigResolutionError(f"No {kind} named '{display_name}' found in DHIS2")


def resolve_config(copy_config: CopyConfig, resources: Resources) -> ResolvedConfig:
    """Replace every display name of the copy configuration by its DHIS2 id."""
    stages = copy_config.program_stages

    def stage_id(name):
        return get_id_from_display_name(resources.program_stages, name, "program stage")

    return ResolvedConfig(
        cases_program_id=get_id_from_display_name(
            resources.programs, copy_config.cases_program, "program"
        ),
        program_stage_ids=ProgramStageIds(
            clinical_examination=stage_id(stages.clinical_examination),
            lab_request=stage_id(stages.lab_request),
            lab_results=stage_id(stages.lab_results),
            symptoms=stage_id(stages.symptoms),
        ),
        root_id=copy_config.root_id,
        confirmed_test_conditions=tuple(
            (get_id_from_display_name(resources.data_elements, element, "data element"), value)
            for element, value in copy_config.data_element_checks.confirmed_test
        ),
        case_attributes=tuple(
            (case_field, get_id_from_display_name(resources.attributes, attribute, "attribute"))
            for case_field, attribute in copy_config.case_attributes.items()
        ),
    )


async def load_tracked_entity_instances(
    dhis2: AbstractDHIS2Client,
    organisation_units: Sequence[OrganisationUnit],
    program_id: str,
) -> List[TrackedEntityInstance]:
    """Tracked entities of a program in every organisation unit, each with its events."""

    async def load_with_events(instance: Dict[str, Any]) -> TrackedEntityInstance:
        tei = TrackedEntityInstance.from_dict(instance)
        events = await dhis2.get_tracked_entity_events(tei.id)
        return dataclasses.replace(tei, events=tuple(Event.from_dict(e) for e in events))

    async def load_org_unit(org_unit: OrganisationUnit) -> List[TrackedEntityInstance]:
        instances = await dhis2.get_tracked_entity_instances(org_unit.id, program=program_id)
        return await gather_or_cancel(*[
            load_with_events(instance) for instance in instances if instance is not None
        ])

    per_org_unit = await gather_or_cancel(*[load_org_unit(ou) for ou in organisation_units])
    return [tei for instances in per_org_unit for tei in instances]
