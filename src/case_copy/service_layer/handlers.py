import logging

from case_copy.adapters.case_mapper import TrackedEntityToCase
from case_copy.domain.commands import CopyCases
from case_copy.domain.exceptions import CaseCopyError
from case_copy.service_layer.resources import (
    load_resources,
    load_tracked_entity_instances,
    resolve_config,
)
from case_copy.service_layer.unit_of_work import AbstractUnitOfWork
from case_copy.services.case_sender import group_by_outbreak, send_cases_to_godata
from case_copy.services.event_enricher import enrich_events
from case_copy.services.lab_classifier import add_lab_information
from case_copy.services.outbreak_assigner import assign_outbreak

logger = logging.getLogger(__name__)


async def copy_cases(
    command: CopyCases,
    uow: AbstractUnitOfWork
) -> int:
    """
    Copy tracked entities of the cases program from DHIS2 to Go.Data.

    Flow:
    1. Fetch reference resources from DHIS2 and Go.Data
    2. Resolve configured display names to ids
    3. Fetch tracked entity instances (with events) of the cases program
    4. Assign outbreaks, enrich stage events, classify, map to cases
    5. Send cases grouped by outbreak (skipped on dry run)

    Args:
        command: CopyCases command with the copy configuration
        uow: Unit of work holding the DHIS2 and Go.Data clients

    Returns:
        Number of cases sent (or that would be sent on a dry run)

    Raises:
        CaseCopyError: Any failure aborts the whole run
    """
    try:
        logger.info("Fetching resources")
        resources = await load_resources(uow.dhis2, uow.godata, command.config.root_id)

        logger.info("Reading configuration")
        resolved = resolve_config(command.config, resources)

        logger.info("Fetching tracked entity instances")
        tracked_entities = await load_tracked_entity_instances(
            uow.dhis2, resources.organisation_units, resolved.cases_program_id
        )
        logger.info(f"Fetched {len(tracked_entities)} tracked entity instances")

        logger.info("Assigning outbreaks to tracked entity instances")
        assign = assign_outbreak(resources.outbreaks, resources.organisation_units)
        tracked_entities = [assign(tei) for tei in tracked_entities]

        logger.info("Adding additional information to tracked entity instances")
        enrich = enrich_events(resources.data_elements, resolved.program_stage_ids)
        classify = add_lab_information(resolved.confirmed_test_conditions)
        tracked_entities = [classify(enrich(tei)) for tei in tracked_entities]

        logger.info("Transforming tracked entity instances to cases")
        to_case = TrackedEntityToCase(resolved.case_attributes)
        cases = [to_case(tei) for tei in tracked_entities]

        if command.dry_run:
            for outbreak_id, outbreak_cases in group_by_outbreak(cases).items():
                logger.info(f"Dry run: would send {len(outbreak_cases)} cases to outbreak {outbreak_id}")
            return len(cases)

        logger.info("Sending cases to Go.Data")
        for sent in await send_cases_to_godata(uow.godata)(cases):
            logger.info(f"Sent {sent.case_count} cases to outbreak {sent.outbreak_id}")

        logger.info(f"Successfully copied {len(cases)} cases")
        return len(cases)

    except CaseCopyError as e:
        logger.error(f"Case copy aborted: {e}")
        raise

    except Exception as e:
        logger.error(f"Unexpected error copying cases: {e}")
        raise
