"""Assign Go.Data outbreaks to DHIS2 tracked entity instances."""

import dataclasses
import logging
from typing import Callable, Dict, Iterable, List

from case_copy.domain.exceptions import OutbreakLookupError
from case_copy.domain.model import OrganisationUnit, Outbreak, TrackedEntityInstance

logger = logging.getLogger(__name__)


def index_outbreaks_by_location(outbreaks: Iterable[Outbreak]) -> Dict[str, List[Outbreak]]:
    """Group outbreaks by their first location id, keeping insertion order in each bucket."""
    index = {}  # type: Dict[str, List[Outbreak]]
    for outbreak in outbreaks:
        if not outbreak.location_ids:
            logger.warning(f"Outbreak {outbreak.id} has no locations, it will never be assigned")
            continue
        index.setdefault(outbreak.location_ids[0], []).append(outbreak)
    return index


def find_outbreak_for_location(
    available: Dict[str, List[Outbreak]],
    org_units: Dict[str, OrganisationUnit],
    location_id: str,
) -> str:
    """
    Walk up the organisation unit tree until a location with an outbreak is found.

    When several outbreaks share the location, the first one wins.

    Raises:
        OutbreakLookupError: If the walk reaches an unknown unit, a root
            without an outbreak, or loops over a cycle of parent links
    """
    path = []
    seen = set()
    current = location_id
    while current not in available:
        if current in seen:
            raise OutbreakLookupError(
                f"Cycle in organisation unit parents: {' -> '.join(path + [current])}",
                location_id,
            )
        seen.add(current)
        path.append(current)

        org_unit = org_units.get(current)
        if org_unit is None:
            raise OutbreakLookupError(f"Organisation unit {current} not found", location_id)
        if org_unit.parent_id is None:
            raise OutbreakLookupError(
                f"No outbreak covers organisation unit {location_id} (root {current} reached)",
                location_id,
            )
        current = org_unit.parent_id

    return available[current][0].id


def assign_outbreak(
    outbreaks: Iterable[Outbreak],
    org_units: Iterable[OrganisationUnit],
) -> Callable[[TrackedEntityInstance], TrackedEntityInstance]:
    """Build the stage that sets the outbreak of a tracked entity instance."""
    available = index_outbreaks_by_location(outbreaks)
    units_by_id = {ou.id: ou for ou in org_units}

    def assign(tei: TrackedEntityInstance) -> TrackedEntityInstance:
        outbreak_id = find_outbreak_for_location(available, units_by_id, tei.org_unit_id)
        return dataclasses.replace(tei, outbreak=outbreak_id)

    return assign
