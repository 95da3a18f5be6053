"""Tracked entity to Go.Data case mapper."""

import logging
from typing import Any, Dict, Sequence, Tuple

from case_copy.domain.exceptions import MalformedRecordError
from case_copy.domain.model import TrackedEntityInstance

logger = logging.getLogger(__name__)

CLASSIFICATION_PREFIX = "LNG_REFERENCE_DATA_CATEGORY_CASE_CLASSIFICATION_"


class TrackedEntityToCase:
    """Transform classified tracked entity instances into Go.Data case records."""

    def __init__(self, case_attributes: Sequence[Tuple[str, str]] = ()):
        """
        Args:
            case_attributes: (Go.Data case field, DHIS2 attribute id) pairs
        """
        self.case_attributes = tuple(case_attributes)

    def __call__(self, tei: TrackedEntityInstance) -> Dict[str, Any]:
        return self.to_case(tei)

    def to_case(self, tei: TrackedEntityInstance) -> Dict[str, Any]:
        """
        Build the Go.Data case for a tracked entity.

        The returned record keeps the internal 'outbreak' field, which the
        sender uses for grouping and strips before submission.

        Raises:
            MalformedRecordError: If the tracked entity has not been assigned
                an outbreak or classified yet
        """
        if tei.outbreak is None:
            raise MalformedRecordError(f"Tracked entity {tei.id} has no outbreak", tei.id)
        if tei.case_classification is None:
            raise MalformedRecordError(f"Tracked entity {tei.id} is not classified", tei.id)

        case = {
            "id": tei.id,
            "outbreak": tei.outbreak,
            "classification": CLASSIFICATION_PREFIX + tei.case_classification.value,
        }
        if tei.created:
            case["dateOfReporting"] = tei.created

        for case_field, attribute_id in self.case_attributes:
            value = tei.attributes.get(attribute_id)
            if value is not None:
                case[case_field] = value

        return case
