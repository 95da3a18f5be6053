"""Domain events for the case copy service."""

from dataclasses import dataclass


@dataclass
class CasesSent:
    """All cases of an outbreak have been created in Go.Data."""
    outbreak_id: str
    case_count: int
