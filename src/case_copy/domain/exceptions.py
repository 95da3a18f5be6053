"""Errors that abort a case copy run."""

from typing import Optional


class CaseCopyError(Exception):
    """Base class for all case copy errors."""
    pass


class ConfigResolutionError(CaseCopyError):
    """A configured display name has no matching id (or the configuration is invalid)."""
    pass


class OutbreakLookupError(CaseCopyError, LookupError):
    """An organisation unit cannot be resolved to an outbreak."""

    def __init__(self, message: str, org_unit_id: Optional[str] = None):
        super().__init__(message)
        self.org_unit_id = org_unit_id


class TransportError(CaseCopyError):
    """Network or authentication failure against DHIS2 or Go.Data."""
    pass


class MalformedRecordError(CaseCopyError):
    """A record is missing fields the pipeline depends on."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
