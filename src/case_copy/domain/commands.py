"""Commands for the case copy service."""

from dataclasses import dataclass

from config import CopyConfig


@dataclass
class CopyCases:
    """Command to copy all tracked entities of the cases program from DHIS2 to Go.Data."""
    config: CopyConfig
    dry_run: bool = False
