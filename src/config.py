"""Configuration settings for the DHIS2 to Go.Data case copy."""

import json
import os
from pathlib import Path
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from case_copy.domain.exceptions import ConfigResolutionError


def get_dhis2_config():
    """Get DHIS2 connection settings from environment variables."""
    return dict(
        base_url=os.environ.get("DHIS2_URL", "http://localhost:8080"),
        username=os.environ.get("DHIS2_USER", "admin"),
        password=os.environ.get("DHIS2_PASSWORD", "district"),
    )


def get_godata_config():
    """Get Go.Data connection settings from environment variables."""
    return dict(
        base_url=os.environ.get("GODATA_URL", "http://localhost:8000"),
        username=os.environ.get("GODATA_USER", "admin@who.int"),
        password=os.environ.get("GODATA_PASSWORD", "admin"),
    )


def get_http_timeout() -> float:
    """Get HTTP request timeout (seconds) from environment variables."""
    return float(os.environ.get("HTTP_TIMEOUT", "30"))


def get_copy_config_path() -> Path:
    """Get the path of the JSON copy configuration."""
    return Path(os.environ.get("CASE_COPY_CONFIG", "config.json"))


# ---------- Copy configuration (display names, resolved to ids at run time) ----------

class ProgramStageNames(BaseModel):
    clinical_examination: str = Field(alias="clinicalExamination")
    lab_request: str = Field(alias="labRequest")
    lab_results: str = Field(alias="labResults")
    symptoms: str

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class DataElementChecks(BaseModel):
    # (data element display name, expected value) pairs that must all hold for a positive test
    confirmed_test: List[Tuple[str, str]] = Field(alias="confirmedTest", default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CopyConfig(BaseModel):
    cases_program: str = Field(alias="dhis2CasesProgram")
    program_stages: ProgramStageNames = Field(alias="dhis2KeyProgramStages")
    root_id: str = Field(alias="rootID")
    data_element_checks: DataElementChecks = Field(
        alias="dhis2DataElementsChecks", default_factory=DataElementChecks
    )
    # Go.Data case field -> DHIS2 tracked entity attribute display name
    case_attributes: Dict[str, str] = Field(alias="caseAttributes", default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def load_copy_config(path=None) -> CopyConfig:
    """
    Read and validate the JSON copy configuration.

    Raises:
        ConfigResolutionError: If the file is missing, not JSON or fails validation
    """
    path = Path(path) if path else get_copy_config_path()
    try:
        with open(path) as f:
            data = json.load(f)
        return CopyConfig.model_validate(data)
    except FileNotFoundError as e:
        raise ConfigResolutionError(f"Configuration file {path} not found") from e
    except json.JSONDecodeError as e:
        raise ConfigResolutionError(f"Configuration file {path} is not valid JSON: {e}") from e
    except ValidationError as e:
        raise ConfigResolutionError(f"Invalid configuration in {path}: {e}") from e
