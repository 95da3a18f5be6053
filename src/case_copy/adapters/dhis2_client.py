"""DHIS2 Web API Client - Adapter for reading tracker metadata and data."""

import abc
import logging
from typing import Any, Dict, List, Optional

import httpx

import config
from case_copy.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class AbstractDHIS2Client(abc.ABC):
    """Abstract base class for DHIS2 client implementations."""

    @abc.abstractmethod
    async def get_programs(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_program_stages(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_data_elements(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_tracked_entity_attributes(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_organisation_units_from_parent(self, root_id: str) -> List[Dict[str, Any]]:
        """
        Fetch an organisation unit and all of its descendants.

        Returns:
            List of {"id", "displayName", "parent": {"id"}} records
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def get_tracked_entity_instances(
        self, org_unit_id: str, program: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_tracked_entity_events(self, instance_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def close(self):
        pass


class HTTPDHIS2Client(AbstractDHIS2Client):
    """HTTP-based client for the DHIS2 Web API, using basic authentication."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize DHIS2 client.

        Args:
            base_url: Base URL of the DHIS2 instance. If None, uses config.
            username: DHIS2 user. If None, uses config.
            password: DHIS2 password. If None, uses config.
            timeout: Request timeout in seconds. If None, uses config.
            transport: Optional httpx transport (used by tests)
        """
        settings = config.get_dhis2_config()
        self.base_url = (base_url or settings["base_url"]).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api",
            auth=(username or settings["username"], password or settings["password"]),
            headers={"Accept": "application/json"},
            timeout=timeout or config.get_http_timeout(),
            transport=transport,
        )

    async def _get(self, path: str, collection: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET a DHIS2 collection endpoint and return the list under `collection`."""
        query = {"paging": "false"}
        query.update(params or {})

        logger.debug(f"GET {self.base_url}/api/{path} {query}")
        try:
            response = await self._client.get(path, params=query)
            response.raise_for_status()
            return response.json().get(collection, [])

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching {path} from DHIS2: {e}")
            raise DHIS2ClientError(
                f"DHIS2 request {path} failed with status {e.response.status_code}"
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Network error fetching {path} from DHIS2: {e}")
            raise DHIS2ClientError(f"Network error: {e}") from e

        except ValueError as e:
            logger.error(f"Invalid JSON in DHIS2 response for {path}: {e}")
            raise DHIS2ClientError(f"Invalid response for {path}: {e}") from e

    async def get_programs(self):
        return await self._get("programs", "programs", {"fields": "id,displayName"})

    async def get_program_stages(self):
        return await self._get("programStages", "programStages", {"fields": "id,displayName"})

    async def get_data_elements(self):
        return await self._get("dataElements", "dataElements", {"fields": "id,displayName"})

    async def get_tracked_entity_attributes(self):
        return await self._get(
            "trackedEntityAttributes", "trackedEntityAttributes", {"fields": "id,displayName"}
        )

    async def get_organisation_units_from_parent(self, root_id):
        return await self._get(
            f"organisationUnits/{root_id}",
            "organisationUnits",
            {"includeDescendants": "true", "fields": "id,displayName,parent[id]"},
        )

    async def get_tracked_entity_instances(self, org_unit_id, program=None):
        params = {"ou": org_unit_id, "fields": "*"}
        if program:
            params["program"] = program
        return await self._get("trackedEntityInstances", "trackedEntityInstances", params)

    async def get_tracked_entity_events(self, instance_id):
        return await self._get("events", "events", {"trackedEntityInstance": instance_id})

    async def close(self):
        await self._client.aclose()


class DHIS2ClientError(TransportError):
    """Exception raised for errors in the DHIS2 client."""
    pass
