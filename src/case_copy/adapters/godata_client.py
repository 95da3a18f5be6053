"""Go.Data API Client - Adapter for outbreaks and cases."""

import abc
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

import config
from case_copy.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class AbstractGoDataClient(abc.ABC):
    """Abstract base class for Go.Data client implementations."""

    @abc.abstractmethod
    async def get_outbreaks(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def login(self) -> Dict[str, Any]:
        """
        Authenticate against Go.Data.

        Returns:
            Session dict containing at least "userId"
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def activate_outbreak_for_user(self, user_id: str, outbreak_id: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def create_outbreak_case(self, outbreak_id: str, case: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def close(self):
        pass


class HTTPGoDataClient(AbstractGoDataClient):
    """HTTP-based client for the Go.Data (LoopBack) API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = config.get_godata_config()
        self.base_url = (base_url or settings["base_url"]).rstrip("/")
        self.username = username or settings["username"]
        self.password = password or settings["password"]
        self.session = None  # type: Optional[Dict[str, Any]]
        self._login_lock = asyncio.Lock()
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api",
            headers={"Accept": "application/json"},
            timeout=timeout or config.get_http_timeout(),
            transport=transport,
        )

    async def _request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> Any:
        headers = {}
        if authenticated:
            session = await self.login()
            headers["Authorization"] = session["id"]

        logger.debug(f"{method} {self.base_url}/api/{path}")
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else None

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error on {method} {path} against Go.Data: {e}")
            raise GoDataClientError(
                f"Go.Data request {method} {path} failed with status {e.response.status_code}"
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Network error on {method} {path} against Go.Data: {e}")
            raise GoDataClientError(f"Network error: {e}") from e

        except ValueError as e:
            logger.error(f"Invalid JSON in Go.Data response for {path}: {e}")
            raise GoDataClientError(f"Invalid response for {path}: {e}") from e

    async def login(self):
        """Log in once and reuse the session (access token id and userId) afterwards."""
        async with self._login_lock:
            if self.session is None:
                logger.info(f"Logging in to Go.Data as {self.username}")
                session = await self._request(
                    "POST",
                    "users/login",
                    authenticated=False,
                    json={"email": self.username, "password": self.password},
                )
                if not session or "id" not in session or "userId" not in session:
                    raise GoDataClientError("Go.Data login response has no access token or userId")
                self.session = session
        return self.session

    async def get_outbreaks(self):
        return await self._request("GET", "outbreaks")

    async def activate_outbreak_for_user(self, user_id, outbreak_id):
        await self._request("PATCH", f"users/{user_id}", json={"activeOutbreakId": outbreak_id})

    async def create_outbreak_case(self, outbreak_id, case):
        return await self._request("POST", f"outbreaks/{outbreak_id}/cases", json=case)

    async def close(self):
        await self._client.aclose()


class GoDataClientError(TransportError):
    """Exception raised for errors in the Go.Data client."""
    pass
