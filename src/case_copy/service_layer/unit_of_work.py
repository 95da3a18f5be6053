# pylint: disable=attribute-defined-outside-init
from __future__ import annotations
import abc

from case_copy.adapters import dhis2_client, godata_client


class AbstractUnitOfWork(abc.ABC):
    """Holds both API clients for one copy run."""
    dhis2: dhis2_client.AbstractDHIS2Client
    godata: godata_client.AbstractGoDataClient

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.close()

    @abc.abstractmethod
    async def close(self):
        raise NotImplementedError


class HTTPUnitOfWork(AbstractUnitOfWork):
    def __init__(self, dhis2_client_impl=None, godata_client_impl=None):
        self.dhis2_client_impl = dhis2_client_impl
        self.godata_client_impl = godata_client_impl

    async def __aenter__(self):
        self.dhis2 = self.dhis2_client_impl or dhis2_client.HTTPDHIS2Client()
        self.godata = self.godata_client_impl or godata_client.HTTPGoDataClient()
        return await super().__aenter__()

    async def close(self):
        await self.dhis2.close()
        await self.godata.close()
