# pylint: disable=redefined-outer-name
import asyncio

import pytest

from config import CopyConfig
from tests.examples.dhis2_loader import examples


@pytest.fixture
def metadata():
    return examples.load_metadata()


@pytest.fixture
def copy_config():
    """Copy configuration matching the example DHIS2 metadata"""
    return CopyConfig.model_validate(examples.load_example("../../examples/copy_config.json"))


@pytest.fixture
def fake_dhis2_client():
    """Provide a fake DHIS2 client that serves the example metadata and tracked entities"""
    from case_copy.adapters.dhis2_client import AbstractDHIS2Client, DHIS2ClientError

    class FakeDHIS2Client(AbstractDHIS2Client):
        def __init__(self):
            self.metadata = examples.load_metadata()
            tracked = examples.load_tracked_entities()
            self.instances = tracked["trackedEntityInstances"]
            self.events = tracked["events"]
            self.requested_org_units = []
            self.closed = False

        async def get_programs(self):
            return self.metadata["programs"]

        async def get_program_stages(self):
            return self.metadata["programStages"]

        async def get_data_elements(self):
            return self.metadata["dataElements"]

        async def get_tracked_entity_attributes(self):
            return self.metadata["trackedEntityAttributes"]

        async def get_organisation_units_from_parent(self, root_id):
            return self.metadata["organisationUnits"]

        async def get_tracked_entity_instances(self, org_unit_id, program=None):
            self.requested_org_units.append((org_unit_id, program))
            return self.instances.get(org_unit_id, [])

        async def get_tracked_entity_events(self, instance_id):
            if instance_id not in self.events:
                raise DHIS2ClientError(f"Tracked entity {instance_id} not found")
            return self.events[instance_id]

        async def close(self):
            self.closed = True

    return FakeDHIS2Client()


@pytest.fixture
def fake_godata_client():
    """Provide a fake Go.Data client that records every call in order"""
    from case_copy.adapters.godata_client import AbstractGoDataClient

    class FakeGoDataClient(AbstractGoDataClient):
        def __init__(self):
            self.outbreaks = examples.load_outbreaks()
            self.cases = {}  # outbreak id -> list of cases
            self.calls = []
            self.closed = False

        async def get_outbreaks(self):
            return self.outbreaks

        async def login(self):
            self.calls.append(("login",))
            return {"id": "access-token", "userId": "user-1"}

        async def activate_outbreak_for_user(self, user_id, outbreak_id):
            self.calls.append(("activate", user_id, outbreak_id))
            await asyncio.sleep(0)
            self.calls.append(("activated", user_id, outbreak_id))

        async def create_outbreak_case(self, outbreak_id, case):
            self.calls.append(("create", outbreak_id, case["id"]))
            self.cases.setdefault(outbreak_id, []).append(case)
            return case

        async def close(self):
            self.closed = True

    return FakeGoDataClient()


@pytest.fixture
def fake_uow(fake_dhis2_client, fake_godata_client):
    from case_copy.service_layer.unit_of_work import HTTPUnitOfWork

    return HTTPUnitOfWork(
        dhis2_client_impl=fake_dhis2_client,
        godata_client_impl=fake_godata_client,
    )
