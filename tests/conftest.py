"""Shared fixtures: an isolated SQLite database per test."""

import copy

import pytest
from fastapi.testclient import TestClient

from patient_manager.core.config import ApplicationConfig, DatabaseConfig
from patient_manager.core.database import DatabaseManager
from patient_manager.main import create_app

VALID_PATIENT = {
    "firstName": "Jane",
    "lastName": "Doe",
    "dob": "1990-01-01",
    "status": "Active",
    "address": {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62704",
    },
}


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'patients.db'}"


@pytest.fixture
def app_config(database_url):
    return ApplicationConfig(environment="test", database=DatabaseConfig(url=database_url))


@pytest.fixture
def app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def db_manager(database_url):
    manager = DatabaseManager(DatabaseConfig(url=database_url))
    await manager.initialize()
    yield manager
    await manager.cleanup()


@pytest.fixture
def patient_payload():
    return copy.deepcopy(VALID_PATIENT)


def make_patient(**overrides):
    """Valid payload with top-level or address overrides"""
    payload = copy.deepcopy(VALID_PATIENT)
    address = overrides.pop("address", None)
    payload.update(overrides)
    if address:
        payload["address"].update(address)
    return payload


class FakeApi:
    """Records gateway calls; raises `error` when set"""

    def __init__(self, patients=None):
        self.patients = patients or []
        self.calls = []
        self.error = None

    async def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def get_all_patients(self, search_term="", status_filter="All"):
        await self._record("list", search_term, status_filter)
        return list(self.patients)

    async def create_patient(self, data):
        await self._record("create", data)
        return dict(data, id=1)

    async def update_patient(self, patient_id, data):
        await self._record("update", patient_id, data)
        return dict(data, id=patient_id)

    async def delete_patient(self, patient_id):
        await self._record("delete", patient_id)
        return {"id": patient_id}
