import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.core.db import close_db, init_db
from app.main import app
from app.models.catalog import Component
from app.models.facility import Facility, InventoryLocation, LocationType
from app.testing.testing_mocks import RecordingPublisher


@pytest.fixture
def client():
    # No context manager: the lifespan (and its database connection) is not started
    return TestClient(app)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database with every model table, per test."""
    await init_db(db_url="sqlite://:memory:", generate_schemas=True)
    yield
    await close_db()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest_asyncio.fixture
async def facility(db):
    return await Facility.create(name="Main Production Facility", code="MAIN-001")


@pytest_asyncio.fixture
async def location_a(facility):
    return await InventoryLocation.create(facility=facility, name="Main Inventory", location_type=LocationType.WAREHOUSE)


@pytest_asyncio.fixture
async def location_b(facility):
    return await InventoryLocation.create(facility=facility, name="Line Inventory", location_type=LocationType.PRODUCTION)


@pytest_asyncio.fixture
async def component(db):
    return await Component.create(component_number="217520", description="351X119MM 2OZ BRIGADE 6MCA 0SE")
