import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from main import app

from barberpro.core.auth import create_access_token
from barberpro.core.config import local_today
from barberpro.db.mongodb import db
from barberpro.schemas.barber import BarberCreate
from barberpro.schemas.service import ServiceCreate
from barberpro.services.barber_service import create_barber
from barberpro.services.catalog_service import create_service
from barberpro.services.notification_service import broker

EVERY_DAY = [1, 2, 3, 4, 5, 6, 7]


@pytest.fixture(autouse=True)
def mongo_db():
    """Fresh in-memory database for every test"""
    db.client = AsyncMongoMockClient()
    db.db = db.client["barberpro_test"]
    yield db.db
    db.client = None
    db.db = None


@pytest.fixture(autouse=True)
def clean_broker():
    yield
    broker._subscribers.clear()
    broker._pending.clear()


@pytest.fixture
def booking_date():
    """A date a week out; barbers in these tests work every day."""
    return local_today() + timedelta(days=7)


@pytest_asyncio.fixture
async def barber():
    return await create_barber(BarberCreate(
        name="Carlos",
        workStartTime="09:00",
        workEndTime="18:00",
        workDays=EVERY_DAY,
    ))


@pytest_asyncio.fixture
async def other_barber():
    return await create_barber(BarberCreate(
        name="Rafael",
        workStartTime="10:00",
        workEndTime="12:00",
        workDays=EVERY_DAY,
    ))


@pytest_asyncio.fixture
async def service():
    return await create_service(ServiceCreate(name="Haircut", price=45.0, durationMinutes=30))


async def _insert_user(email, role, full_name="", phone=""):
    user = {
        "_id": ObjectId(),
        "email": email,
        "password": "not-a-real-hash",
        "fullName": full_name,
        "phone": phone,
        "role": role,
        "isActive": True,
        "createdAt": datetime.utcnow(),
    }
    await db.db.users.insert_one(user)
    user["id"] = str(user["_id"])
    return user


@pytest_asyncio.fixture
async def client_user():
    return await _insert_user("joao@example.com", "client", full_name="João Silva", phone="+5511999990000")


@pytest_asyncio.fixture
async def second_client():
    return await _insert_user("maria@example.com", "client", full_name="Maria Souza")


@pytest_asyncio.fixture
async def admin_user():
    return await _insert_user("owner@barberpro.com", "admin", full_name="Shop Owner")


@pytest.fixture
def auth_headers():
    def make_headers(user):
        token = create_access_token({"sub": str(user["_id"])})
        return {"Authorization": f"Bearer {token}"}
    return make_headers


@pytest_asyncio.fixture
async def api_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
