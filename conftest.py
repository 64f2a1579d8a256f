import pytest
from httpx import AsyncClient, ASGITransport
from redis.exceptions import ConnectionError as RedisConnectionError

from fleethire.main import app
from fleethire.core import redis as redis_module
from fleethire.core.errors import SubmissionError
from fleethire.schemas.catalog import Catalog
from fleethire.services.catalog import get_catalog_source
from fleethire.services.gateway import get_quote_gateway


class FakeRedis:
    """In-memory stand-in for the redis.asyncio calls the service makes"""

    def __init__(self):
        self.store = {}
        self.expiry = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if isinstance(value, str):
            value = value.encode()
        self.store[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self):
        return True

    async def close(self):
        pass


class FailingRedis(FakeRedis):
    """Every call fails as if the Redis server went away"""

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")


class StaticCatalogSource:
    def __init__(self, catalog):
        self.catalog = catalog
        self.calls = 0

    async def load(self):
        self.calls += 1
        return self.catalog


class FakeGateway:
    def __init__(self, fail_save=False, fail_email=False):
        self.fail_save = fail_save
        self.fail_email = fail_email
        self.saved = []
        self.emails = []

    async def save_quote(self, record):
        if self.fail_save:
            raise SubmissionError("Quote could not be saved: backend down")
        self.saved.append(record)
        return {"id": len(self.saved)}

    async def send_email(self, email):
        if self.fail_email:
            raise SubmissionError(f"Quote email to {email.to} could not be sent")
        self.emails.append(email)


@pytest.fixture
def catalog_data():
    return {
        "vehicle_types": [
            {
                "id": 1,
                "name": "Hilux Dual Cab",
                "daily_rate": 120.0,
                "pricing_tiers": {
                    "tier_1_14_days": 100.0,
                    "tier_15_29_days": 90.0,
                    "tier_30_178_days": 80.0,
                    "tier_179_363_days": 70.0,
                    "tier_364_plus_days": 60.0,
                },
                "active": True,
            },
            {"id": 2, "name": "Corolla Hatch", "daily_rate": 65.0, "pricing_tiers": None, "active": True},
            {
                "id": 3,
                "name": "Ranger Single Cab",
                "daily_rate": 0,
                "pricing_tiers": {"tier_1_14_days": 0, "tier_15_29_days": 0},
                "active": True,
            },
            {"id": 4, "name": "Retired Van", "daily_rate": 80.0, "active": False},
        ],
        "locations": [
            {"name": "Perth Depot", "transport_fee": 0, "active": True},
            {"name": "Karratha", "transport_fee": 250.0, "active": True},
            {"name": "Port Hedland", "transport_fee": 300.0, "active": True},
            {"name": "Closed Yard", "transport_fee": 50.0, "active": False},
        ],
        "pricing_rules": [
            {"id": "ins-default", "name": "Default Insurance", "type": "insurance",
             "daily_rate_adjustment": 0, "one_time_fee": 0, "active": True},
            {"id": "ins-premium", "name": "Premium Cover", "type": "insurance",
             "daily_rate_adjustment": 25.0, "one_time_fee": 0, "active": True},
            {"id": "km-250", "name": "250 km/day", "type": "km_allowance",
             "daily_rate_adjustment": 0, "one_time_fee": 0, "active": True},
            {"id": "svc-tow", "name": "Tow Bar", "type": "additional_service",
             "daily_rate_adjustment": 10.0, "one_time_fee": 0, "active": True},
            {"id": "svc-clean", "name": "Mine Site Clean", "type": "additional_service",
             "daily_rate_adjustment": 0, "one_time_fee": 150.0, "active": True},
            {"id": "svc-discount", "name": "Loyalty Discount", "type": "additional_service",
             "daily_rate_adjustment": -5.0, "one_time_fee": None, "active": True},
            {"id": "svc-old", "name": "Retired Service", "type": "additional_service",
             "daily_rate_adjustment": 3.0, "one_time_fee": 0, "active": False},
        ],
    }


@pytest.fixture
def catalog(catalog_data):
    return Catalog.from_records(**catalog_data)


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", fake)
    return fake


@pytest.fixture
def failing_redis(monkeypatch):
    broken = FailingRedis()
    monkeypatch.setattr(redis_module, "redis", broken)
    return broken


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def test_client(fake_redis, catalog, gateway):
    app.dependency_overrides[get_catalog_source] = lambda: StaticCatalogSource(catalog)
    app.dependency_overrides[get_quote_gateway] = lambda: gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "ledger: marks tests related to line item reconciliation"
    )
