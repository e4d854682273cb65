import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from property_api.database import Database, get_db
# Import FastAPI factory AFTER the models are registered (property_api.database imports them)
from property_api.main import create_app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def database():
    """Connected gateway with a fresh schema for each test"""
    database = Database(SQLALCHEMY_TEST_DATABASE_URL, poolclass=StaticPool)
    database.connect()
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(database, db_session):
    """FastAPI test client with test database"""
    app = create_app(database)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_tenant(client):
    """Create a tenant through the API and return its JSON"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "name": f"Tenant {counter['n']}",
            "email": f"tenant{counter['n']}@example.com",
            "phone": f"555-010{counter['n']}",
        }
        data.update(overrides)
        response = client.post("/api/tenants", json=data)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_unit(client):
    """Create a unit through the API and return its JSON"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "unit_number": f"A{100 + counter['n']}",
            "type": "one_bedroom",
            "rent_amount": 1000.00,
        }
        data.update(overrides)
        response = client.post("/api/units", json=data)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_lease(client, make_tenant, make_unit):
    """Create a lease (new tenant and unit unless given) and return its JSON"""

    def _make(tenant_id=None, unit_id=None, **overrides):
        data = {
            "tenant_id": tenant_id or make_tenant()["id"],
            "unit_id": unit_id or make_unit()["id"],
            "start_date": str(date.today()),
            "end_date": str(date.today() + timedelta(days=365)),
            "status": "active",
        }
        data.update(overrides)
        response = client.post("/api/leases", json=data)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
