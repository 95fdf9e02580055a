"""
Tests for the module access gates (maintenance, role, subscription).
"""
import pytest
from datetime import datetime, timedelta, timezone
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.models import Company, Subscription, User
from app.db.models.user import MASTER_ADMIN, COMPANY_SUPER_ADMIN, COMPANY_ADMIN
from app.db.session import get_db
from app.core.gating import has_module_role_access, require_module
from app.core.maintenance import MaintenanceSettings, ModuleMaintenance, maintenance_store
from app.core.security import hash_password, create_access_token


TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    maintenance_store.clear()
    yield
    app.dependency_overrides.pop(get_db, None)
    maintenance_store.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def company(db_session):
    company = Company(company_name="Harbour Motors", email="fleet@harbour.example")
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


def make_user(db_session, email, role, company=None, module_access=None):
    user = User(
        full_name="Test User",
        email=email,
        password_hash=hash_password("testpass123"),
        role=role,
        company_id=company.id if company else None,
        module_access=module_access or [],
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def headers_for(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


def subscribe(db_session, company, end_offset, grace_offset=None, modules=("inspection",)):
    now = datetime.now(timezone.utc)
    db_session.add(Subscription(
        company_id=company.id,
        number_of_days=30,
        number_of_users=3,
        selected_modules=[{"module_name": m, "cost": 1.0} for m in modules],
        total_amount=90.0,
        subscription_start_date=now - timedelta(days=30),
        subscription_end_date=now + end_offset,
        grace_period_end=now + grace_offset if grace_offset is not None else None,
        payment_status="completed",
        is_active=True,
    ))
    db_session.commit()


# ---------------------------------------------------------------- role access

def test_role_access_rules():
    master = User(role=MASTER_ADMIN, module_access=[])
    owner = User(role=COMPANY_SUPER_ADMIN, module_access=[])
    staff = User(role=COMPANY_ADMIN, module_access=["inspection"])
    unassigned = User(role=COMPANY_ADMIN, module_access=[])

    assert has_module_role_access(master, "workshop")
    assert has_module_role_access(owner, "workshop")
    assert has_module_role_access(staff, "inspection")
    assert not has_module_role_access(staff, "workshop")
    assert not has_module_role_access(unassigned, None)
    assert not has_module_role_access(User(role="guest", module_access=["inspection"]), "inspection")


# ---------------------------------------------------------------- endpoint

def test_active_subscription_allows_module(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    subscribe(db_session, company, timedelta(days=10))

    response = client.get("/modules/inspection/access", headers=headers_for(owner))
    assert response.status_code == 200
    data = response.json()
    assert data["allowed"] is True
    assert data["subscription_status"] == "active"
    assert data["days_remaining"] == 10
    assert data["in_grace_period"] is False


def test_grace_period_still_allows_module(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    subscribe(db_session, company, -timedelta(days=1), grace_offset=timedelta(days=1))

    response = client.get("/modules/inspection/access", headers=headers_for(owner))
    assert response.status_code == 200
    assert response.json()["in_grace_period"] is True


def test_expired_subscription_returns_402(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    subscribe(db_session, company, -timedelta(days=5), grace_offset=-timedelta(days=3))

    response = client.get("/modules/inspection/access", headers=headers_for(owner))
    assert response.status_code == 402
    detail = response.json()["detail"]
    assert detail["code"] == "SUBSCRIPTION_EXPIRED"
    assert detail["upgrade_url"].endswith("/company/subscription")


def test_missing_subscription_returns_402(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)

    response = client.get("/modules/inspection/access", headers=headers_for(owner))
    assert response.status_code == 402
    assert response.json()["detail"]["code"] == "SUBSCRIPTION_EXPIRED"


def test_unsubscribed_module_returns_402(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    subscribe(db_session, company, timedelta(days=10), modules=("inspection",))

    response = client.get("/modules/tradein/access", headers=headers_for(owner))
    assert response.status_code == 402
    assert response.json()["detail"]["code"] == "MODULE_NOT_SUBSCRIBED"


def test_company_admin_without_grants_returns_403(client, db_session, company):
    staff = make_user(db_session, "staff@harbour.example", COMPANY_ADMIN, company)
    subscribe(db_session, company, timedelta(days=10))

    response = client.get("/modules/inspection/access", headers=headers_for(staff))
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "NO_MODULE_ACCESS"


def test_company_admin_outside_grants_returns_403(client, db_session, company):
    staff = make_user(db_session, "staff@harbour.example", COMPANY_ADMIN, company, ["tradein"])
    subscribe(db_session, company, timedelta(days=10), modules=("inspection", "tradein"))

    response = client.get("/modules/inspection/access", headers=headers_for(staff))
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "INSUFFICIENT_MODULE_ACCESS"

    assert client.get("/modules/tradein/access", headers=headers_for(staff)).status_code == 200


def test_module_maintenance_returns_503(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    subscribe(db_session, company, timedelta(days=10), modules=("inspection", "workshop"))
    end_time = datetime.now(timezone.utc) + timedelta(hours=1)
    maintenance_store.set(MaintenanceSettings(modules=(
        ModuleMaintenance("workshop", is_enabled=True, message="Workshop offline", end_time=end_time),
    )))

    response = client.get("/modules/workshop/access", headers=headers_for(owner))
    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["code"] == "MAINTENANCE"
    assert detail["detail"] == "Workshop offline"
    assert detail["end_time"] == end_time.isoformat()

    assert client.get("/modules/inspection/access", headers=headers_for(owner)).status_code == 200


def test_maintenance_is_checked_before_subscription(client, db_session, company):
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)
    maintenance_store.set(MaintenanceSettings(is_enabled=True))

    response = client.get("/modules/inspection/access", headers=headers_for(owner))
    assert response.status_code == 503


guarded_app = FastAPI()


@guarded_app.get("/inspections")
def list_inspections(user: User = Depends(require_module("inspection"))):
    return {"email": user.email}


def test_require_module_guards_routes(db_session, company):
    guarded_app.dependency_overrides[get_db] = override_get_db
    guarded = TestClient(guarded_app)
    owner = make_user(db_session, "owner@harbour.example", COMPANY_SUPER_ADMIN, company)

    assert guarded.get("/inspections", headers=headers_for(owner)).status_code == 402

    subscribe(db_session, company, timedelta(days=10))
    response = guarded.get("/inspections", headers=headers_for(owner))
    assert response.status_code == 200
    assert response.json() == {"email": "owner@harbour.example"}


def test_master_admin_bypasses_every_gate(client, db_session):
    master = make_user(db_session, "master@vehiclehub.example", MASTER_ADMIN)
    maintenance_store.set(MaintenanceSettings(is_enabled=True))

    response = client.get("/modules/workshop/access", headers=headers_for(master))
    assert response.status_code == 200
    assert response.json()["subscription_status"] is None
