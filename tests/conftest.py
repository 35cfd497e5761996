import asyncio
import os
import tempfile

# Settings are read at import time; point them somewhere harmless first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("UPLOAD_ROOT", os.path.join(tempfile.gettempdir(), "shipdesk-test-uploads"))
os.environ.setdefault("AUTO_CREATE_TABLES", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from shipdesk import db
from shipdesk.core.config import settings
from shipdesk.main import create_app
from shipdesk.models.user import User

PASSWORD = "s3cret-pass"


@pytest.fixture
def client(tmp_path, monkeypatch):
    # one SQLite file per test; NullPool so no connection outlives the client's loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(
        db, "async_session", async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    )
    monkeypatch.setattr(settings, "upload_root", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "storage_backend", "local")

    with TestClient(create_app()) as c:
        yield c


async def _set_role(email, role):
    # registration never grants admin, so promote straight in the database
    async with db.async_session() as session:
        await session.execute(update(User).where(User.email == email).values(role=role))
        await session.commit()


class Api:
    """Thin helpers over the HTTP API so tests read as scenarios."""

    def __init__(self, client):
        self.client = client

    def login(self, email, role="user"):
        r = self.client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "name": email.split("@")[0]},
        )
        assert r.status_code == 201, r.text
        if role != "user":
            asyncio.run(_set_role(email, role))
        r = self.client.post("/api/auth/jwt/login", data={"username": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    def create_customer(self, headers, *, name="Asha Rao", email="asha@example.com", phone="9876543210",
                        addresses=None):
        addresses = addresses or [
            {"addressLine": "12 MG Road", "city": "Bengaluru", "pinCode": "560001",
             "state": "Karnataka", "isPrimary": True},
            {"addressLine": "44 Park Street", "city": "Kolkata", "pinCode": "700016",
             "state": "West Bengal"},
        ]
        r = self.client.post(
            "/api/customers",
            json={"name": name, "email": email, "phone": phone, "addresses": addresses},
            headers=headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    def create_order(self, headers, customer_id, **overrides):
        body = {
            "customerId": customer_id,
            "productInformation": "Cotton shirts",
            "productDescription": "Assorted sizes",
            "quantity": 10,
            "numberOfBoxes": 2,
            "orderDate": "19-10-2026",
            "weight": 5.5,
            "orderValue": 2500,
            "dimensions": {"length": 30, "width": 20, "height": 10},
        }
        body.update(overrides)
        r = self.client.post("/api/orders", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]

    @staticmethod
    def shipment_body(address_id, **overrides):
        body = {
            "shippingAddress": address_id,
            "courierService": "DHL",
            "shippingCost": 150,
            "numberOfBoxes": 1,
            "dispatchPersonName": "Ravi",
            "receiverName": "Asha",
        }
        body.update(overrides)
        return body

    def create_shipment(self, headers, order_id, customer_id, address_id, **overrides):
        body = self.shipment_body(address_id, orderId=order_id, customerId=customer_id, **overrides)
        r = self.client.post("/api/shipments", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]


@pytest.fixture
def api(client):
    return Api(client)


@pytest.fixture
def headers(api):
    return api.login("ops@example.com")


@pytest.fixture
def other_headers(api):
    return api.login("rival@example.com")


@pytest.fixture
def admin_headers(api):
    return api.login("admin@example.com", role="admin")
