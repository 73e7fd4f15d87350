import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import models  # noqa: F401
from core.database import get_session
from main import app
from models import SwiftCodeRecord
from services.registry_store import SQLRegistryStore
from services.swift_service import SwiftCodeService


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session):
    return SQLRegistryStore(session)


@pytest.fixture(name="service")
def service_fixture(store):
    return SwiftCodeService(store)


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_record(code: str, country: str = "US", name: str = "Test Bank", **overrides) -> SwiftCodeRecord:
    fields = dict(
        countryISO2=country,
        swiftCode=code,
        name=name,
        address=f"{code} address",
        countryName="UNITED STATES" if country == "US" else "GERMANY",
        isHeadquarter=code.endswith("XXX"),
    )
    fields.update(overrides)
    return SwiftCodeRecord(**fields)
