import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import User
from app.utils.security import hash_password
from main import app

PASSWORD = "password123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def users(db):
    """nkc is the super-admin, sarada a plain admin, rahul a user"""
    created = {}
    for username, role in (("nkc", "ADMIN"), ("sarada", "ADMIN"), ("rahul", "USER")):
        user = User(username=username, name=username.title(), hashed_password=hash_password(PASSWORD), role=role)
        db.add(user)
        created[username] = user
    db.commit()
    return created


@pytest.fixture
def client_for(session_factory):
    """Build a logged-in TestClient per username, each with its own cookie jar"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def make(username=None, password=PASSWORD):
        client = TestClient(app)
        clients.append(client)
        if username is not None:
            res = client.post("/auth/login", json={"username": username, "password": password})
            assert res.status_code == 200, res.text
        return client

    yield make

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def make_project(client_for, users):
    """Create a project as the super-admin and return its id"""
    admin = client_for("nkc")

    def make(name="Board", user_ids=None):
        res = admin.post("/projects/", json={"name": name, "user_ids": user_ids or []})
        assert res.status_code == 201, res.text
        return res.json()["id"]

    return make
