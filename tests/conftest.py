"""Shared fixtures: in-memory database, users, callers and an API client."""
import os

# Must be set before projectmgmt builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from projectmgmt.database import Base, SessionLocal, engine, get_db  # noqa: E402
import projectmgmt.models  # noqa: E402,F401
from projectmgmt.models.project import PriorityLevel, Project  # noqa: E402
from projectmgmt.models.users import RoleType, User  # noqa: E402
from projectmgmt.services.policy import Caller  # noqa: E402
from projectmgmt.utils.hashing import get_password_hash  # noqa: E402
from projectmgmt.utils.tokenJWT import create_access_token  # noqa: E402

PASSWORD = "secret123"
# Shared by every test user; hashed once per session
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make(username, role=RoleType.EMPLOYEE, enabled=True, **extra):
        user = User(
            username=username,
            email=extra.pop("email", f"{username}@example.com"),
            password_hash=PASSWORD_HASH,
            first_name=extra.pop("first_name", username.capitalize()),
            last_name=extra.pop("last_name", "Tester"),
            role=role,
            enabled=enabled,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_project(db):
    def _make(name="Project", assignee=None, **extra):
        project = Project(
            name=name,
            description=extra.pop("description", "Test project"),
            start_date=extra.pop("start_date", date.today()),
            end_date=extra.pop("end_date", date.today() + timedelta(days=30)),
            priority=extra.pop("priority", PriorityLevel.MEDIUM),
            assigned_to=assignee,
            **extra,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make


@pytest.fixture
def manager(make_user):
    return make_user("maria", role=RoleType.MANAGER)


@pytest.fixture
def employee(make_user):
    return make_user("eve")


@pytest.fixture
def other_employee(make_user):
    return make_user("oscar")


@pytest.fixture
def manager_caller(manager):
    return Caller.from_user(manager)


@pytest.fixture
def employee_caller(employee):
    return Caller.from_user(employee)


@pytest.fixture
def other_caller(other_employee):
    return Caller.from_user(other_employee)


@pytest.fixture
def client(db):
    from projectmgmt.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    # No context manager: lifespan bootstrap stays out of API tests
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_header(user: User) -> dict:
    token = create_access_token({"sub": user.username, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}
