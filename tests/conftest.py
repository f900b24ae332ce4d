import os
import random
import string
import tempfile
import uuid
from dataclasses import replace

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TEST SETTINGS
# This must be done BEFORE importing uniportal.main so config.py and
# database.py build the engine against a throwaway SQLite file.
# ------------------------------------------------------------------
_DB_FILE = os.path.join(tempfile.gettempdir(), f"uniportal_test_{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "test"

from uniportal.main import app  # noqa: E402
from uniportal.core.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from uniportal.core.principal import Principal, StaffScope  # noqa: E402
from uniportal.models.academic import Course  # noqa: E402
from uniportal.models.department import Department  # noqa: E402
from uniportal.models.school import School  # noqa: E402
from uniportal.services.auth_service import create_user  # noqa: E402
from uniportal.services.interfaces import (  # noqa: E402
    AuditSink,
    BatchStore,
    CourseSummary,
    RESULT_PREVIEW_LIMIT,
    StaffScopeStore,
    UserStore,
)


def random_str(prefix=""):
    return f"{prefix}{''.join(random.choices(string.ascii_lowercase + string.digits, k=6))}"


# ==================================================================
# IN-MEMORY COLLABORATORS
# ==================================================================
class FakeUserStore(UserStore):
    """Principals keyed by id / username / email. `fail` makes every lookup raise."""

    def __init__(self, *principals, fail=False):
        self.principals = list(principals)
        self.fail = fail
        self.calls = []

    def _lookup(self, attr, value):
        self.calls.append(attr)
        if self.fail:
            raise RuntimeError("user store unavailable")
        for p in self.principals:
            if getattr(p, attr) == value:
                return p
        return None

    async def find_by_id(self, user_id):
        return self._lookup("id", user_id)

    async def find_by_username(self, username):
        return self._lookup("username", username)

    async def find_by_email(self, email):
        return self._lookup("email", email)


class FakeBatchStore(BatchStore):
    def __init__(self, *batches):
        self.batches = {b.id: b for b in batches}
        self.updates = []
        # batch id -> uploaded CourseResultRecord rows
        self.results = {}
        # Status forced in just before the conditional update lands
        self.race_to = None

    async def get_batch(self, batch_id):
        return self.batches.get(batch_id)

    async def list_batches(self, filters):
        rows = [
            b for b in self.batches.values()
            if (not filters.statuses or b.status in filters.statuses)
            and (filters.department_id is None or b.course_department_id == filters.department_id)
            and (filters.school_id is None or b.course_school_id == filters.school_id)
            and (filters.session_id is None or b.session_id == filters.session_id)
            and (filters.semester is None or b.semester == filters.semester)
            and (filters.level is None or b.level == filters.level)
            and (filters.course_id is None or b.course_id == filters.course_id)
        ]
        return sorted(rows, key=lambda b: b.id)

    async def list_courses(self, filters):
        seen = {}
        for b in await self.list_batches(filters):
            seen[b.course_id] = CourseSummary(id=b.course_id, code=b.course_code or "", title=b.course_title or "")
        return list(seen.values())

    async def list_results(self, batch_id, limit=RESULT_PREVIEW_LIMIT):
        return list(self.results.get(batch_id, []))[:limit]

    async def update_status(self, batch_id, new_status, expected_status, remark=None):
        if self.race_to is not None:
            self.batches[batch_id] = replace(self.batches[batch_id], status=self.race_to)
            self.race_to = None

        current = self.batches.get(batch_id)
        if current is None or current.status != expected_status:
            return False
        self.batches[batch_id] = replace(current, status=new_status, remark=remark)
        self.results[batch_id] = [replace(r, status=new_status) for r in self.results.get(batch_id, [])]
        self.updates.append((batch_id, expected_status, new_status))
        return True


class FakeScopeStore(StaffScopeStore):
    def __init__(self, scopes=None):
        self.scopes = scopes or {}

    async def get_scope(self, staff_id):
        return self.scopes.get(str(staff_id), StaffScope())


class FakeAuditSink(AuditSink):
    def __init__(self, fail=False):
        self.records = []
        self.fail = fail

    async def record(self, entry):
        if self.fail:
            raise RuntimeError("audit table unavailable")
        self.records.append(entry)

    async def history(self, batch_id):
        return [r for r in self.records if r.batch_id == batch_id]


@pytest.fixture
def fakes():
    """Access to the fake collaborator classes without importing conftest."""
    return {
        "users": FakeUserStore,
        "batches": FakeBatchStore,
        "scopes": FakeScopeStore,
        "audit": FakeAuditSink,
    }


# ==================================================================
# DATABASE + HTTP CLIENT
# ==================================================================
@pytest_asyncio.fixture
async def db():
    # Startup events do not run under ASGITransport
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client():
    """Client without database tables, for routes whose stores are overridden."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def org(db):
    """One school with two departments and a course in each."""
    async with AsyncSessionLocal() as session:
        school = School(name=random_str("School "), code=random_str("S"))
        other_school = School(name=random_str("School "), code=random_str("S"))
        session.add(school)
        session.add(other_school)
        await session.flush()

        dept = Department(name=random_str("Dept "), school_id=school.id)
        other_dept = Department(name=random_str("Dept "), school_id=school.id)
        foreign_dept = Department(name=random_str("Dept "), school_id=other_school.id)
        session.add_all([dept, other_dept, foreign_dept])
        await session.flush()

        course = Course(code=random_str("CSC"), title="Data Structures", department_id=dept.id)
        other_course = Course(code=random_str("MTH"), title="Linear Algebra", department_id=other_dept.id)
        foreign_course = Course(code=random_str("LAW"), title="Contract Law", department_id=foreign_dept.id)
        session.add_all([course, other_course, foreign_course])
        await session.commit()

        return {
            "school_id": school.id,
            "other_school_id": other_school.id,
            "department_id": dept.id,
            "other_department_id": other_dept.id,
            "foreign_department_id": foreign_dept.id,
            "course_id": course.id,
            "other_course_id": other_course.id,
            "foreign_course_id": foreign_course.id,
        }


@pytest_asyncio.fixture
async def make_user(db):
    """Factory: await make_user(role, status=..., password=...) -> (user, password)."""

    async def _make(role, status="ACTIVE", password="Passw0rd!", **extra):
        username = extra.pop("username", None) or random_str(f"{str(role).replace(' ', '')}_")
        async with AsyncSessionLocal() as session:
            user = await create_user(
                session=session,
                name=extra.pop("name", f"Test {role}"),
                email=f"{username}@test.edu",
                password=password,
                role=role,
                username=username,
                status=status,
                **extra,
            )
        return user, password

    return _make


@pytest.fixture
def login_as(client):
    """Form login through the real page, leaving the session cookie on `client`."""

    async def _login(user, password):
        return await client.post("/login", data={"username": user.username, "password": password})

    return _login


@pytest.fixture
def make_principal():
    def _make(role="staff", status="ACTIVE", **extra):
        extra.setdefault("id", str(uuid.uuid4()))
        return Principal(role=role, status=status, **extra)

    return _make
