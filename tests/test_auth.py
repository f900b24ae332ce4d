import pytest

from uniportal.core.database import AsyncSessionLocal
from uniportal.models.user import User
from uniportal.services.auth_service import get_user_by_id

JSON = {"Accept": "application/json"}


# ------------------------------------------------------------------
# SESSION LOGIN (form)
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_login_page_renders(client):
    res = await client.get("/login")
    assert res.status_code == 200
    assert 'action="/login"' in res.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "role, status, landing",
    [
        ("staff", "ACTIVE", "/staff/dashboard"),
        ("lecturer", "RETIRED", "/staff/dashboard"),
        ("student", "GRADUATED", "/student/dashboard"),
        ("applicant", None, "/applicant/dashboard"),
        # Legacy role spellings still land in the staff area
        ("bursar", "ACTIVE", "/staff/dashboard"),
        ("head of department", "ACTIVE", "/staff/dashboard"),
        ("ict staff", "ACTIVE", "/staff/dashboard"),
    ],
)
async def test_login_redirects_by_role(client, make_user, login_as, role, status, landing):
    user, password = await make_user(role, status=status)

    res = await login_as(user, password)

    assert res.status_code == 303
    assert res.headers["location"] == landing

    page = await client.get(landing)
    assert page.status_code == 200


@pytest.mark.asyncio
async def test_hod_login_lands_on_staff_dashboard(client, org, make_user, login_as):
    user, password = await make_user("hod", department_id=org["department_id"])

    res = await login_as(user, password)
    assert res.headers["location"] == "/staff/dashboard"

    me = await client.get("/api/auth/me", headers=JSON)
    data = me.json()["data"]
    assert data["id"] == str(user.id)
    assert data["role"] == "hod"
    assert data["readOnly"] is False


@pytest.mark.asyncio
async def test_login_with_email_and_json(client, make_user):
    user, password = await make_user("staff")

    res = await client.post("/login", json={"username": user.email, "password": password})

    assert res.status_code == 200
    assert res.json() == {"ok": True, "data": {"redirect_to": "/staff/dashboard"}}


@pytest.mark.asyncio
async def test_wrong_password(client, make_user):
    user, _ = await make_user("staff")

    page = await client.post("/login", data={"username": user.username, "password": "nope"})
    assert page.status_code == 401
    assert "Invalid username or password" in page.text

    api = await client.post("/login", json={"username": user.username, "password": "nope"})
    assert api.status_code == 401
    assert api.json()["ok"] is False


@pytest.mark.asyncio
async def test_blocked_status_cannot_log_in(client, make_user):
    user, password = await make_user("staff", status="SUSPENDED")

    res = await client.post("/login", json={"username": user.username, "password": password})

    assert res.status_code == 403
    assert res.json()["kind"] == "account_blocked"
    assert "SUSPENDED" in res.json()["message"]


@pytest.mark.asyncio
async def test_active_student_cannot_log_in(client, make_user):
    user, password = await make_user("student", status="ACTIVE")

    res = await client.post("/login", data={"username": user.username, "password": password})

    assert res.status_code == 403
    assert "Access Denied due to status: ACTIVE" in res.text


@pytest.mark.asyncio
async def test_return_to_after_login(client, make_user, login_as):
    user, password = await make_user("lecturer")

    first = await client.get("/staff/courses/assigned?tab=pending")
    assert first.status_code == 303
    assert first.headers["location"] == "/login"

    res = await login_as(user, password)
    assert res.headers["location"] == "/staff/courses/assigned?tab=pending"


@pytest.mark.asyncio
async def test_logout_clears_session(client, make_user, login_as):
    user, password = await make_user("staff")
    await login_as(user, password)

    assert (await client.get("/api/auth/me", headers=JSON)).status_code == 200

    await client.get("/logout")
    assert (await client.get("/api/auth/me", headers=JSON)).status_code == 401


# ------------------------------------------------------------------
# SESSION REFRESH AGAINST THE DATABASE
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_status_change_takes_effect_mid_session(client, make_user, login_as):
    user, password = await make_user("staff")
    await login_as(user, password)
    assert (await client.get("/staff/dashboard")).status_code == 200

    async with AsyncSessionLocal() as session:
        row = await session.get(User, user.id)
        row.status = "SACKED"
        session.add(row)
        await session.commit()

    blocked = await client.get("/staff/dashboard", headers=JSON)
    assert blocked.status_code == 403
    assert "you have been sacked" in blocked.json()["message"]

    # Session was cleared along with the block
    assert (await client.get("/api/auth/me", headers=JSON)).status_code == 401


@pytest.mark.asyncio
async def test_profile_update_for_active_staff(client, make_user, login_as):
    user, password = await make_user("staff", name="Old Name")
    await login_as(user, password)

    res = await client.post("/api/account/profile", json={"name": "New Name"}, headers=JSON)

    assert res.status_code == 200
    assert res.json()["data"]["name"] == "New Name"
    async with AsyncSessionLocal() as session:
        assert (await get_user_by_id(session, user.id)).name == "New Name"


@pytest.mark.asyncio
async def test_leave_of_absence_profile_update_refused(client, make_user, login_as):
    user, password = await make_user("staff", status="LEAVE OF ABSENCE")
    await login_as(user, password)

    res = await client.post("/api/account/profile", json={"name": "New Name"}, headers=JSON)

    assert res.status_code == 403
    assert "sabbatical leave" in res.json()["message"]


# ------------------------------------------------------------------
# API TOKENS
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_token_login_and_me(client, make_user):
    user, password = await make_user("bursary")

    res = await client.post("/api/auth/token", json={"username": user.username, "password": password})
    assert res.status_code == 200
    token = res.json()["access_token"]
    assert res.json()["redirect_to"] == "/staff/dashboard"

    client.cookies.clear()
    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["role"] == "bursary"


@pytest.mark.asyncio
async def test_token_refused_for_bad_credentials(client, make_user):
    user, _ = await make_user("bursary")
    res = await client.post("/api/auth/token", json={"username": user.username, "password": "wrong"})
    assert res.status_code == 401
