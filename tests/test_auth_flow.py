async def test_login_and_me(client_fixture, sales_user):
    resp = await client_fixture.post("/api/auth/login", data={"username": "sales", "password": "sales123"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert "access_token" in data and "refresh_token" in data
    assert data["user"]["role"] == "Sales Manager"
    assert data["user"]["is_admin"] is False

    headers = {"Authorization": f"Bearer {data['access_token']}"}
    me = await client_fixture.get("/api/auth/me", headers=headers)
    assert me.status_code == 200, me.text
    assert me.json()["username"] == "sales"


async def test_login_rejects_wrong_password(client_fixture, sales_user):
    resp = await client_fixture.post("/api/auth/login", data={"username": "sales", "password": "wrong"})

    assert resp.status_code == 401


async def test_refresh_rotates_tokens(client_fixture, admin_user):
    login = await client_fixture.post("/api/auth/login", data={"username": "ADMIN", "password": "admin123"})
    assert login.status_code == 200, login.text
    assert login.json()["user"]["is_admin"] is True

    resp = await client_fixture.post("/api/auth/token/refresh", data={"refresh_token": login.json()["refresh_token"]})

    assert resp.status_code == 200, resp.text
    assert resp.json()["token_type"] == "bearer"


async def test_access_token_cannot_refresh(client_fixture, admin_user):
    login = await client_fixture.post("/api/auth/login", data={"username": "admin", "password": "admin123"})

    resp = await client_fixture.post("/api/auth/token/refresh", data={"refresh_token": login.json()["access_token"]})

    assert resp.status_code == 401


async def test_logout_all_revokes_existing_tokens(client_fixture, sales_headers):
    resp = await client_fixture.post("/api/auth/logout-all", headers=sales_headers)
    assert resp.status_code == 200

    me = await client_fixture.get("/api/auth/me", headers=sales_headers)
    assert me.status_code == 401


async def test_me_requires_token(client_fixture, db):
    resp = await client_fixture.get("/api/auth/me")

    assert resp.status_code == 401
