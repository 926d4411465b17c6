from jose import jwt
from models.refresh_tokens import RefreshToken
from conftest import TEST_PASSWORD


async def test_admin_routes_require_admin_role(client, user_headers):
    response = await client.get("/setup/roles", headers=user_headers)

    assert response.status_code == 403


async def test_admin_routes_require_authentication(client):
    response = await client.get("/setup/users")

    assert response.status_code == 401


async def test_create_and_list_roles(client, admin_headers):
    response = await client.post("/setup/roles", params={"name": "Editor"}, headers=admin_headers)
    assert response.status_code == 200

    response = await client.get("/setup/roles", headers=admin_headers)
    assert sorted(role["name"] for role in response.json()) == ["Admin", "Editor"]


async def test_create_existing_role(client, admin_headers):
    response = await client.post("/setup/roles", params={"name": "Admin"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Role already exists"


async def test_list_users(client, admin_headers, registered_user):
    response = await client.get("/setup/users", headers=admin_headers)

    emails = [user["email"] for user in response.json()]
    assert registered_user.email in emails
    assert all("hashed_password" not in user for user in response.json())


async def test_role_assignment_flows_into_token(client, admin_headers, registered_user, jwt_config):
    await client.post("/setup/roles", params={"name": "Editor"}, headers=admin_headers)
    response = await client.post("/setup/users/add-to-role",
                                 params={"email": registered_user.email, "role_name": "Editor"},
                                 headers=admin_headers)
    assert response.status_code == 200

    roles = await client.get("/setup/users/roles", params={"email": registered_user.email}, headers=admin_headers)
    assert roles.json() == ["Editor"]

    login = await client.post("/auth/login", json={"email": registered_user.email, "password": TEST_PASSWORD})
    payload = jwt.decode(login.json()["token"], jwt_config.secret, algorithms=["HS256"])
    assert payload["roles"] == ["Editor"]

    response = await client.post("/setup/users/remove-from-role",
                                 params={"email": registered_user.email, "role_name": "Editor"},
                                 headers=admin_headers)
    assert response.status_code == 200

    roles = await client.get("/setup/users/roles", params={"email": registered_user.email}, headers=admin_headers)
    assert roles.json() == []


async def test_add_unknown_user_to_role(client, admin_headers):
    response = await client.post("/setup/users/add-to-role",
                                 params={"email": "ghost@example.com", "role_name": "Admin"},
                                 headers=admin_headers)

    assert response.status_code == 400
    assert "does not exist" in response.json()["detail"]


async def test_revoke_user_tokens(client, admin_headers, registered_user, session):
    body = {"email": registered_user.email, "password": TEST_PASSWORD}
    pair = (await client.post("/auth/login", json=body)).json()
    await client.post("/auth/login", json=body)

    response = await client.post("/setup/users/revoke-tokens",
                                 params={"email": registered_user.email},
                                 headers=admin_headers)
    assert response.status_code == 200

    records = session.query(RefreshToken).filter(RefreshToken.user_id == registered_user.id).all()
    assert len(records) == 2
    assert all(record.is_revoked for record in records)

    refreshed = await client.post("/auth/refresh-token",
                                  json={"token": pair["token"], "refreshToken": pair["refreshToken"]})
    assert refreshed.status_code == 401
    assert refreshed.json()["errors"] == ["Token has been revoked"]
