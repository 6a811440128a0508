from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import STRONG_PASSWORD, TEST_SECRET, RecordingNotifier
from facescan.app import create_app
from facescan.core.config import Settings


def _settings(tmp_path, **overrides) -> Settings:
    values = dict(
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
        jwt_secret=TEST_SECRET,
        password_hash_time_cost=1,
        password_hash_memory_cost=8192,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def client(tmp_path, notifier):
    app = create_app(_settings(tmp_path), notifier=notifier)
    with TestClient(app) as test_client:
        yield test_client


def _signup(client, notifier, email="a@x.com", username="alice") -> None:
    response = client.post("/auth/register", json={"Email": email, "UserName": username, "Password": STRONG_PASSWORD})
    assert response.status_code == 201
    response = client.get("/auth/verify-email", params={"token": notifier.last_verification_token})
    assert response.status_code == 200


def _bearer(client, username="alice") -> dict:
    response = client.post("/auth/login", json={"LoginUserName": username, "LoginPassword": STRONG_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_register_verify_login_flow(client, notifier):
    response = client.post("/auth/register", json={"Email": "a@x.com", "UserName": "alice", "Password": STRONG_PASSWORD})
    assert response.status_code == 201
    assert response.json() == {
        "message": "User registered successfully. Please check your email to verify your account."
    }

    response = client.post("/auth/login", json={"LoginUserName": "alice", "LoginPassword": STRONG_PASSWORD})
    assert response.status_code == 401
    assert response.json()["message"].startswith("Please verify your email first")

    assert client.get("/auth/verify-email", params={"token": "f" * 64}).status_code == 400
    response = client.get("/auth/verify-email", params={"token": notifier.last_verification_token})
    assert response.status_code == 200
    assert response.json() == {"message": "Email verified successfully"}

    response = client.post("/auth/login", json={"LoginUserName": "alice", "LoginPassword": STRONG_PASSWORD})
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["user"]["userName"] == "alice"
    assert body["user"]["email"] == "a@x.com"
    assert "passwordHash" not in body["user"]
    assert body["token"]

    response = client.post("/auth/login", json={"LoginUserName": "alice", "LoginPassword": "Wr0ng!Passw"})
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials"}


def test_camel_case_field_names_are_accepted(client, notifier):
    response = client.post("/auth/register", json={"email": "a@x.com", "userName": "alice", "password": STRONG_PASSWORD})
    assert response.status_code == 201
    client.get("/auth/verify-email", params={"token": notifier.last_verification_token})
    response = client.post("/auth/login", json={"loginUserName": "a@x.com", "loginPassword": STRONG_PASSWORD})
    assert response.status_code == 200


def test_register_validation_errors(client):
    response = client.post("/auth/register", json={"Email": "a@x.com"})
    assert response.status_code == 400
    assert response.json()["received"] == {"hasEmail": True, "hasUserName": False, "hasPassword": False}

    assert client.post("/auth/register").status_code == 400

    response = client.post("/auth/register", json={"Email": "bad", "UserName": "alice", "Password": STRONG_PASSWORD})
    assert response.json() == {"message": "Invalid email format"}

    response = client.post("/auth/register", json={"Email": "a@x.com", "UserName": "alice", "Password": "weak"})
    assert response.status_code == 400
    assert response.json()["requirements"]["minLength"] is False

    response = client.post("/auth/register", json={"Email": 5, "UserName": "alice", "Password": STRONG_PASSWORD})
    assert response.status_code == 400


def test_register_again_before_and_after_verification(client, notifier):
    payload = {"Email": "a@x.com", "UserName": "alice", "Password": STRONG_PASSWORD}
    assert client.post("/auth/register", json=payload).status_code == 201

    response = client.post("/auth/register", json=payload)
    assert response.status_code == 200
    assert response.json() == {"message": "Verification email resent. Please check your email."}

    client.get("/auth/verify-email", params={"token": notifier.last_verification_token})
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 409
    assert response.json() == {"message": "User already exists and is verified"}


def test_forgot_password_does_not_reveal_accounts(client, notifier):
    _signup(client, notifier)
    known = client.post("/auth/forgot-password", json={"email": "a@x.com"})
    unknown = client.post("/auth/forgot-password", json={"email": "ghost@x.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.content == unknown.content
    assert len(notifier.resets) == 1


def test_reset_password_flow(client, notifier):
    _signup(client, notifier)
    client.post("/auth/forgot-password", json={"email": "a@x.com"})
    token = notifier.last_reset_token

    response = client.post("/auth/reset-password", json={"token": token, "password": "N3w&Better#Pw"})
    assert response.status_code == 200
    assert response.json() == {"message": "Password reset successfully"}

    response = client.post("/auth/reset-password", json={"token": token, "password": "N3w&Better#Pw"})
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid or expired reset token"}

    response = client.post("/auth/login", json={"LoginUserName": "alice", "LoginPassword": "N3w&Better#Pw"})
    assert response.status_code == 200


def test_resend_verification_statuses(client, notifier):
    assert client.post("/auth/resend-verification", json={"email": "ghost@x.com"}).status_code == 404
    assert client.post("/auth/resend-verification", json={}).status_code == 400

    client.post("/auth/register", json={"Email": "a@x.com", "UserName": "alice", "Password": STRONG_PASSWORD})
    response = client.post("/auth/resend-verification", json={"email": "a@x.com"})
    assert response.status_code == 200
    assert len(notifier.verifications) == 2

    client.get("/auth/verify-email", params={"token": notifier.last_verification_token})
    response = client.post("/auth/resend-verification", json={"email": "a@x.com"})
    assert response.status_code == 400
    assert response.json() == {"message": "User is already verified"}


def test_api_keys_require_a_valid_session(client):
    response = client.get("/apikeys/listApiKeys")
    assert response.status_code == 401
    assert response.json() == {"message": "Access token required"}

    response = client.get("/apikeys/listApiKeys", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403
    assert response.json() == {"message": "Invalid or expired token"}


def test_api_key_lifecycle(client, notifier):
    _signup(client, notifier)
    headers = _bearer(client)

    response = client.post("/apikeys/createApiKey", json={"name": "ci", "permissions": ["read", "write"]}, headers=headers)
    assert response.status_code == 201
    created = response.json()["apiKey"]
    assert created["key"].startswith("hv_live_sk_")
    assert created["lastUsed"] == "Never"
    assert created["status"] == "active"

    listed = client.get("/apikeys/listApiKeys", headers=headers).json()["apiKeys"]
    assert [k["id"] for k in listed] == [created["id"]]

    rotated = client.post(f"/apikeys/{created['id']}/regenerate", headers=headers).json()["apiKey"]
    assert rotated["id"] == created["id"]
    assert rotated["key"] != created["key"]

    response = client.delete(f"/apikeys/{created['id']}", headers=headers)
    assert response.json() == {"message": "API key deleted successfully"}
    assert client.delete(f"/apikeys/{created['id']}", headers=headers).status_code == 404
    assert client.post(f"/apikeys/{created['id']}/regenerate", headers=headers).status_code == 404
    assert client.delete("/apikeys/not-a-number", headers=headers).status_code == 400


def test_api_keys_are_private_to_their_owner(client, notifier):
    _signup(client, notifier)
    _signup(client, notifier, email="b@x.com", username="bob")
    alice, bob = _bearer(client), _bearer(client, "bob")

    key_id = client.post("/apikeys/createApiKey", json={"name": "ci", "permissions": ["read"]}, headers=alice).json()[
        "apiKey"
    ]["id"]
    assert client.get("/apikeys/listApiKeys", headers=bob).json() == {"apiKeys": []}
    assert client.delete(f"/apikeys/{key_id}", headers=bob).status_code == 404


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"permissions": ["read"]}, "API key name is required"),
        ({"name": "ci", "permissions": []}, "At least one permission is required"),
        ({"name": "ci", "permissions": ["read", "admin"]}, "Invalid permissions: admin"),
    ],
)
def test_create_api_key_validation(client, notifier, payload, message):
    _signup(client, notifier)
    response = client.post("/apikeys/createApiKey", json=payload, headers=_bearer(client))
    assert response.status_code == 400
    assert response.json() == {"message": message}


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["message"] == "Server is running"


class _BrokenNotifier(RecordingNotifier):
    def send_password_reset(self, email: str, token: str) -> bool:
        raise RuntimeError("smtp relay refused connection")


def test_unexpected_errors_are_sanitized_in_production(tmp_path):
    notifier = _BrokenNotifier()
    app = create_app(_settings(tmp_path, app_env="prod"), notifier=notifier)
    with TestClient(app, raise_server_exceptions=False) as client:
        _signup(client, notifier)
        response = client.post("/auth/forgot-password", json={"email": "a@x.com"})
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_blank_pascal_case_field_falls_through_to_camel_case(client, notifier):
    response = client.post(
        "/auth/register",
        json={"Email": "", "email": "c@x.com", "UserName": "carol", "Password": STRONG_PASSWORD},
    )
    assert response.status_code == 201
    assert notifier.verifications[-1][0] == "c@x.com"


PROFILE_BODY = {
    "firstName": "Alice",
    "lastName": "Smith",
    "email": "alice@example.com",
    "dateOfBirth": "1990-05-01",
    "gender": "female",
    "height": 165,
    "weight": "60",
    "bloodType": "A+",
    "allergies": ["peanuts"],
    "emergencyContact": {"name": "Bob", "phone": "555-0100"},
}


def test_profile_requires_a_session(client):
    assert client.get("/profile/getProfile").status_code == 401
    assert client.post("/profile/createOrUpdateProfile", json=PROFILE_BODY).status_code == 401


def test_profile_create_update_and_fetch(client, notifier):
    _signup(client, notifier)
    headers = _bearer(client)

    body = client.get("/profile/getProfile", headers=headers).json()
    assert body["profile"] is None
    assert body["user"]["userName"] == "alice"
    assert body["user"]["isVerified"] is True

    response = client.post("/profile/createOrUpdateProfile", json=PROFILE_BODY, headers=headers)
    assert response.status_code == 200
    created = response.json()
    assert created["message"] == "Profile created successfully"
    assert created["profile"]["bmi"] == 22.0
    assert created["profile"]["bloodGroup"] == "A+"
    assert created["profile"]["dateOfBirth"] == "1990-05-01"

    response = client.post("/profile/createOrUpdateProfile", json={**PROFILE_BODY, "weight": 80}, headers=headers)
    assert response.json()["message"] == "Profile updated successfully"
    assert response.json()["profile"]["id"] == created["profile"]["id"]

    profile = client.get("/profile/getProfile", headers=headers).json()["profile"]
    assert profile["bmiCategory"] == "overweight"
    assert profile["emergencyContact"] == {"name": "Bob", "phone": "555-0100"}


def test_profile_validation_responses(client, notifier):
    _signup(client, notifier)
    headers = _bearer(client)

    response = client.post("/profile/createOrUpdateProfile", json={"firstName": "Alice"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Required profile fields are missing"
    assert "lastName" in response.json()["missing"]

    minor = {**PROFILE_BODY, "dateOfBirth": f"{datetime.now(timezone.utc).year - 10}-01-01"}
    response = client.post("/profile/createOrUpdateProfile", json=minor, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "User must be at least 18 years old"}
