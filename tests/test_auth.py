from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from app.auth.credentials import (
	IdentifierCredentialVerifier,
	SignedTokenVerifier,
	get_credential_verifier,
	parse_authorization,
)
from app.auth.jwt import create_access_token, decode_token
from app.config import AuthScheme, get_settings
from app.errors import AuthenticationError
from app.models.enums import UserRoleEnum
from app.services import auth_service
from app.services.auth_service import AuthService, resolve_role


@pytest.mark.parametrize(
	("header", "expected"),
	[
		(None, None),
		("", None),
		("   ", None),
		("Bearer ", None),
		("Bearer", None),
		("bearer   ", None),
		("BEARER abc", "abc"),
		("Bearerabc", "Bearerabc"),
		("abc", "abc"),
		("Bearer abc", "abc"),
		("bearer  abc ", "abc"),
	],
)
def test_parse_authorization(header: str | None, expected: str | None) -> None:
	assert parse_authorization(header) == expected


def test_jwt_create_decode_roundtrip() -> None:
	subject = str(uuid4())
	token = create_access_token(subject, expires_minutes=5)
	payload = decode_token(token)
	assert payload["sub"] == subject
	assert payload["typ"] == "access"


def test_decode_invalid_token_raises_auth_error() -> None:
	with pytest.raises(AuthenticationError):
		decode_token("invalid.token.payload")


@pytest.mark.parametrize(
	("requested", "expected"),
	[
		("scientist", UserRoleEnum.scientist),
		(" Scientist ", UserRoleEnum.scientist),
		("farmer", UserRoleEnum.farmer),
		("admin", UserRoleEnum.farmer),
		(None, UserRoleEnum.farmer),
	],
)
def test_resolve_role_falls_back_to_farmer(requested: str | None, expected: UserRoleEnum) -> None:
	assert resolve_role(requested) == expected


@pytest.mark.asyncio
async def test_identifier_verifier_resolves_by_id_or_email(
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
) -> None:
	user = user_factory()
	fake_db_session.execute.return_value = result_factory(scalar=user)
	verifier = IdentifierCredentialVerifier()

	assert await verifier.resolve(fake_db_session, str(user.id)) is user
	assert await verifier.resolve(fake_db_session, "Farmer@Test.Local") is user
	assert verifier.issue_token(user) == str(user.id)


@pytest.mark.asyncio
async def test_identifier_verifier_rejects_unknown(fake_db_session: Any, result_factory: Any) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=None)

	with pytest.raises(AuthenticationError, match="Invalid user credential"):
		await IdentifierCredentialVerifier().resolve(fake_db_session, str(uuid4()))


@pytest.mark.asyncio
async def test_signed_token_verifier(
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
) -> None:
	user = user_factory()
	fake_db_session.execute.return_value = result_factory(scalar=user)
	verifier = SignedTokenVerifier()

	token = verifier.issue_token(user)
	assert await verifier.resolve(fake_db_session, token) is user
	with pytest.raises(AuthenticationError):
		await verifier.resolve(fake_db_session, str(user.id))


def test_verifier_follows_auth_scheme(monkeypatch: pytest.MonkeyPatch) -> None:
	assert isinstance(get_credential_verifier(), IdentifierCredentialVerifier)
	monkeypatch.setattr(get_settings(), "auth_scheme", AuthScheme.jwt)
	assert isinstance(get_credential_verifier(), SignedTokenVerifier)


# ── Gate ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_missing_credential_rejected(auth_client: AsyncClient) -> None:
	response = await auth_client.get("/api/farmer/crops")
	assert response.status_code == 401
	assert response.json() == {"error": "Authorization token is required"}


@pytest.mark.asyncio
async def test_unknown_credential_rejected(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=None)

	response = await auth_client.get("/api/farmer/crops", headers={"Authorization": str(uuid4())})

	assert response.status_code == 401
	assert response.json() == {"error": "Invalid user credential"}


@pytest.mark.asyncio
async def test_bearer_user_id_is_accepted(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
) -> None:
	user = user_factory()
	fake_db_session.execute.side_effect = [
		result_factory(scalar=user),
		result_factory(scalars=[]),
	]

	response = await auth_client.get(
		"/api/farmer/crops",
		headers={"Authorization": f"Bearer {user.id}"},
	)

	assert response.status_code == 200
	assert response.json() == []


_SOME_ID = "6f1c2a4e-8b0d-4c3e-9a51-2d7f0e9b1c44"


@pytest.mark.asyncio
@pytest.mark.parametrize(
	("method", "path", "body"),
	[
		("GET", "/api/scientist/farmers", None),
		("GET", f"/api/scientist/farmers/{_SOME_ID}", None),
		("GET", f"/api/scientist/farmers/{_SOME_ID}/crops", None),
		("GET", f"/api/scientist/farmers/{_SOME_ID}/sensor-data", None),
		("GET", "/api/scientist/recent-sensor-data", None),
		("GET", f"/api/scientist/crops/{_SOME_ID}", None),
		("GET", "/api/scientist/stats", None),
		("GET", "/api/scientist/stats/simple", None),
		("GET", "/api/scientist/stats/farmers/ranking", None),
		("GET", "/api/scientist/stats/biofertilizers", None),
		("GET", f"/api/scientist/stats/{_SOME_ID}", None),
		(
			"POST",
			"/api/scientist/recommendations",
			{"farmer_id": _SOME_ID, "recommendation": "Irrigate at dawn"},
		),
		("GET", f"/api/scientist/recommendations/{_SOME_ID}", None),
	],
)
async def test_farmer_cannot_call_scientist_routes(
	client: AsyncClient,
	fake_db_session: Any,
	method: str,
	path: str,
	body: dict[str, Any] | None,
) -> None:
	response = await client.request(method, path, json=body)
	assert response.status_code == 403
	assert response.json() == {"error": "Access denied: requires role scientist"}
	fake_db_session.execute.assert_not_awaited()


# ── Account routes ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_returns_identifier_token(
	auth_client: AsyncClient,
	user_factory: Any,
	monkeypatch: pytest.MonkeyPatch,
) -> None:
	user = user_factory(name="Ana", email="ana@test.local")
	captured: dict[str, Any] = {}

	async def fake_register(self: AuthService, payload: Any) -> Any:
		captured["role"] = payload.role
		return user

	monkeypatch.setattr(AuthService, "register", fake_register)

	response = await auth_client.post(
		"/api/auth/registro",
		json={"name": "Ana", "email": "ana@test.local", "password": "pw", "role": "overlord"},
	)

	assert response.status_code == 201
	body = response.json()
	assert body["token"] == str(user.id)
	assert body["user"]["email"] == "ana@test.local"
	assert "hashed_password" not in body["user"]
	assert captured["role"] == "overlord"


@pytest.mark.asyncio
async def test_register_duplicate_email(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=user_factory())

	response = await auth_client.post(
		"/api/auth/registro",
		json={"name": "Ana", "email": "farmer@test.local", "password": "pw"},
	)

	assert response.status_code == 400
	assert response.json() == {"error": "User already exists"}


@pytest.mark.asyncio
async def test_login_unknown_email(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=None)

	response = await auth_client.post(
		"/api/auth/login",
		json={"email": "nobody@test.local", "password": "pw"},
	)

	assert response.status_code == 400
	assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_login_wrong_password(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
	monkeypatch: pytest.MonkeyPatch,
) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=user_factory())
	monkeypatch.setattr(auth_service, "verify_password", lambda _plain, _hashed: False)

	response = await auth_client.post(
		"/api/auth/login",
		json={"email": "farmer@test.local", "password": "wrong"},
	)

	assert response.status_code == 400
	assert response.json() == {"error": "Incorrect password"}


@pytest.mark.asyncio
async def test_login_issues_signed_token_under_jwt_scheme(
	auth_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
	monkeypatch: pytest.MonkeyPatch,
) -> None:
	user = user_factory()
	fake_db_session.execute.return_value = result_factory(scalar=user)
	monkeypatch.setattr(auth_service, "verify_password", lambda _plain, _hashed: True)
	monkeypatch.setattr(get_settings(), "auth_scheme", AuthScheme.jwt)

	response = await auth_client.post(
		"/api/auth/login",
		json={"email": "farmer@test.local", "password": "pw"},
	)

	assert response.status_code == 200
	token = response.json()["token"]
	assert UUID(decode_token(token)["sub"]) == user.id


@pytest.mark.asyncio
async def test_farmer_cannot_read_other_profile(client: AsyncClient) -> None:
	response = await client.get(f"/api/auth/user/{uuid4()}")
	assert response.status_code == 403


@pytest.mark.asyncio
async def test_scientist_reads_farmer_profile(
	scientist_client: AsyncClient,
	fake_db_session: Any,
	result_factory: Any,
	user_factory: Any,
) -> None:
	farmer = user_factory()
	fake_db_session.execute.return_value = result_factory(scalar=farmer)

	response = await scientist_client.get(f"/api/auth/user/{farmer.id}")

	assert response.status_code == 200
	assert response.json()["id"] == str(farmer.id)


@pytest.mark.asyncio
async def test_owner_updates_profile(
	client: AsyncClient,
	farmer_user: Any,
	fake_db_session: Any,
	result_factory: Any,
) -> None:
	fake_db_session.execute.return_value = result_factory(scalar=farmer_user)

	response = await client.put(
		f"/api/auth/user/{farmer_user.id}",
		json={"location": "South Field"},
	)

	assert response.status_code == 200
	assert response.json()["user"]["location"] == "South Field"
	assert farmer_user.name == "Ana Farmer"


@pytest.mark.asyncio
async def test_scientist_cannot_edit_other_profile(scientist_client: AsyncClient) -> None:
	response = await scientist_client.put(f"/api/auth/user/{uuid4()}", json={"name": "x"})
	assert response.status_code == 403
