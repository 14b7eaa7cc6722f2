"""Authentication middleware tests."""

from uuid import uuid4

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from src.api.core.messages import MessageCode
from tests.utils.assertions import assert_error_response, assert_success_response

BASE_URL = "http://test-pharmastock-api"


def _client(app, token: str | None = None, header: str | None = None) -> AsyncClient:
    headers = {}
    if header is not None:
        headers["Authorization"] = header
    elif token is not None:
        headers["Authorization"] = f"Bearer {token}"
    return AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL, headers=headers)


@pytest.mark.asyncio
async def test_missing_authorization_header(app, public_client):
    response = await public_client.get("/v1/notifications")

    assert_error_response(response, MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED)


@pytest.mark.asyncio
async def test_malformed_authorization_header(app):
    async with _client(app, header="Token abc") as client:
        response = await client.get("/v1/notifications")

    assert_error_response(response, MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED)


@pytest.mark.asyncio
async def test_invalid_signature(app, pharmacist_profile, jwt_token_factory):
    token = jwt_token_factory(str(pharmacist_profile.user_id), secret="wrong-secret")

    async with _client(app, token) as client:
        response = await client.get("/v1/notifications")

    assert_error_response(response, MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED)


@pytest.mark.asyncio
async def test_anonymous_token_is_forbidden(app, pharmacist_profile, jwt_token_factory):
    token = jwt_token_factory(str(pharmacist_profile.user_id), role="anon")

    async with _client(app, token) as client:
        response = await client.get("/v1/notifications")

    assert_error_response(
        response, MessageCode.INSUFFICIENT_PERMISSIONS, status.HTTP_403_FORBIDDEN
    )


@pytest.mark.asyncio
async def test_user_without_profile_is_forbidden(app, test_organization, jwt_token_factory):
    async with _client(app, jwt_token_factory(str(uuid4()))) as client:
        response = await client.get("/v1/roles/me")

    assert_error_response(response, MessageCode.PROFILE_NOT_FOUND, status.HTTP_403_FORBIDDEN)


@pytest.mark.asyncio
async def test_authenticated_request_gets_request_id(app, tech_client):
    response = await tech_client.get("/v1/roles/me", headers={"X-Request-ID": "req-123"})

    assert_success_response(response)
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_options_preflight_skips_authentication(app, public_client):
    response = await public_client.options(
        "/v1/notifications",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code != status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_payload_too_large(app, admin_client):
    response = await admin_client.post(
        "/v1/notifications/broadcast",
        content=b"x" * (2 * 1024 * 1024),
        headers={"Content-Type": "application/json"},
    )

    assert_error_response(
        response,
        MessageCode.PAYLOAD_TOO_LARGE,
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    )
