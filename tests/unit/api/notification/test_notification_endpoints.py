"""Notification inbox, messaging and realtime endpoint tests."""

from uuid import uuid4

import pytest
from fastapi import status
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from src.api.core.constants import WS_POLICY_VIOLATION
from src.api.core.messages import MessageCode
from tests.utils.assertions import (
    assert_error_response,
    assert_not_found_error,
    assert_permission_error,
    assert_success_response,
    assert_validation_error,
)


@pytest.mark.asyncio
async def test_direct_message_reaches_recipient_inbox(
    app, manager_client, pharmacist_client, pharmacist_profile, manager_profile, publisher
):
    response = await manager_client.post(
        "/v1/notifications/direct",
        json={
            "recipient_id": str(pharmacist_profile.user_id),
            "title": "Delivery",
            "message": "The wholesaler order arrived",
        },
    )

    sent = assert_success_response(response, MessageCode.NOTIFICATION_SENT)
    assert sent["type"] == "direct_message"
    assert sent["sender_id"] == str(manager_profile.user_id)

    inbox = assert_success_response(await pharmacist_client.get("/v1/notifications"))
    assert [n["id"] for n in inbox] == [sent["id"]]
    count = assert_success_response(
        await pharmacist_client.get("/v1/notifications/unread-count")
    )
    assert count == {"count": 1}
    assert publisher.events == [("INSERT", sent["id"], str(pharmacist_profile.user_id))]


@pytest.mark.asyncio
async def test_direct_message_requires_permission(app, tech_client, admin_profile):
    response = await tech_client.post(
        "/v1/notifications/direct",
        json={"recipient_id": str(admin_profile.user_id), "title": "Hi", "message": "Hello"},
    )

    assert_permission_error(response)


@pytest.mark.asyncio
async def test_direct_message_to_unknown_recipient(app, admin_client):
    response = await admin_client.post(
        "/v1/notifications/direct",
        json={"recipient_id": str(uuid4()), "title": "Hi", "message": "Hello"},
    )

    assert_not_found_error(response, MessageCode.STAFF_MEMBER_NOT_FOUND)


@pytest.mark.asyncio
async def test_direct_message_requires_recipient(app, admin_client):
    response = await admin_client.post(
        "/v1/notifications/direct", json={"title": "Hi", "message": "Hello"}
    )

    assert_validation_error(response)


@pytest.mark.asyncio
async def test_broadcast_to_all_staff(
    app, admin_client, manager_profile, pharmacist_profile, tech_profile, publisher
):
    response = await admin_client.post(
        "/v1/notifications/broadcast",
        json={"title": "Stock count", "message": "Full stock count on Sunday"},
    )

    data = assert_success_response(response, MessageCode.BROADCAST_SENT)
    assert data == {"count": 3}
    assert response.json()["message"] == "Message sent to 3 staff members"
    assert len(publisher.events) == 3


@pytest.mark.asyncio
async def test_broadcast_to_explicit_recipients(
    app, manager_client, pharmacist_client, pharmacist_profile, tech_client
):
    response = await manager_client.post(
        "/v1/notifications/broadcast",
        json={
            "title": "Training",
            "message": "Controlled substances refresher",
            "recipients": "explicit",
            "recipient_ids": [str(pharmacist_profile.user_id)],
        },
    )

    assert assert_success_response(response, MessageCode.BROADCAST_SENT) == {"count": 1}
    assert response.json()["message"] == "Message sent to 1 staff member"
    assert len(assert_success_response(await pharmacist_client.get("/v1/notifications"))) == 1
    assert assert_success_response(await tech_client.get("/v1/notifications")) == []


@pytest.mark.asyncio
async def test_broadcast_with_no_explicit_recipients(app, admin_client, tech_profile):
    response = await admin_client.post(
        "/v1/notifications/broadcast",
        json={
            "title": "Training",
            "message": "Refresher",
            "recipients": "explicit",
            "recipient_ids": [],
        },
    )

    assert_error_response(response, MessageCode.NO_RECIPIENTS, status.HTTP_400_BAD_REQUEST)


@pytest.mark.asyncio
async def test_broadcast_requires_permission(app, pharmacist_client):
    response = await pharmacist_client.post(
        "/v1/notifications/broadcast", json={"title": "Hi", "message": "Hello"}
    )

    assert_permission_error(response)


@pytest.mark.asyncio
async def test_mark_read_and_read_all(
    app, admin_client, pharmacist_client, pharmacist_profile, tech_profile
):
    await admin_client.post(
        "/v1/notifications/broadcast", json={"title": "One", "message": "First"}
    )
    await admin_client.post(
        "/v1/notifications/broadcast", json={"title": "Two", "message": "Second"}
    )
    inbox = assert_success_response(await pharmacist_client.get("/v1/notifications"))
    assert [n["title"] for n in inbox] == ["Two", "One"]

    read = assert_success_response(
        await pharmacist_client.post(f"/v1/notifications/{inbox[0]['id']}/read"),
        MessageCode.NOTIFICATION_READ,
    )
    assert read["is_read"] is True

    unread = assert_success_response(
        await pharmacist_client.get("/v1/notifications", params={"unread_only": "true"})
    )
    assert [n["title"] for n in unread] == ["One"]

    updated = assert_success_response(
        await pharmacist_client.post("/v1/notifications/read-all"), MessageCode.UPDATED
    )
    assert updated == {"count": 1}
    count = assert_success_response(
        await pharmacist_client.get("/v1/notifications/unread-count")
    )
    assert count == {"count": 0}


@pytest.mark.asyncio
async def test_cannot_read_someone_elses_notification(
    app, admin_client, pharmacist_client, tech_client, tech_profile
):
    await admin_client.post(
        "/v1/notifications/direct",
        json={"recipient_id": str(tech_profile.user_id), "title": "Hi", "message": "Hello"},
    )
    inbox = assert_success_response(await tech_client.get("/v1/notifications"))

    response = await pharmacist_client.post(f"/v1/notifications/{inbox[0]['id']}/read")

    assert_not_found_error(response, MessageCode.NOTIFICATION_NOT_FOUND)


@pytest.mark.asyncio
async def test_accept_role_change_on_plain_message_is_rejected(
    app, admin_client, tech_client, tech_profile
):
    sent = assert_success_response(
        await admin_client.post(
            "/v1/notifications/direct",
            json={"recipient_id": str(tech_profile.user_id), "title": "Hi", "message": "Hello"},
        ),
        MessageCode.NOTIFICATION_SENT,
    )

    response = await tech_client.post(
        f"/v1/notifications/{sent['id']}/accept-role-change"
    )

    assert_error_response(
        response, MessageCode.ROLE_CHANGE_NOT_ACCEPTABLE, status.HTTP_400_BAD_REQUEST
    )


@pytest.mark.asyncio
async def test_realtime_feed_rejects_missing_token(app):
    client = TestClient(app)

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/v1/notifications/ws"):
            pass

    assert exc_info.value.code == WS_POLICY_VIOLATION


@pytest.mark.asyncio
async def test_realtime_feed_rejects_invalid_token(app):
    client = TestClient(app)

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/v1/notifications/ws?token=not-a-jwt"):
            pass

    assert exc_info.value.code == WS_POLICY_VIOLATION
