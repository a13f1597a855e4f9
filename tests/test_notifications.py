import asyncio
import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from main import app
from barberpro.api.api_v1.endpoints import notifications as notifications_endpoint
from barberpro.schemas.notification import NotificationCreate
from barberpro.services.notification_service import NotificationBroker, broker, create_notification


@pytest.mark.asyncio
async def test_broker_delivers_until_unsubscribed():
    local_broker = NotificationBroker()
    received = []

    async def collect(event):
        received.append(event)

    unsubscribe = local_broker.subscribe(collect)
    await local_broker.publish({"message": "first"})
    unsubscribe()
    await local_broker.publish({"message": "second"})

    assert received == [{"message": "first"}]
    assert local_broker.subscriber_count == 0


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others():
    local_broker = NotificationBroker()
    received = []

    async def broken(event):
        raise RuntimeError("socket gone")

    async def collect(event):
        received.append(event)

    local_broker.subscribe(broken)
    local_broker.subscribe(collect)
    await local_broker.publish({"message": "hello"})

    assert received == [{"message": "hello"}]


@pytest.mark.asyncio
async def test_unsubscribe_twice_is_harmless():
    local_broker = NotificationBroker()

    async def collect(event):
        pass

    unsubscribe = local_broker.subscribe(collect)
    unsubscribe()
    unsubscribe()
    assert local_broker.subscriber_count == 0


@pytest.mark.asyncio
async def test_notification_endpoints(api_client, auth_headers, admin_user, client_user):
    first = await create_notification(NotificationCreate(message="New appointment: A", appointmentId="a1"))
    await create_notification(NotificationCreate(message="New appointment: B", appointmentId="a2"))

    forbidden = await api_client.get("/api/v1/notifications/", headers=auth_headers(client_user))
    assert forbidden.status_code == 403

    listing = await api_client.get("/api/v1/notifications/", headers=auth_headers(admin_user))
    assert listing.status_code == 200
    assert [n["message"] for n in listing.json()] == ["New appointment: B", "New appointment: A"]

    count = await api_client.get("/api/v1/notifications/count", headers=auth_headers(admin_user))
    assert count.json() == {"count": 2}

    read_one = await api_client.put(f"/api/v1/notifications/{first['id']}/read", headers=auth_headers(admin_user))
    assert read_one.status_code == 200
    assert read_one.json()["isRead"] is True

    read_all = await api_client.put("/api/v1/notifications/read-all", headers=auth_headers(admin_user))
    assert read_all.json() == {"count": 1}

    count = await api_client.get("/api/v1/notifications/count", headers=auth_headers(admin_user))
    assert count.json() == {"count": 0}


@pytest.mark.asyncio
async def test_marking_unknown_notification_returns_404(api_client, auth_headers, admin_user):
    response = await api_client.put("/api/v1/notifications/not-an-id/read", headers=auth_headers(admin_user))
    assert response.status_code == 404


def test_feed_rejects_non_admin(monkeypatch):
    async def client_for_token(token):
        return {"_id": "c1", "email": "joao@example.com", "role": "client"}

    monkeypatch.setattr(notifications_endpoint, "get_user_for_token", client_for_token)
    client = TestClient(app)

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/v1/notifications/ws?token=client-token"):
            pass


def test_feed_subscribes_admin(monkeypatch):
    async def admin_for_token(token):
        return {"_id": "a1", "email": "owner@barberpro.com", "role": "admin"}

    monkeypatch.setattr(notifications_endpoint, "get_user_for_token", admin_for_token)
    client = TestClient(app)

    with client.websocket_connect("/api/v1/notifications/ws?token=admin-token") as websocket:
        assert websocket.receive_json() == {"type": "subscribed"}
        assert broker.subscriber_count == 1

    assert broker.subscriber_count == 0


@pytest.mark.asyncio
async def test_background_publish_does_not_wait_for_slow_subscribers():
    local_broker = NotificationBroker()
    release = asyncio.Event()
    received = []

    async def slow(event):
        await release.wait()
        received.append(event)

    local_broker.subscribe(slow)
    local_broker.publish_nowait({"message": "hello"})
    assert received == []

    release.set()
    await local_broker.flush()
    assert received == [{"message": "hello"}]


@pytest.mark.asyncio
async def test_creating_a_notification_returns_before_delivery():
    release = asyncio.Event()
    received = []

    async def slow(event):
        await release.wait()
        received.append(event)

    broker.subscribe(slow)
    created = await create_notification(NotificationCreate(message="New appointment: C", appointmentId="a3"))
    assert received == []

    release.set()
    await broker.flush()
    assert received[0]["id"] == created["id"]
