import pytest
from datetime import datetime, timedelta
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from barberpro.api.api_v1.endpoints import appointments as appointments_endpoint
from barberpro.core.config import local_today
from barberpro.db.mongodb import db
from barberpro.schemas.appointment import AppointmentCreate
from barberpro.services import appointment_service


def _booking_payload(service, barber, booking_date, time_="10:00"):
    return {
        "serviceId": service["id"],
        "barberId": barber["id"],
        "appointmentDate": booking_date.isoformat(),
        "appointmentTime": time_,
    }


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send_confirmation_email(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(appointments_endpoint, "send_confirmation_email", fake_send_confirmation_email)
    return sent


@pytest.mark.asyncio
async def test_client_books_appointment(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    response = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date),
        headers=auth_headers(client_user),
    )

    assert response.status_code == 201
    appointment = response.json()
    assert appointment["status"] == "scheduled"
    assert appointment["barber"] == {"name": "Carlos"}
    assert appointment["service"] == {"name": "Haircut", "price": 45.0}
    assert appointment["clientEmail"] == "joao@example.com"

    assert len(sent_emails) == 1
    assert sent_emails[0]["client_email"] == "joao@example.com"
    assert sent_emails[0]["appointment_time"] == "10:00"


@pytest.mark.asyncio
async def test_double_booking_returns_conflict(api_client, auth_headers, client_user, second_client, service, barber, booking_date, sent_emails):
    payload = _booking_payload(service, barber, booking_date, "16:00")
    first = await api_client.post("/api/v1/appointments/", json=payload, headers=auth_headers(client_user))
    second = await api_client.post("/api/v1/appointments/", json=payload, headers=auth_headers(second_client))

    assert first.status_code == 201
    assert second.status_code == 409
    assert await db.db.appointments.count_documents({}) == 1


@pytest.mark.asyncio
async def test_booking_succeeds_without_email_configured(api_client, auth_headers, client_user, service, barber, booking_date):
    # No RESEND_API_KEY in tests: the real confirmation sender fails quietly
    response = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date, "11:30"),
        headers=auth_headers(client_user),
    )

    assert response.status_code == 201
    stored = await db.db.appointments.find_one({"appointmentTime": "11:30"})
    assert stored is not None


@pytest.mark.asyncio
async def test_booking_a_past_date_is_rejected(api_client, auth_headers, client_user, service, barber, sent_emails):
    yesterday = local_today() - timedelta(days=1)
    response = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, yesterday),
        headers=auth_headers(client_user),
    )

    assert response.status_code == 422
    assert await db.db.appointments.count_documents({}) == 0


@pytest.mark.asyncio
async def test_booking_outside_working_hours_is_rejected(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    response = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date, "18:00"),
        headers=auth_headers(client_user),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_booking_requires_login(api_client, service, barber, booking_date):
    response = await api_client.post("/api/v1/appointments/", json=_booking_payload(service, barber, booking_date))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_client_dashboard_splits_upcoming_and_history(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date),
        headers=auth_headers(client_user),
    )
    # Past appointment inserted directly; bookings cannot target past dates
    await db.db.appointments.insert_one({
        "barberId": barber["id"], "serviceId": service["id"], "clientId": client_user["id"],
        "appointmentDate": (local_today() - timedelta(days=3)).isoformat(), "appointmentTime": "09:00",
        "status": "scheduled", "clientName": "João Silva", "clientEmail": "joao@example.com",
        "clientPhone": "", "reminderEmailSent": False, "createdAt": datetime.utcnow(),
    })

    response = await api_client.get("/api/v1/appointments/me", headers=auth_headers(client_user))

    assert response.status_code == 200
    body = response.json()
    assert [a["appointmentDate"] for a in body["upcoming"]] == [booking_date.isoformat()]
    assert len(body["history"]) == 1
    assert body["history"][0]["status"] == "completed"


@pytest.mark.asyncio
async def test_deleted_barber_shows_as_null(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    created = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date),
        headers=auth_headers(client_user),
    )
    await db.db.barbers.delete_one({"_id": barber["_id"]})

    response = await api_client.get(f"/api/v1/appointments/{created.json()['id']}", headers=auth_headers(client_user))

    assert response.status_code == 200
    assert response.json()["barber"] is None
    assert response.json()["service"]["name"] == "Haircut"


@pytest.mark.asyncio
async def test_other_clients_cannot_read_appointment(api_client, auth_headers, client_user, second_client, admin_user, service, barber, booking_date, sent_emails):
    created = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date),
        headers=auth_headers(client_user),
    )
    appointment_id = created.json()["id"]

    forbidden = await api_client.get(f"/api/v1/appointments/{appointment_id}", headers=auth_headers(second_client))
    allowed = await api_client.get(f"/api/v1/appointments/{appointment_id}", headers=auth_headers(admin_user))

    assert forbidden.status_code == 403
    assert allowed.status_code == 200


@pytest.mark.asyncio
async def test_admin_cancel_frees_the_slot(api_client, auth_headers, client_user, admin_user, service, barber, booking_date, sent_emails):
    created = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date, "13:00"),
        headers=auth_headers(client_user),
    )
    appointment_id = created.json()["id"]

    client_attempt = await api_client.patch(
        f"/api/v1/appointments/{appointment_id}/status",
        json={"status": "cancelled"},
        headers=auth_headers(client_user),
    )
    assert client_attempt.status_code == 403

    cancelled = await api_client.patch(
        f"/api/v1/appointments/{appointment_id}/status",
        json={"status": "cancelled"},
        headers=auth_headers(admin_user),
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    availability = await api_client.get(
        f"/api/v1/availability/{barber['id']}", params={"date": booking_date.isoformat()}
    )
    flags = {s["time"]: s["available"] for s in availability.json()["slots"]}
    assert flags["13:00"] is True


@pytest.mark.asyncio
async def test_availability_endpoint_flags_booked_slots(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    for time_ in ("10:00", "10:30"):
        await api_client.post(
            "/api/v1/appointments/",
            json=_booking_payload(service, barber, booking_date, time_),
            headers=auth_headers(client_user),
        )

    response = await api_client.get(f"/api/v1/availability/{barber['id']}", params={"date": booking_date.isoformat()})

    assert response.status_code == 200
    body = response.json()
    assert body["disabled"] is False
    assert len(body["slots"]) == 18
    unavailable = [s["time"] for s in body["slots"] if not s["available"]]
    assert unavailable == ["10:00", "10:30"]


@pytest.mark.asyncio
async def test_availability_for_past_date_is_disabled(api_client, barber):
    yesterday = local_today() - timedelta(days=1)
    response = await api_client.get(f"/api/v1/availability/{barber['id']}", params={"date": yesterday.isoformat()})

    assert response.status_code == 200
    assert response.json()["disabled"] is True
    assert response.json()["disabledReason"] == "date_in_past"


@pytest.mark.asyncio
async def test_admin_lists_all_appointments(api_client, auth_headers, client_user, admin_user, service, barber, booking_date, sent_emails):
    await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date),
        headers=auth_headers(client_user),
    )

    as_client = await api_client.get("/api/v1/appointments/", headers=auth_headers(client_user))
    as_admin = await api_client.get("/api/v1/appointments/", headers=auth_headers(admin_user))

    assert as_client.status_code == 403
    assert as_admin.status_code == 200
    assert len(as_admin.json()["upcoming"]) == 1


@pytest.mark.asyncio
async def test_reinstating_a_rebooked_slot_returns_conflict(api_client, auth_headers, client_user, second_client, admin_user, service, barber, booking_date, sent_emails):
    payload = _booking_payload(service, barber, booking_date, "10:00")
    first = await api_client.post("/api/v1/appointments/", json=payload, headers=auth_headers(client_user))
    first_id = first.json()["id"]
    await api_client.patch(
        f"/api/v1/appointments/{first_id}/status", json={"status": "cancelled"}, headers=auth_headers(admin_user)
    )
    rebooked = await api_client.post("/api/v1/appointments/", json=payload, headers=auth_headers(second_client))
    assert rebooked.status_code == 201

    reinstated = await api_client.patch(
        f"/api/v1/appointments/{first_id}/status", json={"status": "scheduled"}, headers=auth_headers(admin_user)
    )

    assert reinstated.status_code == 409
    live = await db.db.appointments.count_documents({"appointmentTime": "10:00", "status": {"$ne": "cancelled"}})
    assert live == 1


@pytest.mark.asyncio
async def test_status_change_rejected_by_unique_index_returns_conflict(monkeypatch, api_client, auth_headers, client_user, admin_user, service, barber, booking_date, sent_emails):
    created = await api_client.post(
        "/api/v1/appointments/", json=_booking_payload(service, barber, booking_date), headers=auth_headers(client_user)
    )

    async def rejected_update(appointment_id, status):
        raise DuplicateKeyError("E11000 duplicate key error collection: appointments index: unique_live_slot")

    monkeypatch.setattr(appointment_service, "update_appointment_status", rejected_update)

    response = await api_client.patch(
        f"/api/v1/appointments/{created.json()['id']}/status", json={"status": "completed"}, headers=auth_headers(admin_user)
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_admin_status_filter_uses_displayed_status(api_client, auth_headers, client_user, admin_user, service, barber, booking_date, sent_emails):
    await api_client.post(
        "/api/v1/appointments/", json=_booking_payload(service, barber, booking_date), headers=auth_headers(client_user)
    )
    past = (local_today() - timedelta(days=3)).isoformat()
    await db.db.appointments.insert_one({
        "barberId": barber["id"], "serviceId": service["id"], "clientId": client_user["id"],
        "appointmentDate": past, "appointmentTime": "09:00",
        "status": "scheduled", "clientName": "João Silva", "clientEmail": "joao@example.com",
        "clientPhone": "", "reminderEmailSent": False, "createdAt": datetime.utcnow(),
    })

    scheduled = await api_client.get("/api/v1/appointments/", params={"status": "scheduled"}, headers=auth_headers(admin_user))
    completed = await api_client.get("/api/v1/appointments/", params={"status": "completed"}, headers=auth_headers(admin_user))

    scheduled_rows = scheduled.json()["upcoming"] + scheduled.json()["history"]
    completed_rows = completed.json()["upcoming"] + completed.json()["history"]
    assert [(a["appointmentDate"], a["status"]) for a in scheduled_rows] == [(booking_date.isoformat(), "scheduled")]
    assert [(a["appointmentDate"], a["status"]) for a in completed_rows] == [(past, "completed")]


@pytest.mark.asyncio
async def test_booking_time_with_seconds_is_rejected(api_client, auth_headers, client_user, service, barber, booking_date, sent_emails):
    response = await api_client.post(
        "/api/v1/appointments/",
        json=_booking_payload(service, barber, booking_date, "10:00:45"),
        headers=auth_headers(client_user),
    )

    assert response.status_code == 422
    assert await db.db.appointments.count_documents({}) == 0


def test_appointment_time_accepts_whole_minutes_only():
    base = {"serviceId": "s1", "barberId": "b1", "appointmentDate": "2030-01-07"}

    assert AppointmentCreate(**base, appointmentTime="10:00:00").appointmentTime == "10:00"
    with pytest.raises(ValidationError):
        AppointmentCreate(**base, appointmentTime="10:00:45")
    with pytest.raises(ValidationError):
        AppointmentCreate(**base, appointmentTime="ten")
