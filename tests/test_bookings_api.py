"""HTTP tests for booking endpoints."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import select

from app.models.booking import Booking
from app.utils.booking_reference import next_booking_reference

API = "/api/v1/bookings"
YEAR = datetime.now(UTC).year


async def test_create_booking(client, user, auth_headers, booking_details, png_data_url):
    response = await client.post(
        API,
        json={**booking_details, "payment_screenshot": png_data_url},
        headers=auth_headers(user),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["booking_reference"] == f"BOOK-{YEAR}-00001"
    assert body["message"] == "Payment stored successfully"
    assert body["id"]


async def test_create_booking_requires_login(client, booking_details):
    response = await client.post(API, json=booking_details)

    assert response.status_code == 401


async def test_create_booking_rejects_bad_input(client, user, auth_headers, booking_details):
    missing = {k: v for k, v in booking_details.items() if k != "traveler_name"}
    backwards = {**booking_details, "start_date": "2025-06-04", "end_date": "2025-06-01"}
    nobody = {**booking_details, "people": 0}

    for payload in (missing, backwards, nobody):
        response = await client.post(API, json=payload, headers=auth_headers(user))
        assert response.status_code == 400, payload
        assert response.json()["detail"]


async def test_create_booking_rejects_bad_evidence(client, user, auth_headers, booking_details):
    response = await client.post(
        API,
        json={**booking_details, "payment_screenshot": "data:text/plain;base64,aGVsbG8="},
        headers=auth_headers(user),
    )

    assert response.status_code == 400


async def test_reference_collision_is_retried(
    client, db, user, auth_headers, booking_details, make_booking, monkeypatch
):
    await make_booking(user, f"BOOK-{YEAR}-00001")
    calls = []

    async def flaky_reference(session, year=None):
        calls.append(year)
        if len(calls) == 1:
            return f"BOOK-{YEAR}-00001"
        return await next_booking_reference(session, year)

    monkeypatch.setattr("app.services.booking_service.next_booking_reference", flaky_reference)

    response = await client.post(API, json=booking_details, headers=auth_headers(user))

    assert response.status_code == 201
    assert response.json()["booking_reference"] == f"BOOK-{YEAR}-00002"
    assert len(calls) == 2


async def test_reference_collision_gives_up(
    client, db, user, auth_headers, booking_details, make_booking, monkeypatch
):
    await make_booking(user, f"BOOK-{YEAR}-00001")

    async def stuck_reference(session, year=None):
        return f"BOOK-{YEAR}-00001"

    monkeypatch.setattr("app.services.booking_service.next_booking_reference", stuck_reference)

    response = await client.post(API, json=booking_details, headers=auth_headers(user))

    assert response.status_code == 409
    assert response.json()["detail"] == "Booking ID conflict. Please try again."
    rows = (await db.execute(select(Booking))).scalars().all()
    assert len(rows) == 1


async def test_list_bookings_per_role(client, user, other_user, admin, auth_headers, make_booking):
    await make_booking(user, "BOOK-2025-00001")
    await make_booking(other_user, "BOOK-2025-00002")

    mine = await client.get(API, headers=auth_headers(user))
    everything = await client.get(API, headers=auth_headers(admin))

    assert [b["booking_reference"] for b in mine.json()] == ["BOOK-2025-00001"]
    assert {b["booking_reference"] for b in everything.json()} == {"BOOK-2025-00001", "BOOK-2025-00002"}


async def test_my_bookings_status_view(client, user, auth_headers, make_booking):
    await make_booking(user, "BOOK-2025-00001", verification_status="rejected", rejection_reason="Wrong amount")

    response = await client.get(f"{API}/mine", headers=auth_headers(user))

    assert response.status_code == 200
    [booking] = response.json()
    assert booking["verification_status"] == "rejected"
    assert booking["rejection_reason"] == "Wrong amount"
    assert "payment_screenshot" not in booking


async def test_get_booking_access(client, user, other_user, admin, auth_headers, make_booking):
    booking = await make_booking(user, "BOOK-2025-00001")

    assert (await client.get(f"{API}/{booking.id}", headers=auth_headers(user))).status_code == 200
    assert (await client.get(f"{API}/{booking.id}", headers=auth_headers(admin))).status_code == 200
    assert (await client.get(f"{API}/{booking.id}", headers=auth_headers(other_user))).status_code == 403
    assert (await client.get(f"{API}/{uuid4()}", headers=auth_headers(admin))).status_code == 404


async def test_admin_verifies_booking(client, user, admin, auth_headers, make_booking, png_data_url):
    booking = await make_booking(user, "BOOK-2025-00001", payment_screenshot=png_data_url)

    response = await client.put(
        f"{API}/{booking.id}/verify",
        json={"status": "verified"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["verification_status"] == "verified"
    assert body["booking"]["verified_by"] == str(admin.id)

    again = await client.put(
        f"{API}/{booking.id}/verify",
        json={"status": "rejected", "rejection_reason": "Too late"},
        headers=auth_headers(admin),
    )
    assert again.status_code == 400


async def test_verify_rejects_other_statuses(client, user, admin, auth_headers, make_booking):
    booking = await make_booking(user, "BOOK-2025-00001")

    for status in ("refunded", "pending", "approved"):
        response = await client.put(
            f"{API}/{booking.id}/verify",
            json={"status": status},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400


async def test_verify_is_admin_only(client, user, auth_headers, make_booking, png_data_url):
    booking = await make_booking(user, "BOOK-2025-00001", payment_screenshot=png_data_url)

    response = await client.put(
        f"{API}/{booking.id}/verify",
        json={"status": "verified"},
        headers=auth_headers(user),
    )

    assert response.status_code == 403


async def test_owner_requests_refund(client, db, user, auth_headers, make_booking):
    booking = await make_booking(user, "BOOK-2025-00001")

    response = await client.put(
        f"{API}/{booking.id}/refund",
        json={"reason": "Changed plans"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["booking"]["verification_status"] == "refunded"
    await db.refresh(booking)
    assert booking.refund_reason == "Changed plans"

    second = await client.put(f"{API}/{booking.id}/refund", headers=auth_headers(user))
    assert second.status_code == 400


async def test_refund_without_body_uses_default_reason(client, user, auth_headers, make_booking):
    booking = await make_booking(user, "BOOK-2025-00001")

    response = await client.put(f"{API}/{booking.id}/refund", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["booking"]["refund_reason"] == "User requested refund"


async def test_upload_evidence(client, user, auth_headers, make_booking, png_data_url):
    booking = await make_booking(user, "BOOK-2025-00001", verification_status="suspended")

    response = await client.put(
        f"{API}/{booking.id}/evidence",
        json={"payment_screenshot": png_data_url},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["booking"]["has_evidence"] is True


async def test_delete_booking(client, user, admin, auth_headers, make_booking):
    pending = await make_booking(user, "BOOK-2025-00001")
    refunded = await make_booking(user, "BOOK-2025-00002", verification_status="refunded")

    deleted = await client.delete(f"{API}/{pending.id}", headers=auth_headers(user))
    kept = await client.delete(f"{API}/{refunded.id}", headers=auth_headers(admin))

    assert deleted.status_code == 200
    assert "BOOK-2025-00001" in deleted.json()["message"]
    assert kept.status_code == 400
    assert (await client.get(f"{API}/{pending.id}", headers=auth_headers(admin))).status_code == 404


async def test_suspended_user_is_locked_out(client, create_user, auth_headers):
    suspended = await create_user("blocked@example.com", is_suspended=True)

    response = await client.get(API, headers=auth_headers(suspended))

    assert response.status_code == 403
