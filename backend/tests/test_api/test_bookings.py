"""Tests for booking endpoints: request, list, detail, transitions."""

import uuid

import pytest
from httpx import AsyncClient

from villamarket.models.user import User
from villamarket.models.villa import Villa

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _request_booking(
    client: AsyncClient,
    villa: Villa,
    headers: dict,
    check_in: str = "2031-03-10",
    check_out: str = "2031-03-13",
    num_guests: int = 2,
):
    return await client.post(
        "/api/v1/bookings",
        json={
            "villa_id": str(villa.id),
            "check_in": check_in,
            "check_out": check_out,
            "num_guests": num_guests,
            "guest_message": "We are celebrating an anniversary.",
        },
        headers=headers,
    )


async def _calendar(client: AsyncClient, villa: Villa, date_from: str, date_to: str) -> dict[str, str]:
    response = await client.get(
        f"/api/v1/villas/{villa.id}/availability", params={"date_from": date_from, "date_to": date_to}
    )
    assert response.status_code == 200
    return response.json()["days"]


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    """Tests for requesting bookings."""

    async def test_create_success(self, client: AsyncClient, villa: Villa, guest_user: User, guest_headers: dict):
        response = await _request_booking(client, villa, guest_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["guest_id"] == str(guest_user.id)
        assert data["host_id"] == str(villa.host_id)
        assert float(data["total_price"]) == 350.00
        assert data["check_in"] == "2031-03-10"

    async def test_pending_leaves_calendar_open(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        await _request_booking(client, villa, guest_headers)
        days = await _calendar(client, villa, "2031-03-10", "2031-03-12")
        assert set(days.values()) == {"available"}

    async def test_check_out_before_check_in(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        response = await _request_booking(client, villa, guest_headers, "2031-03-13", "2031-03-10")
        assert response.status_code == 422

    async def test_minimum_nights(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        response = await _request_booking(client, villa, guest_headers, "2031-03-10", "2031-03-11")
        assert response.status_code == 400
        assert response.json()["error_code"] == "MINIMUM_NIGHTS_NOT_MET"

    async def test_too_many_guests(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        response = await _request_booking(client, villa, guest_headers, num_guests=9)
        assert response.status_code == 400
        assert response.json()["error_code"] == "GUEST_LIMIT_EXCEEDED"

    async def test_self_booking(self, client: AsyncClient, villa: Villa, host_headers: dict):
        response = await _request_booking(client, villa, host_headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "SELF_BOOKING_NOT_ALLOWED"

    async def test_unknown_villa(self, client: AsyncClient, guest_headers: dict):
        response = await client.post(
            "/api/v1/bookings",
            json={
                "villa_id": str(uuid.uuid4()),
                "check_in": "2031-03-10",
                "check_out": "2031-03-13",
                "num_guests": 2,
                "guest_message": "Hi",
            },
            headers=guest_headers,
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "VILLA_NOT_AVAILABLE"

    async def test_blocked_dates(self, client: AsyncClient, villa: Villa, host_headers: dict, guest_headers: dict):
        await client.patch(
            f"/api/v1/villas/{villa.id}/availability",
            json={"dates": [{"date": "2031-03-11", "status": "blocked"}]},
            headers=host_headers,
        )
        response = await _request_booking(client, villa, guest_headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "DATES_NOT_AVAILABLE"

    async def test_requires_auth(self, client: AsyncClient, villa: Villa):
        response = await _request_booking(client, villa, {})
        assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# GET /api/v1/bookings, GET /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestReadBookings:
    async def test_list_for_both_parties(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict, other_guest_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()

        for headers in (guest_headers, host_headers):
            response = await client.get("/api/v1/bookings", headers=headers)
            assert response.status_code == 200
            assert [b["id"] for b in response.json()["items"]] == [booking["id"]]

        response = await client.get("/api/v1/bookings", headers=other_guest_headers)
        assert response.json()["total"] == 0

    async def test_role_filter(self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict):
        await _request_booking(client, villa, guest_headers)
        response = await client.get("/api/v1/bookings", params={"role": "guest"}, headers=host_headers)
        assert response.json()["total"] == 0
        response = await client.get("/api/v1/bookings", params={"role": "host"}, headers=host_headers)
        assert response.json()["total"] == 1

    async def test_status_filter(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        await _request_booking(client, villa, guest_headers)
        response = await client.get("/api/v1/bookings", params={"status": "confirmed"}, headers=guest_headers)
        assert response.json()["total"] == 0

    async def test_detail_includes_names(
        self, client: AsyncClient, villa: Villa, host_user: User, guest_user: User, guest_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["villa_title"] == villa.title
        assert data["host_name"] == host_user.name
        assert data["guest_name"] == guest_user.name

    async def test_detail_hidden_from_strangers(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, other_guest_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=other_guest_headers)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# PATCH /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestUpdateBooking:
    async def test_confirm_books_the_nights(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        days = await _calendar(client, villa, "2031-03-09", "2031-03-13")
        assert days == {
            "2031-03-09": "available",
            "2031-03-10": "booked",
            "2031-03-11": "booked",
            "2031-03-12": "booked",
            "2031-03-13": "available",
        }

    async def test_guest_cannot_confirm(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=guest_headers
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "HOST_ONLY_ACTION"

    async def test_first_confirmation_wins(
        self,
        client: AsyncClient,
        villa: Villa,
        guest_headers: dict,
        other_guest_headers: dict,
        host_headers: dict,
    ):
        first = (await _request_booking(client, villa, guest_headers)).json()
        second = (await _request_booking(client, villa, other_guest_headers, "2031-03-11", "2031-03-14")).json()

        response = await client.patch(
            f"/api/v1/bookings/{first['id']}", json={"status": "confirmed"}, headers=host_headers
        )
        assert response.status_code == 200

        response = await client.get(f"/api/v1/bookings/{second['id']}", headers=other_guest_headers)
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "dates_unavailable"

        response = await client.patch(
            f"/api/v1/bookings/{second['id']}", json={"status": "confirmed"}, headers=host_headers
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATUS_TRANSITION"

    async def test_cancel_requires_reason(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}", json={"status": "cancelled"}, headers=guest_headers
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "CANCELLATION_REASON_REQUIRED"

    async def test_cancel_confirmed_reopens_calendar(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        await client.patch(f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=host_headers)

        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}",
            json={"status": "cancelled", "cancellation_reason": "change_of_plans", "cancellation_message": "Sorry!"},
            headers=guest_headers,
        )
        assert response.status_code == 200
        assert response.json()["cancellation_message"] == "Sorry!"

        days = await _calendar(client, villa, "2031-03-10", "2031-03-12")
        assert set(days.values()) == {"available"}

    async def test_complete_before_check_out(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        await client.patch(f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=host_headers)
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}", json={"status": "completed"}, headers=host_headers
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "STAY_NOT_FINISHED"

    async def test_instructions_without_status(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, host_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}",
            json={"check_in_instructions": "Ask for Sam at the gate"},
            headers=host_headers,
        )
        assert response.status_code == 200
        assert response.json()["check_in_instructions"] == "Ask for Sam at the gate"
        assert response.json()["status"] == "pending"

    async def test_empty_update_rejected(self, client: AsyncClient, villa: Villa, guest_headers: dict):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(f"/api/v1/bookings/{booking['id']}", json={}, headers=guest_headers)
        assert response.status_code == 422

    async def test_stranger_cannot_update(
        self, client: AsyncClient, villa: Villa, guest_headers: dict, other_guest_headers: dict
    ):
        booking = (await _request_booking(client, villa, guest_headers)).json()
        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}",
            json={"status": "cancelled", "cancellation_reason": "spite"},
            headers=other_guest_headers,
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "ACCESS_DENIED"
