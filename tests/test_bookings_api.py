"""Test cases for booking and ticket API endpoints."""
from datetime import datetime, timedelta

from resort.bookings.ticket_service import TicketService
from resort.bookings.token_codec import BookingClaims, BookingTokenCodec
from resort.models import Booking
from tests.conftest import auth_headers
from tests.factories import AdminFactory, BookingFactory, UserFactory

BOOKINGS_URL = "/api/v1/bookings"


def booking_payload(**overrides):
    data = {
        "guest_name": "Asha Rawat",
        "email": "a@x.com",
        "phone": "+91 98000 00000",
        "check_in_date": "2026-11-01T12:00:00",
        "check_out_date": "2026-11-03T11:00:00",
        "number_of_person": 2,
    }
    data.update(overrides)
    return data


class TestCreateBooking:
    """Test creating bookings."""

    def test_create_booking(self, client, db_session):
        user = UserFactory()

        response = client.post(BOOKINGS_URL, json=booking_payload(), headers=auth_headers(user))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["booking"]["user_id"] == user.id
        assert body["booking"]["status"] == "success"
        assert body["booking"]["is_verified"] is False
        assert db_session.query(Booking).count() == 1

    def test_create_booking_requires_authentication(self, client):
        response = client.post(BOOKINGS_URL, json=booking_payload())

        assert response.status_code == 401

    def test_create_booking_rejects_bad_input(self, client, db_session):
        user = UserFactory()
        headers = auth_headers(user)

        assert client.post(BOOKINGS_URL, json=booking_payload(number_of_person=0), headers=headers).status_code == 422
        assert client.post(BOOKINGS_URL, json=booking_payload(guest_name="   "), headers=headers).status_code == 422
        assert client.post(BOOKINGS_URL, json=booking_payload(email="not-an-email"), headers=headers).status_code == 422

        payload = booking_payload()
        del payload["phone"]
        assert client.post(BOOKINGS_URL, json=payload, headers=headers).status_code == 422

    def test_check_out_before_check_in_is_accepted(self, client, db_session):
        user = UserFactory()

        response = client.post(
            BOOKINGS_URL,
            json=booking_payload(check_in_date="2026-11-05T12:00:00", check_out_date="2026-11-01T12:00:00"),
            headers=auth_headers(user)
        )

        assert response.status_code == 201

    def test_cookie_session_is_accepted(self, client, db_session):
        user = UserFactory()
        token = auth_headers(user)["Authorization"].split(" ", 1)[1]
        client.cookies.set("token", token)

        response = client.post(BOOKINGS_URL, json=booking_payload())

        assert response.status_code == 201


class TestUserBookings:
    """Test listing the current user's bookings."""

    def test_lists_own_bookings_only(self, client, db_session):
        user = UserFactory()
        BookingFactory.create_batch(3, user=user)
        BookingFactory.create_batch(2)

        response = client.get(f"{BOOKINGS_URL}/me", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["total_bookings"] == 3
        assert body["results"] == 3
        assert body["total_pages"] == 1
        assert all(b["user_id"] == user.id for b in body["data"])

    def test_pagination(self, client, db_session):
        user = UserFactory()
        BookingFactory.create_batch(12, user=user)

        response = client.get(f"{BOOKINGS_URL}/me", params={"page": 2}, headers=auth_headers(user))

        body = response.json()
        assert body["current_page"] == 2
        assert body["total_pages"] == 2
        assert body["results"] == 2

    def test_no_bookings(self, client, db_session):
        user = UserFactory()

        response = client.get(f"{BOOKINGS_URL}/me", headers=auth_headers(user))

        assert response.status_code == 404


class TestBookingsByDate:
    """Test the public occupancy endpoint."""

    def test_occupancy_for_date(self, client, db_session):
        BookingFactory(check_in_date=datetime(2026, 11, 1, 12), check_out_date=datetime(2026, 11, 3, 11),
                       number_of_person=2)
        BookingFactory(check_in_date=datetime(2026, 11, 2, 12), check_out_date=datetime(2026, 11, 4, 11),
                       number_of_person=3)
        BookingFactory(check_in_date=datetime(2026, 11, 10, 12), check_out_date=datetime(2026, 11, 12, 11))

        response = client.get(f"{BOOKINGS_URL}/date", params={"date": "2026-11-02"})

        assert response.status_code == 200
        body = response.json()
        assert body["total_bookings"] == 2
        assert body["total_guests"] == 5
        assert "guest_name" not in body["bookings"][0]
        assert "email" not in body["bookings"][0]

    def test_invalid_date(self, client):
        response = client.get(f"{BOOKINGS_URL}/date", params={"date": "tomorrow"})

        assert response.status_code == 422


class TestTicketEndpoint:
    """Test GET /bookings/{id}/ticket."""

    def test_returns_pdf(self, client, db_session):
        user = UserFactory()
        booking = BookingFactory(user=user)

        response = client.get(f"{BOOKINGS_URL}/{booking.id}/ticket", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == f"inline; filename=booking-{booking.id}.pdf"
        assert response.content.startswith(b"%PDF")

    def test_missing_booking(self, client, db_session):
        user = UserFactory()

        response = client.get(f"{BOOKINGS_URL}/9999/ticket", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Booking not found"}

    def test_other_users_booking_looks_missing(self, client, db_session):
        booking = BookingFactory()
        stranger = UserFactory()

        response = client.get(f"{BOOKINGS_URL}/{booking.id}/ticket", headers=auth_headers(stranger))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Booking not found"}

    def test_admin_can_fetch_any_ticket(self, client, db_session):
        booking = BookingFactory()
        admin = AdminFactory()

        response = client.get(f"{BOOKINGS_URL}/{booking.id}/ticket", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_requires_authentication(self, client, db_session):
        booking = BookingFactory()

        response = client.get(f"{BOOKINGS_URL}/{booking.id}/ticket")

        assert response.status_code == 401


class TestVerifyEndpoint:
    """Test GET /bookings/verify (ticket redemption)."""

    def setup_method(self):
        self.codec = BookingTokenCodec.from_settings()

    def test_redeem_once_then_rejected(self, client, db_session):
        operator = UserFactory()
        booking = BookingFactory(email="a@x.com")
        token = TicketService(db_session, self.codec).issue_ticket(booking.id).token

        first = client.get(f"{BOOKINGS_URL}/verify", params={"token": token}, headers=auth_headers(operator))

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["booking"]["id"] == booking.id
        assert first.json()["booking"]["is_verified"] is True

        second = client.get(f"{BOOKINGS_URL}/verify", params={"token": token}, headers=auth_headers(operator))

        assert second.status_code == 400
        assert second.json()["success"] is False

        db_session.expire_all()
        assert db_session.get(Booking, booking.id).is_verified is True

    def test_token_signed_with_wrong_secret(self, client, db_session):
        operator = UserFactory()
        booking = BookingFactory()
        forged = BookingTokenCodec("forger-secret-0123456789-abcdefghijklmnop").issue(
            BookingClaims(booking_id=booking.id, email=booking.email)
        )

        response = client.get(f"{BOOKINGS_URL}/verify", params={"token": forged}, headers=auth_headers(operator))

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid or expired token"}
        db_session.expire_all()
        assert db_session.get(Booking, booking.id).is_verified is False

    def test_expired_and_garbage_tokens_share_one_response(self, client, db_session):
        operator = UserFactory()
        booking = BookingFactory()
        expired = self.codec.issue(
            BookingClaims(booking_id=booking.id, email=booking.email), ttl=timedelta(seconds=-1)
        )

        expired_response = client.get(f"{BOOKINGS_URL}/verify", params={"token": expired},
                                      headers=auth_headers(operator))
        garbage_response = client.get(f"{BOOKINGS_URL}/verify", params={"token": "garbage"},
                                      headers=auth_headers(operator))

        assert expired_response.status_code == garbage_response.status_code == 401
        assert expired_response.json() == garbage_response.json()

    def test_unknown_booking_and_email_mismatch_share_one_response(self, client, db_session):
        operator = UserFactory()
        booking = BookingFactory(email="a@x.com")
        unknown = self.codec.issue(BookingClaims(booking_id=booking.id + 1000, email="a@x.com"))
        mismatch = self.codec.issue(BookingClaims(booking_id=booking.id, email="b@x.com"))

        unknown_response = client.get(f"{BOOKINGS_URL}/verify", params={"token": unknown},
                                      headers=auth_headers(operator))
        mismatch_response = client.get(f"{BOOKINGS_URL}/verify", params={"token": mismatch},
                                       headers=auth_headers(operator))

        assert unknown_response.status_code == mismatch_response.status_code == 404
        assert unknown_response.json() == mismatch_response.json() == {
            "success": False, "message": "Invalid or fake booking"
        }

    def test_requires_authentication(self, client, db_session):
        booking = BookingFactory()
        token = self.codec.issue(BookingClaims(booking_id=booking.id, email=booking.email))

        response = client.get(f"{BOOKINGS_URL}/verify", params={"token": token})

        assert response.status_code == 401
        db_session.expire_all()
        assert db_session.get(Booking, booking.id).is_verified is False

    def test_missing_token(self, client, db_session):
        operator = UserFactory()

        response = client.get(f"{BOOKINGS_URL}/verify", headers=auth_headers(operator))

        assert response.status_code == 422
