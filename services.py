import logging
import secrets
from datetime import datetime
from html import escape
from typing import Optional
from uuid import uuid4

from availability import (
    ROOM_COUNTS,
    ROOM_PRICES,
    calculate_availability,
    count_nights,
    parse_date,
)
from storage import RecordStore

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "BK-"
REFERENCE_LENGTH = 8
REFERENCE_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class HotelError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HotelError):
    status_code = 400


class NotFoundError(HotelError):
    status_code = 404


def _clean(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _optional(value):
    cleaned = _clean(value)
    return cleaned or None


def _utcnow_iso() -> str:
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def _send(notifier, to: str, subject: str, html_body: str) -> None:
    # Records are already persisted here; a failed email must not undo them.
    try:
        notifier.notify(to, subject, html_body)
    except Exception:
        logger.exception("Notification to %s failed", to)


def parse_date_range(check_in, check_out):
    start = parse_date(check_in)
    end = parse_date(check_out)
    if start is None or end is None:
        raise ValidationError("Invalid date format.")
    if start >= end:
        raise ValidationError("Check-out must be after check-in.")
    return start, end


class BookingService:
    def __init__(self, store: RecordStore, notifier, prices=None, counts=None):
        self.store = store
        self.notifier = notifier
        self.prices = ROOM_PRICES if prices is None else prices
        self.counts = ROOM_COUNTS if counts is None else counts

    def _new_reference(self, bookings) -> str:
        taken = {booking.get("reference") for booking in bookings if isinstance(booking, dict)}
        while True:
            token = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
            reference = REFERENCE_PREFIX + token
            if reference not in taken:
                return reference

    def create_booking(self, data: dict) -> dict:
        room_type = _clean(data.get("roomType"))
        check_in = _clean(data.get("checkIn"))
        check_out = _clean(data.get("checkOut"))
        name = _clean(data.get("name"))
        email = _clean(data.get("email"))

        if not room_type or not check_in or not check_out or not name or not email:
            raise ValidationError("Missing required fields.")
        if room_type not in self.prices:
            raise ValidationError("Invalid room type.")

        start, end = parse_date_range(check_in, check_out)
        nights = count_nights(start, end)
        total_price = nights * self.prices[room_type]

        bookings = self.store.load("bookings")
        booking = {
            "reference": self._new_reference(bookings),
            "roomType": room_type,
            "checkIn": check_in,
            "checkOut": check_out,
            "guests": data.get("guests"),
            "name": name,
            "email": email,
            "phone": _optional(data.get("phone")),
            "specialRequests": _optional(data.get("specialRequests")),
            "nights": nights,
            "totalPrice": total_price,
            "bookedAt": _utcnow_iso(),
        }
        bookings.append(booking)
        self.store.save("bookings", bookings)
        logger.info("Booking %s stored for %s (%s nights)", booking["reference"], room_type, nights)

        _send(
            self.notifier,
            email,
            f"Booking Confirmation: {booking['reference']}",
            "<h1>Booking Confirmed</h1>"
            f"<p>Reference: <strong>{booking['reference']}</strong></p>"
            f"<p>Room: {escape(room_type.upper())}</p>"
            f"<p>Nights: {nights}</p>"
            f'<p>Total Price: <span style="color:#d4af37">&euro;{total_price}</span></p>',
        )
        return booking

    def find_booking(self, reference: str) -> dict:
        for booking in self.store.load("bookings"):
            if isinstance(booking, dict) and booking.get("reference") == reference:
                return booking
        raise NotFoundError("Booking not found.")

    def availability(self, check_in, check_out):
        if not _clean(check_in) or not _clean(check_out):
            raise ValidationError("Check-in and check-out dates required.")
        start, end = parse_date_range(check_in, check_out)
        return calculate_availability(start, end, self.store.load("bookings"), self.counts)


class ContactService:
    def __init__(self, store: RecordStore, notifier):
        self.store = store
        self.notifier = notifier

    def submit(self, data: dict) -> str:
        name = _clean(data.get("name"))
        email = _clean(data.get("email"))
        message = _clean(data.get("message"))

        if not name or not email or not message:
            raise ValidationError("Name, email, and message are required.")

        contacts = self.store.load("contacts")
        entry = {
            "id": uuid4().hex,
            "name": name,
            "email": email,
            "phone": _optional(data.get("phone")),
            "message": message,
            "submittedAt": _utcnow_iso(),
        }
        contacts.append(entry)
        self.store.save("contacts", contacts)

        _send(
            self.notifier,
            email,
            "Thank you for contacting Kaskady",
            f"<h1>Thank you, {escape(name)}</h1>"
            "<p>We have received your message and will get back to you shortly.</p>",
        )
        return entry["id"]


class NewsletterService:
    def __init__(self, store: RecordStore, notifier):
        self.store = store
        self.notifier = notifier

    def subscribe(self, email: Optional[str]) -> bool:
        """Add ``email`` to the list; returns False if it was already there."""
        email = _clean(email)
        if not email:
            raise ValidationError("Email required.")

        subscribers = self.store.load("subscribers")
        if email in subscribers:
            return False

        subscribers.append(email)
        self.store.save("subscribers", subscribers)
        _send(
            self.notifier,
            email,
            "Welcome to Kaskady",
            "<h1>Welcome!</h1><p>You have been subscribed to our newsletter.</p>",
        )
        return True
