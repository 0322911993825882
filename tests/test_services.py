import pytest

from availability import ROOM_PRICES
from services import (
    BookingService,
    ContactService,
    NewsletterService,
    NotFoundError,
    ValidationError,
)


def _request(**overrides):
    data = {
        "roomType": "suites",
        "checkIn": "2024-06-01",
        "checkOut": "2024-06-04",
        "guests": 2,
        "name": "Jana Novak",
        "email": "jana@example.com",
        "phone": "+421 900 000 000",
        "specialRequests": "Late arrival",
    }
    data.update(overrides)
    return data


@pytest.fixture
def bookings(store, notifier) -> BookingService:
    return BookingService(store, notifier)


def test_booking_prices_suites_for_three_nights(bookings, store, notifier):
    booking = bookings.create_booking(_request())

    assert booking["nights"] == 3
    assert booking["totalPrice"] == 630
    assert booking["reference"].startswith("BK-")
    assert store.load("bookings") == [booking]

    assert len(notifier.sent) == 1
    sent = notifier.sent[0]
    assert sent["to"] == "jana@example.com"
    assert booking["reference"] in sent["subject"]
    assert "SUITES" in sent["html"]
    assert "630" in sent["html"]


@pytest.mark.parametrize("room_type", sorted(ROOM_PRICES))
def test_total_is_nights_times_price(bookings, room_type):
    booking = bookings.create_booking(
        _request(roomType=room_type, checkIn="2024-07-10", checkOut="2024-07-17")
    )
    assert booking["nights"] == 7
    assert booking["totalPrice"] == 7 * ROOM_PRICES[room_type]


def test_partial_days_round_up(bookings):
    booking = bookings.create_booking(
        _request(checkIn="2024-06-01T15:00:00", checkOut="2024-06-02T11:00:00")
    )
    assert booking["nights"] == 1


@pytest.mark.parametrize("field", ["roomType", "checkIn", "checkOut", "name", "email"])
def test_missing_required_field(bookings, field):
    with pytest.raises(ValidationError, match="Missing required fields"):
        bookings.create_booking(_request(**{field: ""}))


def test_optional_fields_may_be_absent(bookings):
    data = _request()
    for key in ("guests", "phone", "specialRequests"):
        data.pop(key)

    booking = bookings.create_booking(data)

    assert booking["guests"] is None
    assert booking["phone"] is None
    assert booking["specialRequests"] is None


def test_missing_fields_checked_before_room_type(bookings):
    with pytest.raises(ValidationError, match="Missing required fields"):
        bookings.create_booking(_request(roomType="penthouse", email=""))


def test_invalid_room_type(bookings, store):
    with pytest.raises(ValidationError, match="Invalid room type"):
        bookings.create_booking(_request(roomType="penthouse"))
    assert store.load("bookings") == []


@pytest.mark.parametrize("check_out", ["2024-06-01", "2024-05-30"])
def test_check_out_must_follow_check_in(bookings, check_out):
    with pytest.raises(ValidationError, match="Check-out must be after check-in"):
        bookings.create_booking(_request(checkOut=check_out))


def test_unparseable_dates(bookings):
    with pytest.raises(ValidationError, match="Invalid date format"):
        bookings.create_booking(_request(checkIn="next friday"))


def test_references_are_unique(bookings):
    references = {bookings.create_booking(_request())["reference"] for _ in range(25)}
    assert len(references) == 25


def test_reference_skips_taken_values(bookings, monkeypatch):
    tokens = iter("AAAAAAAA" + "BBBBBBBB")
    monkeypatch.setattr("services.secrets.choice", lambda alphabet: next(tokens))

    assert bookings._new_reference([{"reference": "BK-AAAAAAAA"}]) == "BK-BBBBBBBB"


def test_notification_failure_keeps_booking(store, failing_notifier):
    service = BookingService(store, failing_notifier)

    booking = service.create_booking(_request())

    assert store.load("bookings") == [booking]


def test_find_booking(bookings):
    booking = bookings.create_booking(_request())
    assert bookings.find_booking(booking["reference"]) == booking


def test_find_unknown_booking(bookings):
    with pytest.raises(NotFoundError):
        bookings.find_booking("BK-ZZZZZZ")


def test_availability_counts_stored_bookings(bookings):
    bookings.create_booking(_request(roomType="rooms"))

    availability = bookings.availability("2024-06-01", "2024-06-04")

    assert availability["rooms"] == 47
    assert availability["suites"] == 29


def test_non_overlapping_bookings_do_not_reduce_availability(bookings):
    bookings.create_booking(_request(roomType="rooms", checkIn="2024-06-01", checkOut="2024-06-04"))

    assert bookings.availability("2024-06-04", "2024-06-06")["rooms"] == 48


def test_availability_requires_dates(bookings):
    with pytest.raises(ValidationError, match="dates required"):
        bookings.availability("", "2024-06-04")


def test_contact_submission(store, notifier):
    service = ContactService(store, notifier)

    contact_id = service.submit(
        {"name": "Peter", "email": "peter@example.com", "message": "Do you allow dogs?"}
    )

    contacts = store.load("contacts")
    assert [c["id"] for c in contacts] == [contact_id]
    assert contacts[0]["phone"] is None
    assert contacts[0]["submittedAt"].endswith("Z")
    assert notifier.sent[0]["subject"] == "Thank you for contacting Kaskady"


def test_contact_ids_are_unique(store, notifier):
    service = ContactService(store, notifier)
    data = {"name": "Peter", "email": "peter@example.com", "message": "Hello"}

    ids = {service.submit(data) for _ in range(10)}

    assert len(ids) == 10


@pytest.mark.parametrize("field", ["name", "email", "message"])
def test_contact_requires_fields(store, notifier, field):
    data = {"name": "Peter", "email": "peter@example.com", "message": "Hello"}
    data[field] = "   "

    with pytest.raises(ValidationError, match="required"):
        ContactService(store, notifier).submit(data)
    assert notifier.sent == []


def test_contact_escapes_name_in_email(store, notifier):
    ContactService(store, notifier).submit(
        {"name": "<b>Eve</b>", "email": "eve@example.com", "message": "Hi"}
    )
    assert "<b>Eve</b>" not in notifier.sent[0]["html"]


def test_newsletter_is_idempotent(store, notifier):
    service = NewsletterService(store, notifier)

    assert service.subscribe("fan@example.com") is True
    assert service.subscribe("fan@example.com") is False

    assert store.load("subscribers") == ["fan@example.com"]
    assert len(notifier.sent) == 1


def test_newsletter_requires_email(store, notifier):
    with pytest.raises(ValidationError, match="Email required"):
        NewsletterService(store, notifier).subscribe(None)


def test_find_booking_requires_exact_reference(bookings):
    booking = bookings.create_booking(_request())

    with pytest.raises(NotFoundError):
        bookings.find_booking(booking["reference"] + " ")
    with pytest.raises(NotFoundError):
        bookings.find_booking(booking["reference"].lower())
