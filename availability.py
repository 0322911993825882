import math
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Optional

ROOM_PRICES = {
    "rooms": 120,
    "suites": 210,
    "lux": 280,
    "prestige": 320,
}

ROOM_COUNTS = {
    "rooms": 48,
    "suites": 29,
    "lux": 15,
    "prestige": 6,
}

SECONDS_PER_DAY = 60 * 60 * 24


def room_catalogue():
    return [
        {"type": room_type, "total": ROOM_COUNTS[room_type], "price": ROOM_PRICES[room_type]}
        for room_type in ROOM_COUNTS
    ]


def parse_date(value) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` or an ISO-8601 datetime into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError:
            return None
    return parsed


def count_nights(start: datetime, end: datetime) -> int:
    """Whole nights between two instants, rounding partial days up."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    # Half-open ranges: touching endpoints are not an overlap.
    return start < other_end and end > other_start


def calculate_availability(
    start: datetime,
    end: datetime,
    bookings: Iterable[dict],
    counts: Optional[Dict[str, int]] = None,
) -> Dict[str, int]:
    counts = ROOM_COUNTS if counts is None else counts
    booked = {room_type: 0 for room_type in counts}

    for booking in bookings:
        if not isinstance(booking, dict):
            continue
        room_type = booking.get("roomType")
        if room_type not in booked:
            continue
        booking_start = parse_date(booking.get("checkIn"))
        booking_end = parse_date(booking.get("checkOut"))
        if booking_start is None or booking_end is None:
            continue
        if overlaps(start, end, booking_start, booking_end):
            booked[room_type] += 1

    return {room_type: max(0, total - booked[room_type]) for room_type, total in counts.items()}
