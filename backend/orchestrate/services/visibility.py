"""Role-appropriate views of booking lists.

``project_bookings`` is pure and keeps the input order.
"""

from typing import Callable, Dict, Iterable, List, Optional

from orchestrate.models.booking import Booking
from orchestrate.models.user import UserRole
from orchestrate.permissions import Principal

MASKED_TITLE = "Booked"

# Fields hidden from STAFF on bookings they do not own
_STAFF_MASKED_FIELDS = ("user", "user_id", "guest_name", "guest_email", "description", "attendees")


def _iso(value):
    return value.isoformat() if value else None


def booking_to_dict(b: Booking) -> dict:
    return {
        "id": b.id,
        "room_id": b.room_id,
        "room": {
            "id": b.room.id,
            "name": b.room.name,
            "capacity": b.room.capacity,
            "equipment": b.room.equipment,
            "location": b.room.location,
        } if b.room else None,
        "start_time": _iso(b.start_time),
        "end_time": _iso(b.end_time),
        "title": b.title,
        "description": b.description,
        "attendees": b.attendees,
        "status": b.status.value,
        "is_external": b.is_external,
        "guest_name": b.guest_name,
        "guest_email": b.guest_email,
        "user_id": b.user_id,
        "user": {
            "id": b.user.id,
            "name": b.user.name,
            "email": b.user.email,
        } if b.user else None,
        "created_at": _iso(b.created_at),
    }


def public_booking_to_dict(b: Booking) -> dict:
    return {
        "id": b.id,
        "room_id": b.room_id,
        "start_time": _iso(b.start_time),
        "end_time": _iso(b.end_time),
        "title": b.title,
        "status": b.status.value,
        "guest_name": b.guest_name,
        "booker_name": b.user.name if b.user else None,
    }


def _masked_booking_to_dict(b: Booking) -> dict:
    data = booking_to_dict(b)
    data["title"] = MASKED_TITLE
    for field in _STAFF_MASKED_FIELDS:
        data[field] = None
    return data


def _public_view(bookings: Iterable[Booking], viewer: Optional[Principal]) -> List[dict]:
    return [public_booking_to_dict(b) for b in bookings]


def _staff_view(bookings: Iterable[Booking], viewer: Principal) -> List[dict]:
    return [
        booking_to_dict(b) if b.user_id == viewer.id else _masked_booking_to_dict(b)
        for b in bookings
    ]


def _full_view(bookings: Iterable[Booking], viewer: Principal) -> List[dict]:
    return [booking_to_dict(b) for b in bookings]


_ROLE_VIEWS: Dict[UserRole, Callable] = {
    UserRole.ADMIN: _full_view,
    UserRole.PROJECT_MANAGER: _full_view,
    UserRole.DEVELOPER: _full_view,
    UserRole.STAFF: _staff_view,
    UserRole.PUBLIC: _public_view,
}


def project_bookings(bookings: Iterable[Booking], viewer: Optional[Principal], public: bool = False) -> List[dict]:
    """Transform raw bookings into the view ``viewer`` is allowed to see."""
    if public or viewer is None:
        return _public_view(bookings, viewer)
    return _ROLE_VIEWS[viewer.role](bookings, viewer)


_missing = set(UserRole) - set(_ROLE_VIEWS)
if _missing:
    raise RuntimeError(f"Roles without a booking view: {sorted(r.value for r in _missing)}")
