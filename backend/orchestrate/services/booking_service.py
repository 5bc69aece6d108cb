"""Room bookings: overlap checking and permission-gated mutation.

A booking's overlap check and its write happen in one transaction that first
locks the target room row, so two requests for the same slot cannot both
pass the check. On SQLite the engine begins every transaction with
``BEGIN IMMEDIATE`` (see ``orchestrate.database``), which serializes writers
the same way.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from orchestrate.errors import ConflictError, Forbidden, NotFound, ValidationError
from orchestrate.models.booking import Booking, BookingStatus
from orchestrate.models.room import Room
from orchestrate.permissions import Action, Principal, can
from orchestrate.schemas.booking import BookingCreate, BookingUpdate
from orchestrate.services.updates import changes_from
from orchestrate.services.visibility import project_bookings
from orchestrate.utils.dates import day_bounds, to_naive_utc

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Room is already booked for this time slot"


def has_conflict(
    db: Session,
    room_id: int,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """Return True if ``[start, end)`` overlaps an existing booking in the room.

    Intervals are half-open: a booking ending at 11:00 does not conflict with
    one starting at 11:00. The caller guarantees ``start < end``.
    """
    query = db.query(Booking.id).filter(
        Booking.room_id == room_id,
        Booking.start_time < end,
        Booking.end_time > start,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return db.query(query.exists()).scalar()


def _validate_interval(start: datetime, end: datetime) -> None:
    if start >= end:
        raise ValidationError("End time must be after start time")


def _lock_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).with_for_update().first()
    if not room:
        raise NotFound("Room not found")
    return room


def _get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFound("Booking not found")
    return booking


def _ensure_can_modify(viewer: Principal, booking: Booking) -> None:
    if booking.user_id is not None and booking.user_id == viewer.id:
        return
    if not can(viewer, Action.MANAGE_BOOKINGS):
        raise Forbidden()


def list_rooms(db: Session) -> List[Room]:
    return db.query(Room).order_by(Room.name).all()


def list_bookings(
    db: Session,
    viewer: Optional[Principal],
    day: Optional[date] = None,
    public: bool = False,
) -> List[dict]:
    """List bookings (optionally for one calendar day) as ``viewer`` may see them."""
    query = db.query(Booking).options(joinedload(Booking.room), joinedload(Booking.user))
    if day is not None:
        day_start, day_end = day_bounds(day)
        query = query.filter(Booking.start_time >= day_start, Booking.start_time < day_end)

    bookings = query.order_by(Booking.start_time.asc()).all()
    return project_bookings(bookings, viewer, public=public)


def create_booking(db: Session, viewer: Optional[Principal], data: BookingCreate) -> Booking:
    """Create a booking for an internal user or, when anonymous, for a guest."""
    start = to_naive_utc(data.start_time)
    end = to_naive_utc(data.end_time)
    _validate_interval(start, end)

    # Anonymous callers can only make guest bookings
    is_external = data.is_external or viewer is None
    if is_external and not data.guest_name:
        raise ValidationError("Guest name is required for external bookings")

    _lock_room(db, data.room_id)
    if has_conflict(db, data.room_id, start, end):
        db.rollback()
        raise ConflictError(CONFLICT_MESSAGE)

    booking = Booking(
        room_id=data.room_id,
        start_time=start,
        end_time=end,
        title=data.title,
        description=data.description,
        attendees=data.attendees,
        is_external=is_external,
        user_id=None if is_external else viewer.id,
        guest_name=data.guest_name if is_external else None,
        guest_email=data.guest_email if is_external else None,
        status=BookingStatus.CONFIRMED,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info(
        "Booking #%d created in room %d for %s - %s (%s)",
        booking.id, booking.room_id, start.isoformat(), end.isoformat(),
        "guest" if is_external else f"user {viewer.id}",
    )
    return booking


def update_booking(db: Session, viewer: Principal, booking_id: int, data: BookingUpdate) -> Booking:
    """Move or edit a booking. Only the owner or a manager-tier role may do this."""
    booking = _get_booking(db, booking_id)
    _ensure_can_modify(viewer, booking)

    changes = changes_from(data)
    start = to_naive_utc(changes["start_time"].resolve(booking.start_time, nullable=False))
    end = to_naive_utc(changes["end_time"].resolve(booking.end_time, nullable=False))
    room_id = changes["room_id"].resolve(booking.room_id, nullable=False)
    _validate_interval(start, end)

    _lock_room(db, room_id)
    if has_conflict(db, room_id, start, end, exclude_booking_id=booking.id):
        db.rollback()
        raise ConflictError(CONFLICT_MESSAGE)

    booking.room_id = room_id
    booking.start_time = start
    booking.end_time = end
    booking.title = changes["title"].resolve(booking.title, nullable=False)
    booking.description = changes["description"].resolve(booking.description)
    booking.attendees = changes["attendees"].resolve(booking.attendees)
    db.commit()
    db.refresh(booking)

    logger.info("Booking #%d updated by user %d", booking.id, viewer.id)
    return booking


def delete_booking(db: Session, viewer: Principal, booking_id: int) -> None:
    booking = _get_booking(db, booking_id)
    _ensure_can_modify(viewer, booking)

    db.delete(booking)
    db.commit()
    logger.info("Booking #%d cancelled by user %d", booking_id, viewer.id)
