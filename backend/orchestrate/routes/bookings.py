from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from orchestrate.database import get_db
from orchestrate.dependencies import get_current_principal, get_optional_principal
from orchestrate.permissions import Principal
from orchestrate.schemas.booking import BookingCreate, BookingUpdate
from orchestrate.services import booking_service
from orchestrate.services.visibility import booking_to_dict

router = APIRouter()


@router.get("/rooms")
def get_rooms(db: Session = Depends(get_db)):
    """Get all rooms"""
    return [
        {
            "id": r.id,
            "name": r.name,
            "capacity": r.capacity,
            "equipment": r.equipment,
            "location": r.location
        }
        for r in booking_service.list_rooms(db)
    ]


@router.get("/")
def get_bookings(
    day: Optional[date] = Query(None, alias="date"),
    viewer: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db)
):
    """Get bookings, filtered to what the caller may see"""
    return booking_service.list_bookings(db, viewer, day=day)


@router.get("/public")
def get_bookings_public(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Get bookings for the public terminal"""
    return booking_service.list_bookings(db, None, day=day, public=True)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    viewer: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db)
):
    """Book a room - as a signed-in user, or as a guest when anonymous"""
    booking = booking_service.create_booking(db, viewer, data)
    return booking_to_dict(booking)


@router.put("/{booking_id}")
def update_booking(
    booking_id: int,
    data: BookingUpdate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Update booking"""
    booking = booking_service.update_booking(db, viewer, booking_id, data)
    return booking_to_dict(booking)


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: int,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Cancel booking"""
    booking_service.delete_booking(db, viewer, booking_id)
    return {"success": True, "message": "Booking cancelled successfully"}
