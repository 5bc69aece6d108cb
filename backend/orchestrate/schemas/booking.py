from pydantic import EmailStr
from typing import Optional
from datetime import datetime
from orchestrate.schemas.common import BlankAsNullModel


class BookingCreate(BlankAsNullModel):
    room_id: int
    start_time: datetime
    end_time: datetime
    title: str
    description: Optional[str] = None
    attendees: Optional[str] = None
    is_external: bool = False
    guest_name: Optional[str] = None
    guest_email: Optional[EmailStr] = None


class BookingUpdate(BlankAsNullModel):
    room_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    title: Optional[str] = None
    description: Optional[str] = None
    attendees: Optional[str] = None
